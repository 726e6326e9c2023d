"""
Audience filtering over the tagged-span tree.

Filtering is a pure function of the parsed spans and the target audience:
untagged text passes through, blocks for other audiences vanish together
with everything nested in them.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .nodes import AudienceBlockNode, MarkdownAST, MarkdownNode, TextNode
from .parser import parse_audience_markup


def render_for_audience(ast: Iterable[MarkdownNode], audience: str) -> str:
    parts = []
    for node in ast:
        if isinstance(node, TextNode):
            parts.append(node.text)
        elif isinstance(node, AudienceBlockNode):
            if node.matches(audience):
                parts.append(render_for_audience(node.body, audience))
        else:
            raise TypeError(f"Unknown node type: {type(node).__name__}")
    return "".join(parts)


def filter_audience(text: str, audience: str, source: Optional[str] = None) -> str:
    """Strip blocks not addressed to `audience` from Markdown text."""
    ast: MarkdownAST = parse_audience_markup(text, source)
    return render_for_audience(ast, audience)


__all__ = ["render_for_audience", "filter_audience"]
