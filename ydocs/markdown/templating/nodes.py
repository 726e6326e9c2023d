"""
Tagged-span model for audience-conditional Markdown.

A document is parsed once into a sequence of spans; untagged text is a
TextNode, tagged content is an AudienceBlockNode holding its own spans.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class MarkdownNode:
    pass


@dataclass(frozen=True)
class TextNode(MarkdownNode):
    """Untagged content, passed through unchanged."""
    text: str


@dataclass(frozen=True)
class AudienceBlockNode(MarkdownNode):
    """Content visible only to the listed audiences."""
    audiences: Tuple[str, ...]
    body: Tuple[MarkdownNode, ...]

    def matches(self, audience: str) -> bool:
        return audience in self.audiences


MarkdownAST = List[MarkdownNode]


def collect_audiences(ast: MarkdownAST) -> set[str]:
    """All audience names mentioned in the document."""
    found: set[str] = set()
    for node in ast:
        if isinstance(node, AudienceBlockNode):
            found.update(node.audiences)
            found |= collect_audiences(list(node.body))
    return found


__all__ = ["MarkdownNode", "MarkdownAST", "TextNode", "AudienceBlockNode", "collect_audiences"]
