"""
Parser for audience-conditional Markdown.

Turns the marker tokens and the text between them into a tree of
tagged spans.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from ...errors import DocumentError
from .lexer import AudienceLexer, MarkerToken
from .nodes import AudienceBlockNode, MarkdownAST, MarkdownNode, TextNode

_AUDIENCE_SPLIT = re.compile(r"[\s,]+")


class AudienceMarkupError(DocumentError):
    """Unbalanced or empty audience markers."""
    pass


class AudienceParser:
    def __init__(self, text: str, source: Optional[str] = None):
        self.text = text
        self.source = source
        self.lexer = AudienceLexer(text)

    def parse(self) -> MarkdownAST:
        """
        Raises:
            AudienceMarkupError: on unbalanced or empty markers
        """
        tokens = self.lexer.tokenize()
        errors = self.lexer.validate_tokens(tokens)
        if errors:
            raise AudienceMarkupError("; ".join(errors), self.source)

        if not tokens:
            return [TextNode(text=self.text)] if self.text else []

        # Stack of (audiences, collected children); the bottom frame is the document itself
        stack: List[Tuple[Tuple[str, ...], List[MarkdownNode]]] = [((), [])]
        pos = 0
        for token in tokens:
            self._append_text(stack[-1][1], pos, token.start_pos)
            pos = token.end_pos
            if token.type == "audience":
                stack.append((self._audiences(token), []))
            else:
                audiences, body = stack.pop()
                stack[-1][1].append(AudienceBlockNode(audiences=audiences, body=tuple(body)))
        self._append_text(stack[-1][1], pos, len(self.text))
        return stack[0][1]

    def _append_text(self, out: List[MarkdownNode], start: int, end: int) -> None:
        if start < end:
            out.append(TextNode(text=self.text[start:end]))

    @staticmethod
    def _audiences(token: MarkerToken) -> Tuple[str, ...]:
        return tuple(a for a in _AUDIENCE_SPLIT.split(token.content) if a)


def parse_audience_markup(text: str, source: Optional[str] = None) -> MarkdownAST:
    return AudienceParser(text, source).parse()


__all__ = ["AudienceParser", "AudienceMarkupError", "parse_audience_markup"]
