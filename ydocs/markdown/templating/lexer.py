"""
Lexer for audience markers in Markdown sources.

Finds `{% audience ... %}` / `{% endaudience %}` markers and splits the
text into segments around them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class MarkerToken:
    """
    One audience marker.

    When the marker sits alone on its line, the span covers the whole
    line including the line break, so removing a block leaves no blank
    lines behind.
    """
    type: str  # 'audience' | 'endaudience'
    content: str  # raw audience list for 'audience'
    start_pos: int
    end_pos: int
    line: int  # 1-based line of the marker


class AudienceLexer:
    """
    Recognised constructs:
    - {% audience internal %}
    - {% audience internal, partner %}
    - {% endaudience %}
    """

    MARKER_PATTERN = re.compile(
        r"\{%-?\s*(?P<type>audience|endaudience)\b(?P<content>[^%]*?)\s*-?%\}"
    )

    def __init__(self, text: str):
        self.text = text
        self.length = len(text)

    def tokenize(self) -> List[MarkerToken]:
        tokens: List[MarkerToken] = []
        for match in self.MARKER_PATTERN.finditer(self.text):
            start, end = self._line_span(match.start(), match.end())
            tokens.append(MarkerToken(
                type=match.group("type"),
                content=match.group("content").strip(),
                start_pos=start,
                end_pos=end,
                line=self.text.count("\n", 0, match.start()) + 1,
            ))
        return tokens

    def _line_span(self, start: int, end: int) -> Tuple[int, int]:
        """Widen a marker span to its whole line if nothing else is on it."""
        line_start = self.text.rfind("\n", 0, start) + 1
        if self.text[line_start:start].strip():
            return start, end
        line_end = self.text.find("\n", end)
        if line_end == -1:
            line_end = self.length
        if self.text[end:line_end].strip():
            return start, end
        return line_start, min(line_end + 1, self.length)

    def validate_tokens(self, tokens: List[MarkerToken]) -> List[str]:
        """Structural problems of the marker sequence (empty list if none)."""
        errors: List[str] = []
        depth = 0
        for token in tokens:
            if token.type == "audience":
                if not token.content:
                    errors.append(f"line {token.line}: 'audience' without audience name")
                depth += 1
            else:
                if token.content:
                    errors.append(f"line {token.line}: 'endaudience' takes no arguments")
                if depth == 0:
                    errors.append(f"line {token.line}: 'endaudience' without matching 'audience'")
                else:
                    depth -= 1
        if depth > 0:
            errors.append(f"{depth} unclosed 'audience' block(s)")
        return errors


def tokenize_audience_markers(text: str) -> List[MarkerToken]:
    return AudienceLexer(text).tokenize()


__all__ = ["MarkerToken", "AudienceLexer", "tokenize_audience_markers"]
