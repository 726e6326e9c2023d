"""
Audience-conditional blocks in Markdown.

    {% audience internal %}
    Only internal readers see this.
    {% endaudience %}
"""

from .lexer import MarkerToken, tokenize_audience_markers
from .nodes import AudienceBlockNode, TextNode, collect_audiences
from .parser import AudienceMarkupError, parse_audience_markup
from .processor import filter_audience, render_for_audience

__all__ = [
    # main entry point
    "filter_audience",

    # errors
    "AudienceMarkupError",

    # low level (testing and diagnostics)
    "parse_audience_markup",
    "render_for_audience",
    "tokenize_audience_markers",
    "collect_audiences",
    "MarkerToken",
    "AudienceBlockNode",
    "TextNode",
]
