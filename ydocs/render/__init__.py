from .html import HtmlRenderer

__all__ = ["HtmlRenderer"]
