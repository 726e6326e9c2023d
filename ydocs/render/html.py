"""
HTML rendering service.

Markdown goes through markdown-it (CommonMark plus tables and
strikethrough); the page shell and the navigation menu come from Jinja
templates shipped with the package.
"""

from __future__ import annotations

import posixpath
from typing import Any, Dict, List, Mapping, Optional, Sequence

from jinja2 import Environment, PackageLoader, select_autoescape
from markdown_it import MarkdownIt

from ..config.paths import BUNDLE_FILES, bundle_href, output_name
from ..toc.model import NavigationManifest, NavigationNode


class HtmlRenderer:
    def __init__(self, site_title: str = "Documentation"):
        self.site_title = site_title
        self._md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])
        self._env = Environment(
            loader=PackageLoader("ydocs", "render/templates"),
            autoescape=select_autoescape(["html", "j2"]),
            keep_trailing_newline=True,
        )

    # ---------------------------- markdown ---------------------------- #

    def render_markdown(self, text: str) -> str:
        return self._md.render(text)

    def first_heading(self, text: str) -> Optional[str]:
        """Text of the first H1, if the document has one."""
        tokens = self._md.parse(text)
        for i, tok in enumerate(tokens):
            if tok.type == "heading_open" and tok.tag == "h1" and i + 1 < len(tokens):
                return tokens[i + 1].content.strip() or None
        return None

    # ----------------------------- pages ------------------------------ #

    def render_page(
        self,
        *,
        output_rel_path: str,
        title: str,
        content_html: str,
        nav: Optional[Mapping[str, Any]] = None,
    ) -> str:
        template = self._env.get_template("page.html.j2")
        return template.render(
            title=title,
            site_title=self.site_title,
            content=content_html,
            nav=nav,
            bundle=self._bundle(output_rel_path),
        )

    def render_leading(
        self,
        *,
        output_rel_path: str,
        title: str,
        description_html: str,
        links: Sequence[Mapping[str, Any]],
        nav: Optional[Mapping[str, Any]] = None,
    ) -> str:
        template = self._env.get_template("leading.html.j2")
        return template.render(
            title=title,
            site_title=self.site_title,
            description=description_html,
            links=links,
            nav=nav,
            bundle=self._bundle(output_rel_path),
        )

    def _bundle(self, output_rel_path: str) -> Dict[str, str]:
        css, js = BUNDLE_FILES
        return {"css": bundle_href(output_rel_path, css), "js": bundle_href(output_rel_path, js)}

    # --------------------------- navigation --------------------------- #

    def navigation(self, manifest: NavigationManifest, current: str) -> Dict[str, Any]:
        """
        Menu of `manifest` as seen from the page rendered for source `current`.
        Hidden entries are left out.
        """
        page_dir = posixpath.dirname(output_name(current, "html")) or "."

        def href(path: Optional[str], external: bool) -> Optional[str]:
            if path is None:
                return None
            if external:
                return path
            return posixpath.relpath(output_name(path, "html"), page_dir)

        def items(nodes: Sequence[NavigationNode]) -> List[Dict[str, Any]]:
            out = []
            for node in nodes:
                if node.hidden:
                    continue
                children = items(node.items)
                if node.is_group and not children:
                    continue
                out.append({
                    "title": node.title,
                    "href": href(node.path, node.is_external),
                    "current": node.path == current,
                    "items": children,
                })
            return out

        return {"title": manifest.title, "items": items(manifest.items)}


__all__ = ["HtmlRenderer"]
