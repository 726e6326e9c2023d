"""
Per-document resolution pipeline.

    load → substitute variables → filter audience blocks → retarget links
         → (md) return Markdown
         → (html) render through the HTML service

Resolution depends only on the document path, the build options and the
two resolvers; documents do not share mutable state.
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .config.paths import output_name
from .errors import DocumentError
from .markdown.links import LinkRewriter, build_link_targets
from .markdown.templating import filter_audience
from .markdown.variables import SubstitutionResult, mask_placeholders, substitute, unmask_placeholders
from .presets import PresetService
from .render import HtmlRenderer
from .toc import TocService
from .types import BuildOptions, OutputFormat, ResolvedDocument
from .yaml_io import YAMLError, load_yaml_text

logger = logging.getLogger(__name__)


class DocumentResolver:
    """
    Resolves navigable documents once both resolvers are fully loaded.

    Link targets are computed from the navigation set on first use, so
    the resolver must be created after the last manifest was added.
    """

    def __init__(
        self,
        options: BuildOptions,
        presets: PresetService,
        toc: TocService,
        renderer: Optional[HtmlRenderer] = None,
    ):
        self.options = options
        self.presets = presets
        self.toc = toc
        self._renderer = renderer
        self._rewriters: Dict[str, LinkRewriter] = {}

    @property
    def renderer(self) -> HtmlRenderer:
        if self._renderer is None:
            self._renderer = HtmlRenderer(self.options.title)
        return self._renderer

    def _rewriter(self, output_format: OutputFormat) -> LinkRewriter:
        if output_format not in self._rewriters:
            targets = build_link_targets(self.toc.get_navigation_paths(), output_format)
            self._rewriters[output_format] = LinkRewriter(targets)
        return self._rewriters[output_format]

    # ------------------------- shared stages ------------------------- #

    def load_and_substitute(self, input_path: str) -> SubstitutionResult:
        """Stage 1: read the source and substitute preset variables."""
        raw = (self.options.input / input_path).read_text(encoding="utf-8")
        result = substitute(raw, self.presets.variables_for(input_path), self.options.missing_vars)
        self._report_missing(input_path, result.missing)
        return result

    @staticmethod
    def _report_missing(input_path: str, names: Iterable[str]) -> None:
        for name in names:
            logger.warning("%s: missing variable '%s'", input_path, name)

    def prepare(self, input_path: str) -> SubstitutionResult:
        """Stages 1 and 2: substituted text with foreign-audience blocks removed."""
        substituted = self.load_and_substitute(input_path)
        text = filter_audience(substituted.text, self.options.audience, source=input_path)
        return SubstitutionResult(text=text, missing=substituted.missing)

    def _output_path(self, input_path: str, output_format: OutputFormat) -> Path:
        return self.options.output / output_name(input_path, output_format)

    # -------------------------- entry points ------------------------- #

    def resolve_md2md(self, input_path: str) -> ResolvedDocument:
        prepared = self.prepare(input_path)
        text = self._rewriter("md").rewrite(prepared.text, input_path)
        return ResolvedDocument(
            source=input_path,
            output_path=self._output_path(input_path, "md"),
            output_format="md",
            content=text,
            missing_vars=prepared.missing,
        )

    def resolve_md2html(self, input_path: str) -> ResolvedDocument:
        if posixpath.splitext(input_path)[1].lower() == ".yaml":
            return self._resolve_leading_page(input_path)

        prepared = self.prepare(input_path)
        text = self._rewriter("html").rewrite(prepared.text, input_path)
        renderer = self.renderer
        out_rel = output_name(input_path, "html")
        html = renderer.render_page(
            output_rel_path=out_rel,
            title=renderer.first_heading(text) or posixpath.splitext(posixpath.basename(input_path))[0],
            content_html=renderer.render_markdown(text),
            nav=self._navigation(input_path),
        )
        return ResolvedDocument(
            source=input_path,
            output_path=self._output_path(input_path, "html"),
            output_format="html",
            content=html,
            missing_vars=prepared.missing,
        )

    def resolve(self, input_path: str) -> ResolvedDocument:
        """
        Resolve one navigable document for the configured output format.

        Args:
            input_path: Input-relative path from the navigation set

        Returns:
            ResolvedDocument with the output path and final content

        Raises:
            DocumentError: On malformed audience markup or a malformed landing page
        """
        if self.options.output_format == "md":
            return self.resolve_md2md(input_path)
        return self.resolve_md2html(input_path)

    # ---------------------------- helpers ---------------------------- #

    def _navigation(self, input_path: str) -> Optional[Dict[str, Any]]:
        manifest = self.toc.manifest_for(input_path)
        if manifest is None:
            return None
        return self.renderer.navigation(manifest, input_path)

    def _resolve_leading_page(self, input_path: str) -> ResolvedDocument:
        """
        YAML landing page: title, description and a list of links.

        Placeholders are masked while the YAML is parsed and substituted in
        the parsed string values, so an undeclared name or a value holding
        YAML syntax never changes the page structure.
        """
        raw = (self.options.input / input_path).read_text(encoding="utf-8")
        variables = self.presets.variables_for(input_path)
        policy = self.options.missing_vars
        missing = substitute(raw, variables, policy).missing
        self._report_missing(input_path, missing)

        masked, found = mask_placeholders(raw)
        filtered = filter_audience(masked, self.options.audience, source=input_path)
        try:
            data = load_yaml_text(filtered) or {}
        except YAMLError as e:
            raise DocumentError(f"invalid YAML: {e}", input_path) from e
        if not isinstance(data, dict):
            raise DocumentError("leading page must be a mapping", input_path)

        def value(v: Any) -> str:
            return substitute(unmask_placeholders(str(v), found), variables, policy).text

        rewriter = self._rewriter("html")
        links: List[Mapping[str, Any]] = []
        for raw_link in data.get("links") or []:
            if not isinstance(raw_link, dict) or "href" not in raw_link:
                raise DocumentError(
                    f"leading page link must be a mapping with 'href', got {raw_link!r}", input_path
                )
            href = value(raw_link["href"])
            description = raw_link.get("description")
            links.append({
                "title": value(raw_link.get("title", href)),
                "href": rewriter.rewrite_target(href, input_path),
                "description": value(description) if description is not None else None,
            })

        renderer = self.renderer
        description = data.get("description")
        html = renderer.render_leading(
            output_rel_path=output_name(input_path, "html"),
            title=value(data.get("title", posixpath.splitext(posixpath.basename(input_path))[0])),
            description_html=renderer.render_markdown(value(description)) if description else "",
            links=links,
            nav=self._navigation(input_path),
        )
        return ResolvedDocument(
            source=input_path,
            output_path=self._output_path(input_path, "html"),
            output_format="html",
            content=html,
            missing_vars=missing,
        )


__all__ = ["DocumentResolver"]
