"""
Build driver.
"""

from __future__ import annotations

import logging
import posixpath
import shutil
from importlib import resources
from pathlib import Path
from typing import List, Optional

from .config.paths import BUNDLE_FILES, BUNDLE_FOLDER, PRESETS_FILE, TEXT_EXTENSIONS, output_name
from .errors import ConfigError
from .fs import discover_assets, discover_manifests
from .presets import PresetService
from .render import HtmlRenderer
from .resolve import DocumentResolver
from .toc import TocService
from .types import BuildOptions, BuildResult, ResolvedDocument

logger = logging.getLogger(__name__)


class Engine:
    """
    Coordinates one batch build.

    Manifests are fully loaded before any document is processed;
    documents are then resolved one at a time and written to disjoint
    output paths.
    """

    def __init__(self, options: BuildOptions, renderer: Optional[HtmlRenderer] = None):
        self.options = options
        self.presets = PresetService(options)
        self.toc = TocService(options)
        self.resolver = DocumentResolver(options, self.presets, self.toc, renderer)
        self.result = BuildResult()

    def build(self) -> BuildResult:
        if not self.options.input.is_dir():
            raise ConfigError(f"Input folder does not exist: {self.options.input}")

        self.load_manifests()

        if self.options.output_format == "html":
            self._copy_bundle()

        for path in self.toc.get_navigation_paths():
            self._emit(path)

        if self.options.output_format == "html":
            self._copy_assets()

        logger.info(
            "Built %d document(s), copied %d file(s) into %s",
            len(self.result.documents), len(self.result.copied), self.options.output,
        )
        return self.result

    # --------------------------- manifests --------------------------- #

    def _skip_dirs(self) -> List[Path]:
        out = self.options.output.resolve()
        inp = self.options.input.resolve()
        return [out] if out != inp and inp in out.parents else []

    def load_manifests(self) -> None:
        """Register every presets.yaml, then every toc.yaml, in path order."""
        paths = discover_manifests(self.options.input, self.options.ignore, self._skip_dirs())
        presets = [p for p in paths if posixpath.basename(p) == PRESETS_FILE]
        tocs = [p for p in paths if posixpath.basename(p) != PRESETS_FILE]

        for path in presets:
            self.presets.add(path, self.options.audience)
        for path in tocs:
            self.toc.add(path, self.options.input)

        if self.options.output_format == "md":
            for path in tocs:
                self._write(self.options.output / path, self.toc.get_for_path(path))
                self.result.manifests.append(path)

    # --------------------------- documents --------------------------- #

    def _emit(self, path: str) -> None:
        ext = posixpath.splitext(path)[1].lower()
        fmt = self.options.output_format

        if (fmt == "md" and ext != ".md") or (fmt == "html" and ext not in TEXT_EXTENSIONS):
            self._copy(path)
            return

        doc = self.resolver.resolve(path)
        self._write_document(doc)

    def _write_document(self, doc: ResolvedDocument) -> None:
        self._write(doc.output_path, doc.content)
        self.result.documents.append(output_name(doc.source, doc.output_format))
        self.result.missing_vars += len(doc.missing_vars)

    # ---------------------------- copying ---------------------------- #

    def _copy(self, rel_path: str) -> None:
        if rel_path in self.result.copied:
            return
        target = self.options.output / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.options.input / rel_path, target)
        self.result.copied.append(rel_path)

    def _copy_assets(self) -> None:
        for rel_path in discover_assets(self.options.input, self.options.ignore, self._skip_dirs()):
            self._copy(rel_path)

    def _copy_bundle(self) -> None:
        bundle_dir = self.options.output / BUNDLE_FOLDER
        bundle_dir.mkdir(parents=True, exist_ok=True)
        source = resources.files("ydocs") / "bundle"
        for name in BUNDLE_FILES:
            (bundle_dir / name).write_bytes((source / name).read_bytes())

    @staticmethod
    def _write(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def run_build(options: BuildOptions) -> BuildResult:
    return Engine(options).build()


__all__ = ["Engine", "run_build"]
