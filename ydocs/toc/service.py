from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import ManifestError, ScopeCollisionError
from ..types import BuildOptions
from ..yaml_io import dump_yaml
from .loader import TocLoader
from .model import NavigationManifest

logger = logging.getLogger(__name__)


def _is_within(scope: str, path: str) -> bool:
    return not scope or path == scope or path.startswith(scope + "/")


class TocService:
    """
    Registry of resolved navigation manifests.

    Owns the canonical, deduplicated list of document paths to emit:
    manifests contribute in registration order, each one depth-first
    and left-to-right.
    """

    def __init__(self, options: BuildOptions):
        self._options = options
        self._loader = TocLoader(options.input, options.audience)
        # manifest source → resolved manifest, in registration order
        self._manifests: Dict[str, NavigationManifest] = {}
        # directory scope → manifest source
        self._scopes: Dict[str, str] = {}

    def add(self, manifest_path: str, input_root: Optional[Path] = None) -> NavigationManifest:
        """
        Parse and register toc.yaml at input-relative `manifest_path`.

        A partially loaded manifest is never registered. Adding the same
        manifest twice returns the registered one.

        Args:
            manifest_path: Input-relative path of the manifest
            input_root: Root that includes and document paths resolve against
                        (the build input when omitted)

        Returns:
            Registered NavigationManifest, already filtered by audience

        Raises:
            ManifestCycleError: If includes form a cycle
            ScopeCollisionError: If another manifest owns the same directory
            ManifestError: On any other structural problem
        """
        manifest_path = posixpath.normpath(manifest_path)
        if manifest_path in self._manifests:
            return self._manifests[manifest_path]

        loader = self._loader
        if input_root is not None and Path(input_root) != self._options.input:
            loader = TocLoader(Path(input_root), self._options.audience)

        manifest = loader.load(manifest_path)
        owner = self._scopes.get(manifest.scope)
        if owner is not None:
            raise ScopeCollisionError(manifest.scope, owner, manifest_path)

        self._scopes[manifest.scope] = manifest_path
        self._manifests[manifest_path] = manifest
        logger.debug(
            "Loaded %s: %d document(s), %d include(s)",
            manifest_path, len(manifest.document_paths()), len(manifest.includes),
        )
        return manifest

    @property
    def manifests(self) -> List[NavigationManifest]:
        return list(self._manifests.values())

    def get_manifest(self, manifest_path: str) -> NavigationManifest:
        try:
            return self._manifests[posixpath.normpath(manifest_path)]
        except KeyError:
            raise ManifestError("manifest was not loaded", manifest_path) from None

    def get_navigation_paths(self) -> List[str]:
        """Every document reachable from any manifest, first encounter wins."""
        seen: Dict[str, None] = {}
        for manifest in self._manifests.values():
            for path in manifest.document_paths():
                seen.setdefault(path, None)
        return list(seen)

    def get_for_path(self, manifest_path: str) -> str:
        """Manifest re-serialised as YAML after audience and hidden filtering."""
        return dump_yaml(self.get_manifest(manifest_path).to_dict())

    def manifest_for(self, document_path: str) -> Optional[NavigationManifest]:
        """
        Authoritative manifest for a document: among the manifests that
        list it, the one with the deepest scope containing the document.
        A manifest linking into a foreign scope is used only when no
        manifest of that scope lists the document.
        """
        best: Optional[NavigationManifest] = None
        fallback: Optional[NavigationManifest] = None
        for manifest in self._manifests.values():
            if document_path not in manifest.document_paths():
                continue
            if _is_within(manifest.scope, document_path):
                if best is None or len(manifest.scope) > len(best.scope):
                    best = manifest
            elif fallback is None:
                fallback = manifest
        return best or fallback


__all__ = ["TocService"]
