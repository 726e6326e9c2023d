"""
Navigation tree records.

Nodes are built once by the loader, already filtered by audience,
and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..config.paths import is_external_url, relpath_from


@dataclass(frozen=True)
class NavigationNode:
    """
    One entry of a navigation manifest.

    A node with items is a pure grouping node; a leaf carries exactly one
    target: an input-relative document path or an external URL.
    """
    title: str
    path: Optional[str] = None
    items: Tuple[NavigationNode, ...] = ()
    audience: Tuple[str, ...] = ()
    hidden: bool = False
    # key spellings used by the source entry ("name"/"href" are accepted aliases)
    title_key: str = "title"
    path_key: str = "path"

    @property
    def is_group(self) -> bool:
        return bool(self.items)

    @property
    def is_external(self) -> bool:
        return self.path is not None and is_external_url(self.path)

    def iter_document_paths(self) -> Iterator[str]:
        """Depth-first, left-to-right document paths, hidden nodes included."""
        if self.path is not None and not self.is_external:
            yield self.path
        for child in self.items:
            yield from child.iter_document_paths()

    def to_dict(self, scope: str) -> Optional[Dict[str, Any]]:
        """
        Navigation view of the node with paths relative to `scope`.
        Hidden nodes (and groups left empty) produce None.
        """
        if self.hidden:
            return None
        out: Dict[str, Any] = {self.title_key: self.title}
        if self.path is not None:
            out[self.path_key] = self.path if self.is_external else relpath_from(scope, self.path)
        if self.items:
            children = _dump_items(self.items, scope)
            if not children:
                return None
            out["items"] = children
        return out


def _dump_items(items: Tuple[NavigationNode, ...], scope: str) -> List[Dict[str, Any]]:
    out = []
    for node in items:
        d = node.to_dict(scope)
        if d is not None:
            out.append(d)
    return out


@dataclass(frozen=True)
class NavigationManifest:
    """Resolved tree of one toc.yaml, keyed by its directory scope."""
    source: str  # input-relative path of the manifest file
    scope: str  # input-relative directory, '' for the root
    title: Optional[str] = None
    path: Optional[str] = None  # optional landing page of the whole manifest
    items: Tuple[NavigationNode, ...] = ()
    includes: Tuple[str, ...] = ()  # every manifest spliced in, transitively
    title_key: str = "title"
    path_key: str = "path"

    def document_paths(self) -> List[str]:
        out: List[str] = []
        if self.path is not None and not is_external_url(self.path):
            out.append(self.path)
        for node in self.items:
            out.extend(node.iter_document_paths())
        return out

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.title is not None:
            out[self.title_key] = self.title
        if self.path is not None:
            out[self.path_key] = self.path if is_external_url(self.path) else relpath_from(self.scope, self.path)
        out["items"] = _dump_items(self.items, self.scope)
        return out


__all__ = ["NavigationNode", "NavigationManifest"]
