"""
Navigation manifest loader.

Parses toc.yaml files into NavigationManifest trees, splicing in
included manifests and dropping entries hidden from the configured
audience. Include expansion keeps the chain of manifests currently
being expanded and fails on the first repeated file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config.paths import is_external_url, join_rel, scope_of
from ..errors import ManifestCycleError, ManifestError
from ..yaml_io import YAMLError, read_yaml
from .model import NavigationManifest, NavigationNode

logger = logging.getLogger(__name__)

_ENTRY_KEYS = {"title", "name", "path", "href", "items", "audience", "hidden", "include"}
_ROOT_KEYS = {"title", "name", "path", "href", "items", "audience"}
_INCLUDE_KEYS = {"path"}
_AUDIENCE_SPLIT = re.compile(r"[\s,]+")


def _assert_only_keys(d: Dict[str, Any], allowed: Iterable[str], *, source: str, ctx: str) -> None:
    extra = set(d.keys()) - set(allowed)
    if extra:
        raise ManifestError(f"{ctx}: unknown key(s): {', '.join(sorted(map(str, extra)))}", source)


def _spelling(raw: Dict[str, Any]) -> Dict[str, str]:
    """Key spellings an entry used for its title and target, kept for re-serialisation."""
    return {
        "title_key": "name" if "title" not in raw and "name" in raw else "title",
        "path_key": "href" if "path" not in raw and "href" in raw else "path",
    }


def parse_audience(value: Any, *, source: str) -> Tuple[str, ...]:
    """'internal' | 'internal, partner' | [internal, partner] → ('internal', 'partner')"""
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(a for a in _AUDIENCE_SPLIT.split(value.strip()) if a)
    if isinstance(value, list) and all(isinstance(a, str) for a in value):
        return tuple(a.strip() for a in value if a.strip())
    raise ManifestError(f"audience must be a string or a list of strings, got {value!r}", source)


class TocLoader:
    """Builds NavigationManifest trees for one input root and one audience."""

    def __init__(self, root: Path, audience: str):
        self.root = root
        self.audience = audience

    def load(self, manifest_path: str) -> NavigationManifest:
        raw = self._read(manifest_path, included_from=None)
        scope = scope_of(manifest_path)
        includes: List[str] = []
        chain = [manifest_path]

        root_map = self._root_mapping(raw, manifest_path)
        if not self._visible(parse_audience(root_map.get("audience"), source=manifest_path)):
            logger.debug("Manifest %s is not visible to audience '%s'", manifest_path, self.audience)
            return NavigationManifest(source=manifest_path, scope=scope)

        title = root_map.get("title", root_map.get("name"))
        items = self._expand_items(root_map.get("items"), scope, manifest_path, chain, includes)
        return NavigationManifest(
            source=manifest_path,
            scope=scope,
            title=str(title) if title is not None else None,
            path=self._target(root_map.get("path", root_map.get("href")), scope, manifest_path),
            items=tuple(items),
            includes=tuple(dict.fromkeys(includes)),
            **_spelling(root_map),
        )

    # --------------------------- internals --------------------------- #

    def _read(self, manifest_path: str, *, included_from: Optional[str]) -> Any:
        abs_path = self.root / manifest_path
        if not abs_path.is_file():
            raise ManifestError(f"manifest not found: {manifest_path}", included_from or manifest_path)
        try:
            return read_yaml(abs_path)
        except YAMLError as e:
            raise ManifestError(f"invalid YAML: {e}", manifest_path) from e

    def _root_mapping(self, raw: Any, source: str) -> Dict[str, Any]:
        if raw is None:
            return {}
        if isinstance(raw, list):
            return {"items": raw}
        if isinstance(raw, dict):
            _assert_only_keys(raw, _ROOT_KEYS, source=source, ctx="manifest root")
            return raw
        raise ManifestError("manifest must be a list of entries or a mapping with 'items'", source)

    def _visible(self, audience: Tuple[str, ...]) -> bool:
        return not audience or self.audience in audience

    def _target(self, value: Any, scope: str, source: str) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str) or not value.strip():
            raise ManifestError(f"path must be a non-empty string, got {value!r}", source)
        value = value.strip()
        if is_external_url(value):
            return value
        resolved = join_rel(scope, value)
        if resolved is None:
            raise ManifestError(f"path '{value}' points outside the input root", source)
        return resolved

    def _expand_items(
        self,
        raw_items: Any,
        scope: str,
        source: str,
        chain: List[str],
        includes: List[str],
    ) -> List[NavigationNode]:
        if raw_items is None:
            return []
        if not isinstance(raw_items, list):
            raise ManifestError("'items' must be a list", source)
        out: List[NavigationNode] = []
        for raw in raw_items:
            out.extend(self._expand_entry(raw, scope, source, chain, includes))
        return out

    def _expand_entry(
        self,
        raw: Any,
        scope: str,
        source: str,
        chain: List[str],
        includes: List[str],
    ) -> Sequence[NavigationNode]:
        if not isinstance(raw, dict):
            raise ManifestError(f"navigation entry must be a mapping, got {raw!r}", source)
        _assert_only_keys(raw, _ENTRY_KEYS, source=source, ctx="navigation entry")

        audience = parse_audience(raw.get("audience"), source=source)
        if not self._visible(audience):
            return []

        title_raw = raw.get("title", raw.get("name"))
        title = str(title_raw) if title_raw is not None else ""
        hidden = bool(raw.get("hidden", False))

        if "include" in raw:
            if "items" in raw or "path" in raw or "href" in raw:
                raise ManifestError("an include entry cannot declare 'items' or 'path'", source)
            children = self._expand_include(raw["include"], scope, source, chain, includes)
            if title_raw is None:
                if hidden:
                    return [replace(c, hidden=True) for c in children]
                return children
            if not children:
                return []
            return [NavigationNode(title=title, items=tuple(children), audience=audience, hidden=hidden, **_spelling(raw))]

        path = self._target(raw.get("path", raw.get("href")), scope, source)
        children = self._expand_items(raw.get("items"), scope, source, chain, includes)

        if "items" in raw:
            if path is not None:
                raise ManifestError(f"entry '{title}' cannot have both 'path' and 'items'", source)
            if not children:
                logger.debug("Dropping empty group '%s' in %s", title, source)
                return []
            return [NavigationNode(title=title, items=tuple(children), audience=audience, hidden=hidden, **_spelling(raw))]

        if path is None:
            logger.debug("Dropping entry '%s' without path in %s", title, source)
            return []
        return [NavigationNode(title=title or path, path=path, audience=audience, hidden=hidden, **_spelling(raw))]

    def _expand_include(
        self,
        raw_include: Any,
        scope: str,
        source: str,
        chain: List[str],
        includes: List[str],
    ) -> List[NavigationNode]:
        if isinstance(raw_include, dict):
            _assert_only_keys(raw_include, _INCLUDE_KEYS, source=source, ctx="include")
            raw_include = raw_include.get("path")
        if not isinstance(raw_include, str) or not raw_include.strip():
            raise ManifestError(f"include must name a manifest path, got {raw_include!r}", source)

        target = join_rel(scope, raw_include.strip())
        if target is None:
            raise ManifestError(f"include '{raw_include}' points outside the input root", source)
        if target in chain:
            raise ManifestCycleError(chain + [target])

        raw = self._read(target, included_from=source)
        root_map = self._root_mapping(raw, target)
        if not self._visible(parse_audience(root_map.get("audience"), source=target)):
            return []

        includes.append(target)
        chain.append(target)
        try:
            target_scope = scope_of(target)
            nodes: List[NavigationNode] = []
            landing = self._target(root_map.get("path", root_map.get("href")), target_scope, target)
            if landing is not None:
                landing_title = root_map.get("title", root_map.get("name"))
                nodes.append(NavigationNode(
                    title=str(landing_title) if landing_title is not None else landing,
                    path=landing,
                    **_spelling(root_map),
                ))
            nodes.extend(self._expand_items(root_map.get("items"), target_scope, target, chain, includes))
            return nodes
        finally:
            chain.pop()


__all__ = ["TocLoader", "parse_audience"]
