from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..config.paths import parent_scope, scope_of
from ..errors import ManifestError
from ..types import BuildOptions, Variables
from ..yaml_io import YAMLError, read_yaml
from .model import PresetScope

logger = logging.getLogger(__name__)


class PresetService:
    """
    Registry of preset scopes keyed by directory.

    Variables cascade down the directory tree: a deeper scope shadows
    same-named variables of its ancestors, and the seed variables from
    the build options sit beneath every scope.
    """

    def __init__(self, options: BuildOptions):
        self._root = options.input
        self._audience = options.audience
        self._seed: Dict[str, Any] = dict(options.vars)
        self._scopes: Dict[str, PresetScope] = {}

    def add(self, manifest_path: str, audience: Optional[str] = None) -> PresetScope:
        """
        Register presets.yaml at input-relative `manifest_path`.

        The last registration for a directory wins.

        Args:
            manifest_path: Input-relative path of the presets file
            audience: Audience section to merge over `default`
                      (the build audience when omitted)

        Returns:
            Registered PresetScope

        Raises:
            ManifestError: If the file is not valid YAML or not a mapping of sections
        """
        audience = audience or self._audience
        try:
            raw = read_yaml(self._root / manifest_path)
        except YAMLError as e:
            raise ManifestError(f"invalid YAML: {e}", manifest_path) from e

        scope = PresetScope.from_dict(scope_of(manifest_path), audience, raw, source=manifest_path)
        if scope.scope in self._scopes:
            logger.debug("Presets for '%s' replaced by %s", scope.scope or ".", manifest_path)
        self._scopes[scope.scope] = scope
        logger.debug("Loaded %d preset variable(s) from %s", len(scope.variables), manifest_path)
        return scope

    def get_scope(self, scope: str) -> Optional[PresetScope]:
        return self._scopes.get(scope)

    def variables_for(self, document_path: str) -> Variables:
        """
        Flattened variables applicable to an input-relative document path.

        Seed variables come first, then every registered scope from the
        root down to the document directory; deeper scopes override.

        Args:
            document_path: Input-relative path of the document

        Returns:
            New dict of variable name to value
        """
        chain: List[PresetScope] = []
        scope: Optional[str] = scope_of(document_path)
        while scope is not None:
            found = self._scopes.get(scope)
            if found is not None:
                chain.append(found)
            scope = parent_scope(scope)

        result: Variables = dict(self._seed)
        # root first, so that deeper scopes overwrite
        for preset in reversed(chain):
            result.update(preset.variables)
        return result


__all__ = ["PresetService"]
