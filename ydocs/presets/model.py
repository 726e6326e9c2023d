from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from ..errors import ManifestError

DEFAULT_SECTION = "default"


def _section(raw: Mapping[str, Any], key: str, source: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestError(f"preset section '{key}' must be a mapping", source)
    return value


@dataclass(frozen=True)
class PresetScope:
    """
    Variables declared by one presets.yaml for one audience.

    Only the `default` section and the section of the configured audience
    survive loading; data of other audiences is dropped here.
    """
    scope: str  # input-relative directory, '' for the root
    audience: str
    variables: Mapping[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(scope: str, audience: str, raw: Any, *, source: str) -> PresetScope:
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ManifestError("presets must be a mapping of audience → variables", source)

        merged = dict(_section(raw, DEFAULT_SECTION, source))
        if audience != DEFAULT_SECTION:
            merged.update(_section(raw, audience, source))

        return PresetScope(
            scope=scope,
            audience=audience,
            variables=MappingProxyType({str(k): v for k, v in merged.items()}),
        )


__all__ = ["PresetScope", "DEFAULT_SECTION"]
