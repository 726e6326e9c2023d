"""
YAML reading/writing shared by manifests and the configuration file.

Loading is done with the safe loader; re-serialisation goes through the
round-trip dumper so emitted manifests keep insertion order and readable
block style.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError

_yaml = YAML(typ="safe")

_YAML_RT = YAML(typ="rt")
_YAML_RT.indent(mapping=2, sequence=4, offset=2)
# ruamel should not wrap long titles
_YAML_RT.width = 1000000


def load_yaml_text(text: str) -> Any:
    """Parse YAML text; empty documents load as None."""
    return _yaml.load(text)


def read_yaml(path: Path) -> Any:
    return load_yaml_text(path.read_text(encoding="utf-8"))


def _to_commented(data: Any) -> Any:
    if isinstance(data, dict):
        out = CommentedMap()
        for k, v in data.items():
            out[k] = _to_commented(v)
        return out
    if isinstance(data, (list, tuple)):
        return CommentedSeq(_to_commented(v) for v in data)
    return data


def dump_yaml(data: Any) -> str:
    """Serialise plain dicts/lists to block-style YAML preserving key order."""
    buf = io.StringIO()
    _YAML_RT.dump(_to_commented(data), buf)
    return buf.getvalue()


__all__ = ["YAMLError", "load_yaml_text", "read_yaml", "dump_yaml"]
