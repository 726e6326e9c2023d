"""
Build configuration: optional YAML config file merged under CLI flags.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..errors import ConfigError
from ..types import OUTPUT_FORMATS, BuildOptions, MissingVarPolicy
from ..yaml_io import YAMLError, load_yaml_text

logger = logging.getLogger(__name__)

CONFIG_KEYS = ("input", "output", "audience", "output_format", "vars", "ignore", "missing_vars", "title")


def _normalize_keys(raw: Mapping[str, Any], *, source: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        norm = str(key).replace("-", "_")
        if norm not in CONFIG_KEYS:
            raise ConfigError(f"{source}: unknown configuration key '{key}'")
        out[norm] = value
    return out


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Read the YAML config file. A missing file is not an error:
    the build proceeds with CLI flags and defaults alone.

    Returns:
        Mapping of option name to value, dashes in keys replaced by underscores

    Raises:
        ConfigError: If the file is not a YAML mapping of known options
    """
    if not path.is_file():
        logger.warning("Configuration file %s wasn't provided", path)
        return {}
    try:
        raw = load_yaml_text(path.read_text(encoding="utf-8"))
    except YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: configuration must be a mapping")
    return _normalize_keys(raw, source=str(path))


def parse_vars(value: Any) -> Dict[str, Any]:
    """`--vars` value: a mapping, or YAML/JSON flow text of one."""
    if value is None:
        return {}
    if isinstance(value, str):
        try:
            value = load_yaml_text(value) if value.strip() else {}
        except YAMLError as e:
            raise ConfigError(f"vars: cannot parse {value!r}: {e}") from e
        value = value or {}
    if not isinstance(value, dict):
        raise ConfigError(f"vars must be a mapping, got {value!r}")
    return {str(k): v for k, v in value.items()}


def _parse_ignore(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ConfigError(f"ignore must be a list of glob patterns, got {value!r}")


def build_options(
    cli: Mapping[str, Any],
    file_cfg: Optional[Mapping[str, Any]] = None,
    *,
    cwd: Optional[Path] = None,
) -> BuildOptions:
    """
    Merge CLI values (None means "not given") over config file values
    over defaults, and validate the result.

    Args:
        cli: Parsed command-line values keyed like BuildOptions fields
        file_cfg: Contents of the config file, as returned by load_config_file
        cwd: Base for relative input/output paths (current directory by default)

    Returns:
        Validated BuildOptions

    Raises:
        ConfigError: If input/output are missing or a value is invalid
    """
    merged: Dict[str, Any] = dict(file_cfg or {})
    merged.update({k: v for k, v in cli.items() if v is not None})

    if not merged.get("input") or not merged.get("output"):
        raise ConfigError("Please provide input and output arguments to work with this tool")

    base = cwd or Path.cwd()
    output_format = str(merged.get("output_format", "html"))
    if output_format not in OUTPUT_FORMATS:
        raise ConfigError(f"output-format must be one of {', '.join(OUTPUT_FORMATS)}, got '{output_format}'")

    try:
        missing_vars = MissingVarPolicy(str(merged.get("missing_vars", MissingVarPolicy.KEEP.value)))
    except ValueError:
        allowed = ", ".join(p.value for p in MissingVarPolicy)
        raise ConfigError(f"missing-vars must be one of {allowed}, got '{merged['missing_vars']}'") from None

    audience = str(merged.get("audience") or "external")

    return BuildOptions(
        input=(base / str(merged["input"])).resolve(),
        output=(base / str(merged["output"])).resolve(),
        audience=audience,
        output_format=output_format,  # type: ignore[arg-type]
        vars=parse_vars(merged.get("vars")),
        ignore=_parse_ignore(merged.get("ignore")),
        missing_vars=missing_vars,
        title=str(merged.get("title") or "Documentation"),
    )


__all__ = ["CONFIG_KEYS", "load_config_file", "parse_vars", "build_options"]
