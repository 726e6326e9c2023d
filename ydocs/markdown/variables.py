from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Tuple

from ..types import MissingVarPolicy

_PLACEHOLDER = re.compile(r"\{\{\s*(?P<name>[A-Za-z_][\w.\-]*)\s*\}\}")

# inert stand-in for a placeholder while structured text is parsed
_MASK = "__ydocs_var_{}__"
_MASK_RE = re.compile(r"__ydocs_var_(\d+)__")

_MISSING = object()


@dataclass(frozen=True)
class SubstitutionResult:
    text: str
    missing: Tuple[str, ...] = ()  # undeclared names, in order of first use


def _lookup(variables: Mapping[str, Any], name: str) -> Any:
    if name in variables:
        return variables[name]
    # dotted access into mapping values: {{ product.name }}
    current: Any = variables
    for part in name.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def substitute(
    text: str,
    variables: Mapping[str, Any],
    policy: MissingVarPolicy = MissingVarPolicy.KEEP,
) -> SubstitutionResult:
    """
    Replace every `{{ name }}` with its value.

    Undeclared names never raise: they are reported in `missing` and
    replaced according to `policy`.

    Args:
        text: Source text with placeholders
        variables: Effective variables of the document. Dotted names
                   (`{{ product.name }}`) look into nested mappings.
        policy: What to put in place of an undeclared name (the
                placeholder itself or an empty string)

    Returns:
        SubstitutionResult with the new text and the undeclared names
        in order of first use
    """
    missing: List[str] = []

    def repl(m: re.Match[str]) -> str:
        name = m.group("name")
        value = _lookup(variables, name)
        if value is _MISSING:
            if name not in missing:
                missing.append(name)
            return m.group(0) if policy is MissingVarPolicy.KEEP else ""
        return _stringify(value)

    return SubstitutionResult(text=_PLACEHOLDER.sub(repl, text), missing=tuple(missing))


def mask_placeholders(text: str) -> Tuple[str, List[str]]:
    """
    Replace every placeholder with a plain word token.

    Used before parsing YAML documents so that neither a placeholder nor a
    substituted value can change the document structure.

    Returns:
        Tuple of (masked text, original placeholder spellings by token index)
    """
    found: List[str] = []

    def repl(m: re.Match[str]) -> str:
        found.append(m.group(0))
        return _MASK.format(len(found) - 1)

    return _PLACEHOLDER.sub(repl, text), found


def unmask_placeholders(text: str, found: List[str]) -> str:
    """Inverse of mask_placeholders for a fragment of the masked text."""
    return _MASK_RE.sub(lambda m: found[int(m.group(1))], text)


__all__ = ["SubstitutionResult", "substitute", "mask_placeholders", "unmask_placeholders"]
