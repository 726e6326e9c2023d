"""
Build options for tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from ydocs.types import BuildOptions, MissingVarPolicy


def make_options(
        root: Path,
        *,
        audience: str = "external",
        output_format: str = "md",
        vars: Optional[dict[str, Any]] = None,
        ignore: tuple[str, ...] = (),
        missing_vars: MissingVarPolicy = MissingVarPolicy.KEEP,
) -> BuildOptions:
    """Options for a project under root/input, writing to root/output."""
    return BuildOptions(
        input=root / "input",
        output=root / "output",
        audience=audience,
        output_format=output_format,  # type: ignore[arg-type]
        vars=vars or {},
        ignore=ignore,
        missing_vars=missing_vars,
    )


__all__ = ["make_options"]
