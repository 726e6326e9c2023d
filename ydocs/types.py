from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, NewType, Tuple


# ---- Aliases for clarity ----
OutputFormat = Literal["html", "md"]
OUTPUT_FORMATS: Tuple[str, ...] = ("html", "md")
InputRelPath = NewType("InputRelPath", str)  # input-root relative POSIX path
Variables = Dict[str, Any]


class MissingVarPolicy(str, Enum):
    """What to put in place of a `{{ name }}` whose variable is undeclared."""
    KEEP = "keep"    # leave the placeholder text as is
    EMPTY = "empty"  # substitute an empty string


# -----------------------------
@dataclass(frozen=True)
class BuildOptions:
    """
    Explicit build configuration.

    Constructed once (by the CLI or by tests) and passed by reference
    into the resolvers, the resolution pipeline and the engine.
    """
    input: Path
    output: Path
    audience: str = "external"
    output_format: OutputFormat = "html"
    # seed variables, shadowed by every preset scope
    vars: Mapping[str, Any] = field(default_factory=dict)
    ignore: Tuple[str, ...] = ()
    missing_vars: MissingVarPolicy = MissingVarPolicy.KEEP
    title: str = "Documentation"


# ---- Output artifacts ----

@dataclass(frozen=True)
class ResolvedDocument:
    """
    Output artifact for one navigable path.

    Created per document during the resolution pass and dropped
    once written.
    """
    source: InputRelPath
    output_path: Path  # absolute path under the output root
    output_format: OutputFormat
    content: str
    missing_vars: Tuple[str, ...] = ()


@dataclass
class BuildResult:
    """Summary of one engine run."""
    documents: list[str] = field(default_factory=list)  # output-relative paths written
    copied: list[str] = field(default_factory=list)  # output-relative paths copied verbatim
    manifests: list[str] = field(default_factory=list)  # manifests re-serialised (md mode)
    missing_vars: int = 0
