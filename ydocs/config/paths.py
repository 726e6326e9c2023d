from __future__ import annotations

import posixpath
import re
from typing import Optional

from ..types import OutputFormat

# Single source of truth for input/output tree conventions.
TOC_FILE = "toc.yaml"
PRESETS_FILE = "presets.yaml"
DEFAULT_CONFIG_FILE = ".ydocs.yaml"
BUNDLE_FOLDER = "_bundle"
BUNDLE_FILES = ("app.css", "app.js")

# Manifests that are only ever reached through `include`, never discovered on their own.
BUILTIN_IGNORE = ("**/_tocs/*.yaml", "**/toc-internal.yaml")

# Source extensions that are resolved textually rather than copied.
TEXT_EXTENSIONS = (".md", ".yaml")

_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def scope_of(rel_path: str) -> str:
    """
    Directory scope of an input-relative file path.
    'docs/sub/toc.yaml' → 'docs/sub', 'toc.yaml' → ''.
    """
    return posixpath.dirname(rel_path)


def parent_scope(scope: str) -> Optional[str]:
    """'a/b' → 'a', 'a' → '', '' → None (above the root)."""
    if not scope:
        return None
    return posixpath.dirname(scope)


def is_external_url(target: str) -> bool:
    """Absolute URL, protocol-relative URL, or root-anchored path."""
    return bool(_URL_SCHEME.match(target)) or target.startswith("/")


def join_rel(scope: str, target: str) -> Optional[str]:
    """
    Resolve `target` relative to directory `scope` into a normalised
    input-relative POSIX path. Returns None if it escapes the input root.
    """
    joined = posixpath.normpath(posixpath.join(scope, target)) if scope else posixpath.normpath(target)
    if joined == "." or joined == ".." or joined.startswith("../"):
        return None
    return joined


def relpath_from(scope: str, rel_path: str) -> str:
    """Inverse of join_rel: path of `rel_path` as seen from directory `scope`."""
    return posixpath.relpath(rel_path, scope or ".")


def output_name(rel_path: str, output_format: OutputFormat) -> str:
    """
    Output-relative path a navigable source path is written to.

    md:   Markdown sources keep <stem>.md, everything else is copied as is
    html: Markdown and YAML sources become <stem>.html, other files are copied as is
    """
    stem, ext = posixpath.splitext(rel_path)
    ext = ext.lower()
    if output_format == "md":
        return f"{stem}.md" if ext == ".md" else rel_path
    if ext in TEXT_EXTENSIONS:
        return f"{stem}.html"
    return rel_path


def bundle_href(output_rel_path: str, filename: str) -> str:
    """Relative href from a rendered page to a file of the shared bundle."""
    return posixpath.relpath(
        posixpath.join(BUNDLE_FOLDER, filename),
        posixpath.dirname(output_rel_path) or ".",
    )


__all__ = [
    "TOC_FILE",
    "PRESETS_FILE",
    "DEFAULT_CONFIG_FILE",
    "BUNDLE_FOLDER",
    "BUNDLE_FILES",
    "BUILTIN_IGNORE",
    "TEXT_EXTENSIONS",
    "scope_of",
    "parent_scope",
    "is_external_url",
    "join_rel",
    "relpath_from",
    "output_name",
    "bundle_href",
]
