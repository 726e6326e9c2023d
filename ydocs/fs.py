from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

import pathspec

from .config.paths import BUILTIN_IGNORE, PRESETS_FILE, TEXT_EXTENSIONS, TOC_FILE


def build_ignore_spec(patterns: Iterable[str]) -> pathspec.PathSpec:
    """Gitignore-style matcher; blank patterns are dropped."""
    lines = [p.strip() for p in patterns if p and p.strip()]
    return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, lines)


def iter_files(
    root: Path,
    *,
    spec: Optional[pathspec.PathSpec] = None,
    skip_dirs: Iterable[Path] = (),
) -> Iterator[str]:
    """
    Walk the input tree.

    Args:
        root: Input folder
        spec: Ignore patterns; matching files are skipped and matching
              directories are not entered
        skip_dirs: Absolute directories never entered (e.g. an output
                   folder placed inside the input)

    Returns:
        Input-relative POSIX paths of the remaining files, in sorted order
    """
    root = root.resolve()
    skip = {p.resolve() for p in skip_dirs}
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        keep: List[str] = []
        for d in sorted(dirnames):
            if d == ".git" or (base / d).resolve() in skip:
                continue
            rel_dir = (base / d).relative_to(root).as_posix()
            # a pattern can hide a whole branch
            if spec is not None and spec.match_file(rel_dir + "/"):
                continue
            keep.append(d)
        dirnames[:] = keep

        for fn in sorted(filenames):
            rel = (base / fn).relative_to(root).as_posix()
            if spec is not None and spec.match_file(rel):
                continue
            yield rel


def discover_manifests(root: Path, ignore: Iterable[str] = (), skip_dirs: Iterable[Path] = ()) -> List[str]:
    """toc.yaml and presets.yaml files, minus ignored ones, in sorted path order."""
    spec = build_ignore_spec([*BUILTIN_IGNORE, *ignore])
    names = {TOC_FILE, PRESETS_FILE}
    return [p for p in iter_files(root, spec=spec, skip_dirs=skip_dirs) if p.rsplit("/", 1)[-1] in names]


def discover_assets(root: Path, ignore: Iterable[str] = (), skip_dirs: Iterable[Path] = ()) -> List[str]:
    """Files that are copied verbatim for HTML output."""
    spec = build_ignore_spec(ignore)
    return [
        p for p in iter_files(root, spec=spec, skip_dirs=skip_dirs)
        if os.path.splitext(p)[1].lower() not in TEXT_EXTENSIONS
    ]


__all__ = ["build_ignore_spec", "iter_files", "discover_manifests", "discover_assets"]
