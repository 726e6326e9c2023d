"""
Retargeting of relative links between navigable documents.

Only links whose target resolves to a document of the navigation set are
touched, and only their file extension changes. Fenced code blocks and
inline code spans are skipped. Rewriting an already rewritten text is a no-op.
"""

from __future__ import annotations

import posixpath
import re
from typing import Dict, Iterable, List, Mapping, Tuple
from urllib.parse import unquote

from ..config.paths import is_external_url, join_rel, output_name, scope_of
from ..types import OutputFormat

_FENCE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})")
_INLINE_LINK = re.compile(
    r"(?P<prefix>!?\[(?:[^\[\]\n]|\[[^\[\]\n]*\])*\]\(\s*)(?P<url><[^<>\n]*>|[^\s()<>]+)"
)
_REFERENCE_DEF = re.compile(
    r"^(?P<prefix> {0,3}\[[^\]\n]+\]:[ \t]*)(?P<url><[^<>\n]*>|\S+)",
    re.MULTILINE,
)
# inline code span: a backtick run closed by a run of the same length, within a paragraph
_CODE_SPAN = re.compile(r"(?<!`)(?P<ticks>`+)(?!`)(?:(?!\n[ \t]*\n)[\s\S])+?(?<!`)(?P=ticks)(?!`)")


def _scan_fenced(lines: List[str]) -> List[Tuple[int, int]]:
    """Intervals [start, end_excl) of fenced blocks."""
    out: List[Tuple[int, int]] = []
    i = 0
    n = len(lines)
    while i < n:
        m = _FENCE.match(lines[i])
        if not m:
            i += 1
            continue
        open_marks = m.group("fence")
        tick = open_marks[0]
        need = len(open_marks)
        # closing fence: same char, at least `need` times
        fence_pat = re.compile(rf"^(?: {{0,3}}){re.escape(tick)}{{{need},}}[ \t]*$")
        start = i
        i += 1
        while i < n and not fence_pat.match(lines[i]):
            i += 1
        if i < n:
            out.append((start, i + 1))
            i += 1
        else:
            # unclosed fence runs to the end
            out.append((start, n))
            break
    return out


def build_link_targets(navigation_paths: Iterable[str], output_format: OutputFormat) -> Dict[str, str]:
    """
    Map of input-relative path → output-relative path for every navigable
    document. Output names map onto themselves so rewriting is idempotent.
    """
    targets: Dict[str, str] = {}
    for path in navigation_paths:
        targets[path] = output_name(path, output_format)
    for out in list(targets.values()):
        targets.setdefault(out, out)
    return targets


class LinkRewriter:
    def __init__(self, targets: Mapping[str, str]):
        self._targets = targets

    def rewrite_target(self, url: str, document_path: str) -> str:
        """Retarget one link URL as written in `document_path`."""
        bracketed = url.startswith("<") and url.endswith(">")
        raw = url[1:-1] if bracketed else url

        before, sep_f, fragment = raw.partition("#")
        path, sep_q, query = before.partition("?")
        if not path or is_external_url(path):
            return url

        resolved = join_rel(scope_of(document_path), unquote(path))
        if resolved is None:
            return url
        out = self._targets.get(resolved)
        if out is None:
            return url

        stem = posixpath.splitext(posixpath.basename(path))[0]
        new_path = posixpath.join(posixpath.dirname(path), stem + posixpath.splitext(out)[1])
        new = new_path + (sep_q + query if sep_q else "") + (sep_f + fragment if sep_f else "")
        return f"<{new}>" if bracketed else new

    def rewrite(self, text: str, document_path: str) -> str:
        lines = text.splitlines(keepends=True)
        fenced = _scan_fenced([ln.rstrip("\r\n") for ln in lines])

        def repl(m: re.Match[str]) -> str:
            return m.group("prefix") + self.rewrite_target(m.group("url"), document_path)

        out: List[str] = []
        pos = 0
        for start, end in fenced:
            out.append(self._rewrite_chunk("".join(lines[pos:start]), repl))
            out.append("".join(lines[start:end]))
            pos = end
        out.append(self._rewrite_chunk("".join(lines[pos:]), repl))
        return "".join(out)

    @staticmethod
    def _rewrite_chunk(chunk: str, repl) -> str:
        if not chunk:
            return chunk
        for pattern in (_INLINE_LINK, _REFERENCE_DEF):
            spans = [m.span() for m in _CODE_SPAN.finditer(chunk)]

            def guarded(m: re.Match[str]) -> str:
                if any(start <= m.start() < end for start, end in spans):
                    return m.group(0)
                return repl(m)

            chunk = pattern.sub(guarded, chunk)
        return chunk


def rewrite_links(
    text: str,
    document_path: str,
    navigation_paths: Iterable[str],
    output_format: OutputFormat,
) -> str:
    """One-shot helper; the pipeline keeps a LinkRewriter instead."""
    return LinkRewriter(build_link_targets(navigation_paths, output_format)).rewrite(text, document_path)


__all__ = ["LinkRewriter", "build_link_targets", "rewrite_links"]
