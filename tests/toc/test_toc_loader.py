"""
Navigation manifest parsing: nesting, audience, hidden entries, includes.
"""

import textwrap
from pathlib import Path

import pytest

from tests.infrastructure.file_utils import write
from ydocs.errors import ManifestCycleError, ManifestError
from ydocs.toc import TocLoader, parse_audience


def _toc(root: Path, rel: str, body: str) -> str:
    write(root / rel, textwrap.dedent(body).lstrip())
    return rel


def test_list_root_and_canonical_paths(tmp_path: Path):
    _toc(tmp_path, "docs/toc.yaml", """
        - title: Intro
          path: intro.md
        - title: Deep
          path: ./a/../b/page.md
        - name: Legacy keys
          href: legacy.md
        """)
    manifest = TocLoader(tmp_path, "external").load("docs/toc.yaml")

    assert manifest.scope == "docs"
    assert manifest.document_paths() == ["docs/intro.md", "docs/b/page.md", "docs/legacy.md"]
    assert [n.title for n in manifest.items] == ["Intro", "Deep", "Legacy keys"]


def test_audience_filtering_at_any_depth(tmp_path: Path):
    _toc(tmp_path, "toc.yaml", """
        title: Root
        items:
          - title: Public
            path: public.md
          - title: Group
            items:
              - title: Inner
                items:
                  - title: Hidden deep
                    path: internal-deep.md
                    audience: internal
                  - title: Visible deep
                    path: visible-deep.md
          - title: Staff only group
            audience: [internal, partner]
            items:
              - title: Staff page
                path: staff.md
        """)
    external = TocLoader(tmp_path, "external").load("toc.yaml")
    assert external.document_paths() == ["public.md", "visible-deep.md"]

    internal = TocLoader(tmp_path, "internal").load("toc.yaml")
    assert internal.document_paths() == ["public.md", "internal-deep.md", "visible-deep.md", "staff.md"]

    partner = TocLoader(tmp_path, "partner").load("toc.yaml")
    assert "staff.md" in partner.document_paths()


def test_group_emptied_by_audience_is_dropped(tmp_path: Path):
    _toc(tmp_path, "toc.yaml", """
        - title: Group
          items:
            - title: Only internal
              path: x.md
              audience: internal
        - title: Kept
          path: kept.md
        """)
    manifest = TocLoader(tmp_path, "external").load("toc.yaml")
    assert [n.title for n in manifest.items] == ["Kept"]


def test_manifest_root_audience(tmp_path: Path):
    _toc(tmp_path, "toc.yaml", """
        audience: internal
        items:
          - title: A
            path: a.md
        """)
    assert TocLoader(tmp_path, "external").load("toc.yaml").document_paths() == []
    assert TocLoader(tmp_path, "internal").load("toc.yaml").document_paths() == ["a.md"]


def test_hidden_entries_stay_in_output_set(tmp_path: Path):
    _toc(tmp_path, "toc.yaml", """
        - title: Shown
          path: shown.md
        - title: Hidden
          path: hidden.md
          hidden: true
        """)
    manifest = TocLoader(tmp_path, "external").load("toc.yaml")

    assert manifest.document_paths() == ["shown.md", "hidden.md"]
    assert manifest.to_dict()["items"] == [{"title": "Shown", "path": "shown.md"}]


def test_leaf_without_path_is_discarded(tmp_path: Path):
    _toc(tmp_path, "toc.yaml", """
        - title: Placeholder
        - title: Real
          path: real.md
        """)
    manifest = TocLoader(tmp_path, "external").load("toc.yaml")
    assert [n.title for n in manifest.items] == ["Real"]


def test_external_urls_are_navigation_only(tmp_path: Path):
    _toc(tmp_path, "toc.yaml", """
        - title: Site
          path: https://example.com/docs
        - title: Page
          path: page.md
        """)
    manifest = TocLoader(tmp_path, "external").load("toc.yaml")
    assert manifest.document_paths() == ["page.md"]
    assert manifest.to_dict()["items"][0] == {"title": "Site", "path": "https://example.com/docs"}


def test_include_is_spliced_relative_to_included_file(tmp_path: Path):
    _toc(tmp_path, "docs/toc.yaml", """
        - title: First
          path: first.md
        - include:
            path: sub/_tocs/toc.yaml
        - title: Last
          path: last.md
        """)
    _toc(tmp_path, "docs/sub/_tocs/toc.yaml", """
        - title: Sub page
          path: ../page.md
        - title: Sub internal
          path: ../internal.md
          audience: internal
        """)
    manifest = TocLoader(tmp_path, "external").load("docs/toc.yaml")

    assert manifest.document_paths() == ["docs/first.md", "docs/sub/page.md", "docs/last.md"]
    assert manifest.includes == ("docs/sub/_tocs/toc.yaml",)
    # re-serialised relative to the including manifest
    assert manifest.to_dict()["items"][1] == {"title": "Sub page", "path": "sub/page.md"}


def test_titled_include_becomes_group(tmp_path: Path):
    _toc(tmp_path, "toc.yaml", """
        - title: Reference
          include: ref/toc.yaml
        """)
    _toc(tmp_path, "ref/toc.yaml", """
        title: Ref landing
        path: index.yaml
        items:
          - title: API
            path: api.md
        """)
    manifest = TocLoader(tmp_path, "external").load("toc.yaml")

    (group,) = manifest.items
    assert group.is_group
    assert group.title == "Reference"
    assert [c.path for c in group.items] == ["ref/index.yaml", "ref/api.md"]


def test_hidden_include_hides_spliced_entries(tmp_path: Path):
    _toc(tmp_path, "toc.yaml", """
        - include: more.yaml
          hidden: true
        """)
    _toc(tmp_path, "more.yaml", """
        - title: M
          path: m.md
        """)
    manifest = TocLoader(tmp_path, "external").load("toc.yaml")
    assert manifest.document_paths() == ["m.md"]
    assert manifest.to_dict()["items"] == []


def test_diamond_include_is_not_a_cycle(tmp_path: Path):
    _toc(tmp_path, "toc.yaml", """
        - include: a.yaml
        - include: b.yaml
        """)
    _toc(tmp_path, "a.yaml", "- include: shared.yaml\n")
    _toc(tmp_path, "b.yaml", "- include: shared.yaml\n")
    _toc(tmp_path, "shared.yaml", "- title: S\n  path: s.md\n")

    manifest = TocLoader(tmp_path, "external").load("toc.yaml")
    assert manifest.document_paths() == ["s.md", "s.md"]


def test_cyclic_include_fails_fast(tmp_path: Path):
    _toc(tmp_path, "a/toc.yaml", """
        - title: A
          path: a.md
        - include: ../b/toc.yaml
        """)
    _toc(tmp_path, "b/toc.yaml", """
        - include: ../a/toc.yaml
        """)
    with pytest.raises(ManifestCycleError) as ei:
        TocLoader(tmp_path, "external").load("a/toc.yaml")
    assert ei.value.chain == ["a/toc.yaml", "b/toc.yaml", "a/toc.yaml"]


def test_self_include_is_a_cycle(tmp_path: Path):
    _toc(tmp_path, "toc.yaml", "- include: toc.yaml\n")
    with pytest.raises(ManifestCycleError):
        TocLoader(tmp_path, "external").load("toc.yaml")


@pytest.mark.parametrize("body, fragment", [
    ("- title: X\n  path: x.md\n  color: red\n", "unknown key"),
    ("- title: X\n  path: x.md\n  items:\n    - title: Y\n      path: y.md\n", "both 'path' and 'items'"),
    ("- title: X\n  path: ../../outside.md\n", "outside the input root"),
    ("- include: missing.yaml\n", "not found"),
    ("- title: X\n  items: nope\n", "'items' must be a list"),
    ("42\n", "list of entries"),
    ("- [broken\n", "invalid YAML"),
    ("- title: X\n  path: x.md\n  audience: {a: 1}\n", "audience"),
])
def test_malformed_manifests(tmp_path: Path, body: str, fragment: str):
    _toc(tmp_path, "docs/toc.yaml", body)
    with pytest.raises(ManifestError) as ei:
        TocLoader(tmp_path, "external").load("docs/toc.yaml")
    assert fragment in str(ei.value)


def test_parse_audience_forms():
    assert parse_audience(None, source="t") == ()
    assert parse_audience("internal", source="t") == ("internal",)
    assert parse_audience("internal, partner", source="t") == ("internal", "partner")
    assert parse_audience(["internal", " partner "], source="t") == ("internal", "partner")
