"""
End-to-end builds through the engine.
"""

from dataclasses import replace
from pathlib import Path

import pytest

from tests.infrastructure.file_utils import list_tree, read, write
from tests.infrastructure.options import make_options
from ydocs.engine import Engine, run_build
from ydocs.errors import ConfigError, ManifestCycleError
from ydocs.yaml_io import load_yaml_text


def test_md_build_emits_only_navigable_documents(docproj: Path):
    result = run_build(make_options(docproj, output_format="md"))
    out = docproj / "output"

    assert list_tree(out) == [
        "docs/changelog.md",
        "docs/guides/setup.md",
        "docs/intro.md",
        "docs/toc.yaml",
    ]
    assert result.documents == ["docs/intro.md", "docs/changelog.md", "docs/guides/setup.md"]
    assert result.manifests == ["docs/toc.yaml"]
    assert "Intro to Acme Docs" in read(out / "docs" / "intro.md")


def test_md_build_writes_filtered_manifests(docproj: Path):
    run_build(make_options(docproj, output_format="md"))
    data = load_yaml_text(read(docproj / "output" / "docs" / "toc.yaml"))
    titles = [item["title"] for item in data["items"]]
    assert titles == ["Intro", "Guides"]


def test_md_build_for_internal_audience(docproj: Path):
    run_build(make_options(docproj, output_format="md", audience="internal"))
    out = docproj / "output"
    assert (out / "docs" / "secret.md").is_file()
    assert "Internal note: s3cr3t" in read(out / "docs" / "intro.md")


def test_html_build_copies_bundle_and_assets(docproj: Path):
    result = run_build(make_options(docproj, output_format="html"))
    out = docproj / "output"

    assert list_tree(out) == [
        "_bundle/app.css",
        "_bundle/app.js",
        "docs/changelog.html",
        "docs/guides/setup.html",
        "docs/img/logo.png",
        "docs/intro.html",
    ]
    assert result.copied == ["docs/img/logo.png"]
    assert (out / "docs" / "img" / "logo.png").read_bytes() == b"\x89PNG\r\n"


def test_spec_scenario_external_md(tmp_path: Path):
    write(tmp_path / "input" / "docs" / "toc.yaml", (
        '[{title: "Intro", path: "intro.md"}, '
        '{title: "Internal", path: "secret.md", audience: "internal"}]\n'
    ))
    write(tmp_path / "input" / "docs" / "presets.yaml", "default:\n  name: World\n")
    write(tmp_path / "input" / "docs" / "intro.md", "Hello {{ name }}, see [other](other.md).\n")
    write(tmp_path / "input" / "docs" / "secret.md", "top secret\n")

    run_build(make_options(tmp_path, output_format="md"))
    out = tmp_path / "output"

    assert read(out / "docs" / "intro.md") == "Hello World, see [other](other.md).\n"
    assert not (out / "docs" / "secret.md").exists()


def test_non_text_navigation_entries_in_md_mode(tmp_path: Path):
    write(tmp_path / "input" / "toc.yaml", "title: T\npath: index.yaml\nitems:\n  - title: P\n    path: p.md\n")
    write(tmp_path / "input" / "index.yaml", "title: {{ not substituted }}\n")
    write(tmp_path / "input" / "p.md", "p\n")

    result = run_build(make_options(tmp_path, output_format="md"))
    out = tmp_path / "output"
    # YAML pages are copied verbatim for Markdown output
    assert read(out / "index.yaml") == "title: {{ not substituted }}\n"
    assert result.copied == ["index.yaml"]


def test_ignore_patterns_exclude_manifests(tmp_path: Path):
    write(tmp_path / "input" / "a" / "toc.yaml", "- title: A\n  path: a.md\n")
    write(tmp_path / "input" / "a" / "a.md", "a\n")
    write(tmp_path / "input" / "b" / "toc.yaml", "- title: B\n  path: b.md\n")
    write(tmp_path / "input" / "b" / "b.md", "b\n")
    write(tmp_path / "input" / "c" / "_tocs" / "toc.yaml", "- title: C\n  path: ../c.md\n")
    write(tmp_path / "input" / "c" / "c.md", "c\n")

    result = run_build(make_options(tmp_path, ignore=("b/toc.yaml",)))
    assert result.documents == ["a/a.md"]


def test_cyclic_include_aborts_build(tmp_path: Path):
    write(tmp_path / "input" / "a" / "toc.yaml", "- include: ../b/toc.yaml\n")
    write(tmp_path / "input" / "b" / "toc.yaml", "- include: ../a/toc.yaml\n")
    with pytest.raises(ManifestCycleError):
        run_build(make_options(tmp_path))
    assert not (tmp_path / "output").exists()


def test_missing_navigable_document_is_fatal(tmp_path: Path):
    write(tmp_path / "input" / "toc.yaml", "- title: Gone\n  path: gone.md\n")
    with pytest.raises(FileNotFoundError):
        run_build(make_options(tmp_path))


def test_missing_input_folder(tmp_path: Path):
    with pytest.raises(ConfigError):
        run_build(make_options(tmp_path))


def test_output_inside_input_is_not_walked(tmp_path: Path):
    write(tmp_path / "input" / "toc.yaml", "- title: P\n  path: p.md\n")
    write(tmp_path / "input" / "p.md", "p\n")
    write(tmp_path / "input" / "site" / "stale" / "toc.yaml", "- title: S\n  path: s.md\n")
    options = replace(make_options(tmp_path, output_format="html"), output=tmp_path / "input" / "site")

    result = Engine(options).build()
    assert result.documents == ["p.html"]
    assert result.copied == []


def test_missing_variables_are_counted(tmp_path: Path):
    write(tmp_path / "input" / "toc.yaml", "- title: P\n  path: p.md\n- title: Q\n  path: q.md\n")
    write(tmp_path / "input" / "p.md", "{{ a }} {{ b }}\n")
    write(tmp_path / "input" / "q.md", "{{ a }}\n")
    assert run_build(make_options(tmp_path)).missing_vars == 3
