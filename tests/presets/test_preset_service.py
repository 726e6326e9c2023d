"""
Cascading preset variables.
"""

import textwrap
from pathlib import Path

import pytest

from tests.infrastructure.options import make_options
from tests.infrastructure.file_utils import write
from ydocs.errors import ManifestError
from ydocs.presets import PresetService


def _presets(root: Path, rel: str, body: str) -> str:
    write(root / "input" / rel, textwrap.dedent(body).lstrip())
    return rel


def test_child_scope_shadows_parent(tmp_path: Path):
    _presets(tmp_path, "presets.yaml", """
        default:
          x: A
        """)
    _presets(tmp_path, "child/presets.yaml", """
        default:
          x: B
          y: C
        """)
    svc = PresetService(make_options(tmp_path))
    svc.add("presets.yaml")
    svc.add("child/presets.yaml")

    assert svc.variables_for("child/page.md") == {"x": "B", "y": "C"}
    assert svc.variables_for("page.md") == {"x": "A"}
    # deeper documents inherit the nearest scope
    assert svc.variables_for("child/deep/er/page.md") == {"x": "B", "y": "C"}


def test_document_without_presets_resolves_to_empty_mapping(tmp_path: Path):
    svc = PresetService(make_options(tmp_path))
    assert svc.variables_for("any/where/page.md") == {}


def test_only_configured_audience_is_kept(tmp_path: Path):
    _presets(tmp_path, "presets.yaml", """
        default:
          name: Public
          shared: true
        internal:
          name: Staff
          token: hidden
        """)
    external = PresetService(make_options(tmp_path, audience="external"))
    external.add("presets.yaml")
    internal = PresetService(make_options(tmp_path, audience="internal"))
    internal.add("presets.yaml")

    assert external.variables_for("a.md") == {"name": "Public", "shared": True}
    assert "token" not in external.variables_for("a.md")
    assert internal.variables_for("a.md") == {"name": "Staff", "shared": True, "token": "hidden"}


def test_explicit_audience_argument_overrides_options(tmp_path: Path):
    _presets(tmp_path, "presets.yaml", """
        internal:
          token: t
        """)
    svc = PresetService(make_options(tmp_path, audience="external"))
    scope = svc.add("presets.yaml", "internal")
    assert scope.audience == "internal"
    assert svc.variables_for("a.md") == {"token": "t"}


def test_seed_vars_sit_beneath_every_scope(tmp_path: Path):
    _presets(tmp_path, "docs/presets.yaml", """
        default:
          product: FromPreset
        """)
    svc = PresetService(make_options(tmp_path, vars={"product": "Seed", "extra": 1}))
    svc.add("docs/presets.yaml")

    assert svc.variables_for("docs/a.md") == {"product": "FromPreset", "extra": 1}
    assert svc.variables_for("other/a.md") == {"product": "Seed", "extra": 1}


def test_last_registration_wins(tmp_path: Path):
    _presets(tmp_path, "presets.yaml", "default:\n  x: 1\n")
    svc = PresetService(make_options(tmp_path))
    svc.add("presets.yaml")
    write(tmp_path / "input" / "presets.yaml", "default:\n  x: 2\n")
    svc.add("presets.yaml")
    assert svc.variables_for("a.md") == {"x": 2}


def test_cascading_is_flat(tmp_path: Path):
    _presets(tmp_path, "presets.yaml", """
        default:
          product:
            name: Acme
            site: acme.io
        """)
    _presets(tmp_path, "sub/presets.yaml", """
        default:
          product:
            name: Sub
        """)
    svc = PresetService(make_options(tmp_path))
    svc.add("presets.yaml")
    svc.add("sub/presets.yaml")
    # nested mappings are replaced whole, never merged
    assert svc.variables_for("sub/a.md") == {"product": {"name": "Sub"}}


@pytest.mark.parametrize("body", [
    "- not\n- a mapping\n",
    "default: [1, 2]\n",
    "default: {x: [unclosed\n",
])
def test_malformed_presets_are_manifest_errors(tmp_path: Path, body: str):
    _presets(tmp_path, "presets.yaml", body)
    svc = PresetService(make_options(tmp_path))
    with pytest.raises(ManifestError):
        svc.add("presets.yaml")
