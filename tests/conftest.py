import textwrap
from pathlib import Path

import pytest

from tests.infrastructure.file_utils import write


@pytest.fixture
def docproj(tmp_path: Path) -> Path:
    """
    Small documentation tree:

        input/presets.yaml        product/version for everyone, secret for internal
        input/docs/toc.yaml       intro, internal-only page, hidden page, group
        input/docs/presets.yaml   overrides product for docs/
        input/docs/*.md
        input/docs/img/logo.png
    """
    src = tmp_path / "input"
    write(src / "presets.yaml", textwrap.dedent("""
        default:
          product: Acme
          version: "1.0"
        internal:
          secret: s3cr3t
        """).lstrip())
    write(src / "docs" / "presets.yaml", textwrap.dedent("""
        default:
          product: Acme Docs
        """).lstrip())
    write(src / "docs" / "toc.yaml", textwrap.dedent("""
        title: Acme
        items:
          - title: Intro
            path: intro.md
          - title: Internal
            path: secret.md
            audience: internal
          - title: Changelog
            path: changelog.md
            hidden: true
          - title: Guides
            items:
              - title: Setup
                path: guides/setup.md
        """).lstrip())
    write(src / "docs" / "intro.md", textwrap.dedent("""
        # Intro to {{ product }}

        Version {{ version }}. See [setup](guides/setup.md#install) and ![logo](img/logo.png).
        {% audience internal %}
        Internal note: {{ secret }}
        {% endaudience %}
        The end.
        """).lstrip())
    write(src / "docs" / "secret.md", "# Secret\n")
    write(src / "docs" / "changelog.md", "# Changelog\n\nBack to [intro](intro.md).\n")
    write(src / "docs" / "guides" / "setup.md", "# Setup\n\nRead the [intro](../intro.md) first.\n")
    write(src / "docs" / "orphan.md", "# Nobody links here\n")
    (src / "docs" / "img").mkdir(parents=True)
    (src / "docs" / "img" / "logo.png").write_bytes(b"\x89PNG\r\n")
    return tmp_path

