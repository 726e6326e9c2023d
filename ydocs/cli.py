from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from .config import build_options, load_config_file
from .config.paths import DEFAULT_CONFIG_FILE
from .engine import run_build
from .errors import YDocsUserError
from .types import OUTPUT_FORMATS, MissingVarPolicy
from .version import tool_version


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ydocs",
        description="Build a documentation site from Markdown sources and YAML manifests",
        epilog="example: ydocs -i ./input -o ./output",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument(
        "-c", "--config",
        default=DEFAULT_CONFIG_FILE,
        help="YAML configuration file (default: %(default)s); explicit flags win over it",
    )
    p.add_argument("-i", "--input", help="path to the input folder with .md files")
    p.add_argument("-o", "--output", help="path to the output folder")
    p.add_argument("-a", "--audience", help="target audience of the documentation (default: external)")
    p.add_argument(
        "--output-format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        help="format of output files (default: html)",
    )
    p.add_argument("-v", "--vars", help="seed variables as a YAML/JSON mapping, e.g. '{product: Foo}'")
    p.add_argument(
        "--ignore",
        action="append",
        metavar="GLOB",
        help="toc/preset files and assets to ignore (repeatable)",
    )
    p.add_argument(
        "--missing-vars",
        dest="missing_vars",
        choices=[policy.value for policy in MissingVarPolicy],
        help="what to put in place of an undeclared variable (default: keep)",
    )
    p.add_argument("--title", help="site title used in HTML pages")
    p.add_argument("--verbose", action="store_true", help="debug logging")
    return p


def _setup_logging(verbose: bool) -> None:
    root = logging.getLogger("ydocs")
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not root.handlers:
        h = logging.StreamHandler(sys.stderr)
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        root.addHandler(h)


def _cli_values(ns: argparse.Namespace) -> Dict[str, Any]:
    return {
        "input": ns.input,
        "output": ns.output,
        "audience": ns.audience,
        "output_format": ns.output_format,
        "vars": ns.vars,
        "ignore": ns.ignore,
        "missing_vars": ns.missing_vars,
        "title": ns.title,
    }


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(ns.verbose)

    try:
        file_cfg = load_config_file(Path(ns.config))
        options = build_options(_cli_values(ns), file_cfg)
        result = run_build(options)
    except YDocsUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except OSError as e:
        sys.stderr.write(f"I/O error: {e}\n")
        return 1

    if result.missing_vars:
        sys.stderr.write(f"{result.missing_vars} unresolved variable reference(s)\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
