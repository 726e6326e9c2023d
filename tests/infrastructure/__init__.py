"""
Shared test infrastructure.
"""

from .cli_utils import run_cli
from .file_utils import list_tree, read, write
from .options import make_options

__all__ = ["write", "read", "list_tree", "make_options", "run_cli"]
