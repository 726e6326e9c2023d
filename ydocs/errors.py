"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from YDocsUserError.

Programming errors and bugs should NOT inherit from YDocsUserError:
they will propagate with full tracebacks.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class YDocsUserError(Exception):
    """
    Base class for all user-facing errors in ydocs.

    These errors indicate problems that the user can fix:
    configuration issues, broken manifests, malformed documents.
    """
    pass


class ConfigError(YDocsUserError):
    """Invalid or missing build configuration."""
    pass


class ManifestError(YDocsUserError):
    """A navigation or preset manifest cannot be used to build the site."""
    def __init__(self, message: str, path: str | Path | None = None):
        self.path = str(path) if path is not None else None
        super().__init__(f"{self.path}: {message}" if self.path else message)


class ManifestCycleError(ManifestError):
    """A navigation manifest transitively includes itself."""
    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(f"Cyclic include: {' -> '.join(self.chain)}")


class ScopeCollisionError(ManifestError):
    """Two navigation manifests claim the same directory scope."""
    def __init__(self, scope: str, first: str, second: str):
        self.scope = scope
        super().__init__(
            f"Directory scope '{scope or '.'}' is claimed by both {first} and {second}"
        )


class DocumentError(YDocsUserError):
    """A source document has malformed audience markup."""
    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


__all__ = [
    "YDocsUserError",
    "ConfigError",
    "ManifestError",
    "ManifestCycleError",
    "ScopeCollisionError",
    "DocumentError",
]
