"""Exception hierarchy for dependency linking.

Every error raised on purpose derives from MonolinkError, and also from the
builtin it most resembles so callers can catch either.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class MonolinkError(Exception):
    """Base exception for monolink."""


class ManifestNotFoundError(MonolinkError, FileNotFoundError):
    """Raised when a directory has no manifest file."""


class ManifestParseError(MonolinkError, ValueError):
    """Raised when a manifest is not valid JSON or has malformed fields."""


class ResolutionError(MonolinkError, LookupError):
    """Raised when a package cannot be located from a start directory."""

    def __init__(
        self,
        name: str,
        from_dir: Path,
        searched: Sequence[Path] = (),
        message: str = "",
    ) -> None:
        self.name = name
        self.from_dir = from_dir
        self.searched = list(searched)
        if not message:
            message = f"Cannot resolve package '{name}' from {from_dir}"
            if self.searched:
                message += f" (searched {len(self.searched)} locations)"
        super().__init__(message)


class PackagePathNotExportedError(ResolutionError):
    """Raised when a package's export map hides its manifest."""
