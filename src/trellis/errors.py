"""
Exception hierarchy for trellis.

All fatal conditions raised by the resolution core derive from
``TrellisError`` so callers (the CLI in particular) can render them
uniformly. Underlying causes are chained with ``raise ... from``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class TrellisError(Exception):
    """Base class for all trellis errors."""


class ProjectNotFoundError(TrellisError):
    """Raised when no manifest is found walking up from a directory."""

    def __init__(self, start: Path, manifest_name: str):
        self.start = start
        self.manifest_name = manifest_name
        super().__init__(f"could not find {manifest_name} in {start} or any parent directory")


class ManifestError(TrellisError):
    """Raised when a manifest cannot be read, parsed, validated or edited."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)


class ManifestSaveError(ManifestError):
    """Raised when writing the manifest back to disk fails."""


class PackageDbError(TrellisError):
    """Raised when the PyPI package database cannot be initialized."""


class CacheDirError(PackageDbError):
    """Raised when the default cache directory cannot be determined."""
