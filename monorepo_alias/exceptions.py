"""Custom exceptions for monorepo-alias."""

from __future__ import annotations

from pathlib import Path


class MonorepoAliasError(Exception):
    """Base exception for all monorepo-alias errors."""


class ManifestParseError(MonorepoAliasError):
    """Raised when a discovered package.json is malformed or has an invalid shape."""

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Invalid manifest {self.path}: {reason}")


class WorkspaceConfigError(MonorepoAliasError):
    """Raised when the workspace configuration cannot be built."""
