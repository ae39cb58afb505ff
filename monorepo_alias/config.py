"""Workspace configuration — root / invoking-package directories and synthesis knobs."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from monorepo_alias.exceptions import WorkspaceConfigError

log = structlog.get_logger("monorepo_alias.config")

_WORKSPACE_MARKER = "pnpm-workspace.yaml"


@dataclass(frozen=True)
class SynthesisOptions:
    """Constants that steer alias and glob synthesis."""

    vendored_markers: tuple[str, ...] = ("node_modules",)
    workspace_protocol: str = "workspace:"
    # Packages in these namespaces are never aliased
    reserved_namespaces: tuple[str, ...] = ("@wendraw/starry",)
    output_dirs: tuple[str, ...] = ("dist", "build", "output", "umd", "cjs", "esm")
    source_dirs: tuple[str, ...] = ("src", "source", "lib", "packages")
    source_file_extensions: tuple[str, ...] = (".ts", ".tsx", ".jsx")
    bundled_markers: tuple[str, ...] = (".min.", ".bundle.")


@dataclass(frozen=True)
class WorkspaceConfig:
    """Where the workspace lives and which package is running the dev server."""

    root_dir: Path
    cwd_dir: Path
    options: SynthesisOptions = field(default_factory=SynthesisOptions)

    @classmethod
    def from_env(cls, options: SynthesisOptions | None = None) -> WorkspaceConfig:
        """Build a config from the environment.

        Reads from environment variables:
            MONOREPO_ALIAS_CWD  — invoking package directory (default: process cwd)
            MONOREPO_ALIAS_ROOT — workspace root (default: discovered from the cwd)
        """
        cwd_env = os.environ.get("MONOREPO_ALIAS_CWD")
        root_env = os.environ.get("MONOREPO_ALIAS_ROOT")
        cwd_dir = Path(os.path.abspath(cwd_env or os.getcwd()))
        root_dir = Path(os.path.abspath(root_env)) if root_env else find_workspace_root(cwd_dir)
        return cls.create(root_dir, cwd_dir, options)

    @classmethod
    def create(
        cls,
        root_dir: str | Path,
        cwd_dir: str | Path,
        options: SynthesisOptions | None = None,
    ) -> WorkspaceConfig:
        root = Path(os.path.abspath(root_dir))
        cwd = Path(os.path.abspath(cwd_dir))
        for label, path in (("workspace root", root), ("package directory", cwd)):
            if not path.is_dir():
                raise WorkspaceConfigError(f"{label} not found: {path}")
        return cls(root_dir=root, cwd_dir=cwd, options=options or SynthesisOptions())


def _declares_workspaces(manifest_path: Path) -> bool:
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return False
    return isinstance(data, dict) and "workspaces" in data


def find_workspace_root(start: str | Path) -> Path:
    """Walk upward from *start* to the nearest workspace root.

    A workspace root holds ``pnpm-workspace.yaml`` or a package.json with a
    ``workspaces`` field. Falls back to *start* itself.
    """
    start_dir = Path(os.path.abspath(start))
    for candidate in (start_dir, *start_dir.parents):
        if (candidate / _WORKSPACE_MARKER).is_file():
            return candidate
        manifest = candidate / "package.json"
        if manifest.is_file() and _declares_workspaces(manifest):
            return candidate
    log.debug("config.workspace_root_not_found", start=str(start_dir))
    return start_dir
