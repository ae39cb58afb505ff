"""Shared pytest fixtures for monorepo-alias tests."""

from __future__ import annotations

import json
import os
from pathlib import Path, PurePosixPath

import pytest


class FakeProbe:
    """In-memory probe: a set of files, directories implied by their parents.

    Every ``exists`` call is recorded so tests can check probe order.
    """

    def __init__(self, files: dict[str, str] | list[str] | None = None):
        if isinstance(files, list):
            files = {f: "" for f in files}
        self.files: dict[str, str] = {
            os.path.normpath(k): v for k, v in (files or {}).items()
        }
        self.dirs: set[str] = set()
        for f in self.files:
            for parent in PurePosixPath(f).parents:
                self.dirs.add(str(parent))
        self.exists_calls: list[str] = []

    async def exists(self, path) -> bool:
        p = os.path.normpath(str(path))
        self.exists_calls.append(p)
        return p in self.files or p in self.dirs

    def is_dir(self, path) -> bool:
        return os.path.normpath(str(path)) in self.dirs

    async def read_directory(self, path) -> list[str]:
        base = PurePosixPath(os.path.normpath(str(path)))
        names = {
            PurePosixPath(p).relative_to(base).parts[0]
            for p in (*self.files, *self.dirs)
            if PurePosixPath(p) != base and base in PurePosixPath(p).parents
        }
        return sorted(names)

    async def read_text(self, path) -> str:
        p = os.path.normpath(str(path))
        if p not in self.files:
            raise FileNotFoundError(p)
        return self.files[p]


def write_package(directory: Path, manifest: dict, files: list[str] = ()) -> Path:
    """Create *directory* with a package.json and empty source *files*."""
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "package.json").write_text(json.dumps(manifest))
    for rel in files:
        target = directory / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("")
    return directory


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A small pnpm workspace: an app, a linked source lib, a linked build lib,
    a library package and a vendored copy under node_modules."""
    root = tmp_path / "repo"
    root.mkdir()
    (root / "pnpm-workspace.yaml").write_text("packages:\n  - packages/*\n")
    write_package(root, {"name": "repo-root", "private": True})

    packages = root / "packages"
    write_package(
        packages / "site",
        {
            "name": "@wendraw/site",
            "type": "module",
            "dependencies": {
                "@wendraw/styles": "workspace:*",
                "@wendraw/ui": "workspace:^",
                "vue": "^3.4.0",
            },
            "devDependencies": {
                "@wendraw/tools": "workspace:*",
                "@wendraw/starry-cli": "workspace:*",
            },
        },
        ["src/main.ts"],
    )
    write_package(
        packages / "styles",
        {
            "name": "@wendraw/styles",
            "type": "module",
            "main": "./dist/index.js",
            "exports": {
                ".": {"import": "./dist/index.js"},
                "./colors": {"import": "./dist/colors.js"},
            },
        },
        ["src/index.ts", "src/colors.ts", "node_modules/dep/package.json"],
    )
    write_package(
        packages / "ui",
        {"name": "@wendraw/ui", "main": "./build/index.js", "module": "./es/index.mjs"},
        ["src/index.tsx"],
    )
    write_package(
        packages / "tools",
        {"name": "@wendraw/tools", "main": "./dist/index.js", "buildOptions": {"isLib": True}},
        ["src/index.ts"],
    )
    write_package(
        packages / "starry-cli",
        {"name": "@wendraw/starry-cli", "main": "./dist/index.js"},
        ["src/index.ts"],
    )
    write_package(
        packages / "unrelated",
        {"name": "@wendraw/unrelated", "main": "./dist/index.js"},
        ["src/index.ts"],
    )
    write_package(root / "node_modules" / "vue", {"name": "vue", "main": "index.js"})
    return root


@pytest.fixture
def make_probe():
    """Factory for in-memory probes: ``make_probe(["/w/lib/src/index.ts"])``."""
    return FakeProbe


@pytest.fixture
def make_package():
    return write_package
