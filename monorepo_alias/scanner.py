"""Workspace scanner — discover every package.json under a workspace root."""

from __future__ import annotations

import json
import os
from pathlib import Path

import structlog
from pydantic import ValidationError

from monorepo_alias.exceptions import ManifestParseError
from monorepo_alias.models.manifest import Manifest
from monorepo_alias.probe import PathProbe, default_probe

log = structlog.get_logger("monorepo_alias.scanner")

MANIFEST_FILENAME = "package.json"
DEFAULT_SKIP_MARKERS: tuple[str, ...] = ("node_modules",)


def parse_manifest(path: str | Path, content: str) -> Manifest:
    """Parse manifest *content* read from *path*.

    Raises :class:`ManifestParseError` for malformed JSON or an invalid shape.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestParseError(path, f"malformed JSON ({e})") from e

    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestParseError(path, str(e)) from e


async def load_manifest(path: str | Path, *, probe: PathProbe | None = None) -> Manifest:
    """Read and parse a single manifest file."""
    probe = probe or default_probe()
    return parse_manifest(path, await probe.read_text(path))


def _pick_manifest_file(directory: Path, files: list[str]) -> str | None:
    """Choose the manifest of a directory from its ``*package.json`` files.

    An exact ``package.json`` wins; otherwise the first in sorted order.
    """
    if not files:
        return None
    chosen = MANIFEST_FILENAME if MANIFEST_FILENAME in files else files[0]
    if len(files) > 1:
        log.warning(
            "scanner.ambiguous_manifest",
            directory=str(directory),
            candidates=files,
            chosen=chosen,
        )
    return chosen


async def scan_workspace(
    root_dir: str | Path,
    *,
    probe: PathProbe | None = None,
    skip_markers: tuple[str, ...] = DEFAULT_SKIP_MARKERS,
) -> dict[Path, Manifest]:
    """Walk *root_dir* and return ``{directory: manifest}`` for every directory
    that directly contains a manifest.

    Entries whose name contains one of *skip_markers* are never descended
    into. The walk is sequential and depth-first; a directory's children are
    scanned before its own manifest is read. A broken manifest aborts the
    whole scan.
    """
    probe = probe or default_probe()
    root = Path(os.path.abspath(root_dir))
    manifests: dict[Path, Manifest] = {}

    async def _walk(directory: Path) -> None:
        entries = sorted(await probe.read_directory(directory))
        subdirs = {name for name in entries if probe.is_dir(directory / name)}

        for name in entries:
            if name in subdirs and not any(marker in name for marker in skip_markers):
                await _walk(directory / name)

        candidates = [
            name for name in entries if name.endswith(MANIFEST_FILENAME) and name not in subdirs
        ]
        chosen = _pick_manifest_file(directory, candidates)
        if chosen is not None:
            manifest = await load_manifest(directory / chosen, probe=probe)
            manifests[directory] = manifest
            log.debug("scanner.manifest_found", directory=str(directory), package=manifest.name)

    await _walk(root)
    log.info("scanner.complete", root=str(root), packages=len(manifests))
    return manifests
