"""Alias & glob synthesis — turn scanned manifests into bundler aliases and
source-file globs for the invoking package.

Only workspace-linked dependencies of the invoking package are aliased. Each
alias carries a custom resolver bound to the package directory and manifest;
each surviving package also contributes an inclusion glob for its directory
followed by exclusion globs for vendored and build-output subdirectories.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import structlog

from monorepo_alias.config import SynthesisOptions, WorkspaceConfig
from monorepo_alias.models.alias import AliasEntry, MonorepoInfo
from monorepo_alias.models.manifest import Manifest
from monorepo_alias.probe import PathProbe, default_probe
from monorepo_alias.scanner import MANIFEST_FILENAME, load_manifest, scan_workspace

log = structlog.get_logger("monorepo_alias.synthesizer")

_LEADING_DOT_SLASH_RE = re.compile(r"^\.?/?")


def _abs(path: str | Path) -> Path:
    return Path(os.path.abspath(path))


def first_directory(path: str) -> str | None:
    """First directory segment of a manifest path (``./dist/index.js`` -> ``dist``).

    Returns None for paths without a directory segment.
    """
    if not path:
        return None
    normalized = _LEADING_DOT_SLASH_RE.sub("", path, count=1)
    slash = normalized.find("/")
    if slash <= 0:
        return None
    return normalized[:slash]


def is_source_file(path: str, options: SynthesisOptions) -> bool:
    if not path or not path.endswith(options.source_file_extensions):
        return False
    return not any(marker in path for marker in options.bundled_markers)


def is_source_dir(name: str, manifest: Manifest, options: SynthesisOptions) -> bool:
    return name == manifest.src_dir or name in options.source_dirs


def package_globs(
    root_dir: Path,
    cwd_dir: Path,
    package_dir: Path,
    manifest: Manifest,
    options: SynthesisOptions,
) -> list[str]:
    """Inclusion glob for *package_dir* followed by its exclusions.

    Paths are relative to *cwd_dir*. The workspace root and the invoking
    package itself yield nothing.
    """
    if package_dir == root_dir:
        return []
    rel = Path(os.path.relpath(package_dir, cwd_dir)).as_posix()
    if rel == ".":
        return []

    globs = [f"{rel}/**/*"]
    globs.extend(f"!{rel}/{marker}/**/*" for marker in options.vendored_markers)
    globs.extend(
        f"!{rel}/{out}/**/*" for out in options.output_dirs if out not in options.source_dirs
    )

    # Build output living somewhere nonstandard, inferred from the manifest
    for output_path in manifest.output_paths():
        segment = first_directory(output_path)
        if segment is None:
            continue
        if not is_source_dir(segment, manifest, options) and not is_source_file(
            output_path, options
        ):
            globs.append(f"!{rel}/{segment}/**/*")

    return list(dict.fromkeys(globs))


def _skip_reason(
    package_dir: Path,
    manifest: Manifest,
    cwd_dir: Path,
    linked: set[str],
    options: SynthesisOptions,
) -> str | None:
    if any(marker in part for part in package_dir.parts for marker in options.vendored_markers):
        return "vendored"
    if package_dir == cwd_dir:
        return "invoking_package"
    if manifest.name not in linked:
        return "not_linked"
    if manifest.build_options.is_lib:
        return "library"
    if any(ns in manifest.name for ns in options.reserved_namespaces):
        return "reserved_namespace"
    return None


async def synthesize(
    root_dir: str | Path,
    cwd_dir: str | Path,
    manifest_map: dict[Path, Manifest],
    name_prefix: str | None = None,
    *,
    cwd_manifest: Manifest | None = None,
    probe: PathProbe | None = None,
    options: SynthesisOptions | None = None,
) -> MonorepoInfo:
    """Build aliases and include/exclude globs for the package at *cwd_dir*.

    The invoking package's manifest is *cwd_manifest*, else its entry in
    *manifest_map*, else read from ``cwd_dir/package.json``. Only packages
    whose name starts with *name_prefix* get an alias; glob emission ignores
    the prefix.
    """
    probe = probe or default_probe()
    options = options or SynthesisOptions()
    root = _abs(root_dir)
    cwd = _abs(cwd_dir)

    if cwd_manifest is None:
        cwd_manifest = {_abs(d): m for d, m in manifest_map.items()}.get(cwd)
    if cwd_manifest is None:
        cwd_manifest = await load_manifest(cwd / MANIFEST_FILENAME, probe=probe)
    linked = cwd_manifest.workspace_dependencies(options.workspace_protocol)
    prefix = name_prefix or ""

    info = MonorepoInfo()
    for raw_dir, manifest in manifest_map.items():
        package_dir = _abs(raw_dir)
        reason = _skip_reason(package_dir, manifest, cwd, linked, options)
        if reason is not None:
            log.debug(
                "synthesizer.package_skipped",
                directory=str(package_dir),
                package=manifest.name,
                reason=reason,
            )
            continue

        if manifest.name.startswith(prefix):
            info.aliases.append(
                AliasEntry(
                    find=manifest.name,
                    replacement=str(package_dir),
                    manifest=manifest,
                    probe=probe,
                )
            )

        info.include_exclude_globs.extend(package_globs(root, cwd, package_dir, manifest, options))

    log.info(
        "synthesizer.complete",
        cwd=str(cwd),
        aliases=len(info.aliases),
        globs=len(info.include_exclude_globs),
    )
    return info


async def gen_monorepo_info(
    config: WorkspaceConfig,
    name_prefix: str | None = None,
    *,
    probe: PathProbe | None = None,
) -> MonorepoInfo:
    """Scan the workspace and synthesize aliases for ``config.cwd_dir``."""
    manifest_map = await scan_workspace(
        config.root_dir,
        probe=probe,
        skip_markers=config.options.vendored_markers,
    )
    return await synthesize(
        config.root_dir,
        config.cwd_dir,
        manifest_map,
        name_prefix,
        probe=probe,
        options=config.options,
    )
