"""Source path resolver — map an import of a workspace package back to its source file.

A package publishes built output (``main`` / ``module`` / ``exports`` pointing
into ``dist``). During development an alias rewrites ``@scope/pkg`` to the
package directory, and the bundler then asks :func:`resolve_source_path` for
the real file. Three cases:

* the specifier is already a concrete file: returned as-is;
* the specifier names an exported sub-path (``@scope/pkg/colors``): the
  ``exports`` target is mapped from ``dist/...js`` back to ``...ts``;
* anything else falls through to the source-directory search, which probes
  ``<pkg>/<srcDir>/index.ts`` style candidates in a fixed priority order.

Nothing here raises for "not found": the best-effort path is returned and the
bundler reports the unresolved module.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

import structlog

from monorepo_alias.models.manifest import Manifest
from monorepo_alias.probe import PathProbe, default_probe

log = structlog.get_logger("monorepo_alias.resolver")

# Probe priority order
SOURCE_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".jsx", ".mjs")

_OUTPUT_EXT_RE = re.compile(r"\.m?js$")


def _normalize(path: str | Path) -> Path:
    return Path(os.path.normpath(path))


def _relative_parts(path: Path, base: Path) -> tuple[str, ...] | None:
    """Path components of *path* below *base*, or None when outside it."""
    try:
        return path.relative_to(base).parts
    except ValueError:
        return None


async def _is_file(probe: PathProbe, path: str | Path) -> bool:
    return await probe.exists(path) and not probe.is_dir(path)


def _strip_output_prefix(target: str, sub_parts: tuple[str, ...]) -> tuple[str, ...]:
    """Drop the output-directory prefix in front of the sub-path token.

    ``./dist/inner/index.js`` with sub-path ``inner`` -> ``inner/index.js``.
    The token's last component may carry an extension (``colors`` matches
    ``colors.js``). Without a match the whole target is kept.
    """
    parts = tuple(p for p in PurePosixPath(target).parts if p not in ("/", "."))
    head, last = sub_parts[:-1], sub_parts[-1]
    n = len(sub_parts)
    for i in range(len(parts) - n + 1):
        window = parts[i : i + n]
        if window[:-1] == head and (window[-1] == last or window[-1].startswith(last + ".")):
            return parts[i:]
    return parts


def _rewrite_export_target(package_dir: Path, target: str, sub_parts: tuple[str, ...]) -> Path:
    parts = _strip_output_prefix(target, sub_parts) if target else ()
    resolved = package_dir.joinpath(*parts)
    return Path(_OUTPUT_EXT_RE.sub(".ts", str(resolved)))


def _candidates(package_dir: Path, src_dir: str, rel: str) -> Iterator[Path]:
    concrete = rel.endswith(SOURCE_EXTENSIONS)
    seen: set[Path] = set()
    for ext in SOURCE_EXTENSIONS:
        if not rel:
            names = [f"index{ext}"]
        elif concrete:
            names = [rel]
        else:
            names = [f"{rel}{ext}", f"{rel}/index{ext}"]
        # Source directory first, then sources kept at the package root
        for base in (package_dir / src_dir, package_dir):
            for name in names:
                candidate = base / name
                if candidate not in seen:
                    seen.add(candidate)
                    yield candidate


async def find_source_path(
    probe_path: str | Path,
    package_dir: str | Path,
    manifest: Manifest,
    *,
    probe: PathProbe | None = None,
) -> str:
    """Search the package's source tree for the file behind *probe_path*.

    Candidates are probed one at a time and the first existing one wins, so
    the order of :data:`SOURCE_EXTENSIONS` decides ties. Returns *probe_path*
    unchanged when nothing matches.
    """
    probe = probe or default_probe()
    package_dir = _normalize(package_dir)
    parts = _relative_parts(_normalize(probe_path), package_dir)
    if parts is None:
        return str(probe_path)

    rel = "/".join(parts)
    for candidate in _candidates(package_dir, manifest.src_dir, rel):
        if await probe.exists(candidate):
            log.debug("resolver.source_found", package=manifest.name, path=str(candidate))
            return str(candidate)

    log.debug("resolver.source_not_found", package=manifest.name, probe_path=str(probe_path))
    return str(probe_path)


async def resolve_source_path(
    package_dir: str | Path,
    manifest: Manifest,
    import_specifier: str | None = None,
    *,
    probe: PathProbe | None = None,
) -> str:
    """Resolve *import_specifier* (already alias-rewritten to live under
    *package_dir*) to the equivalent file in the package's source tree.

    ``None`` resolves the package root entry. Specifiers that do not live
    under *package_dir* are returned unchanged.
    """
    probe = probe or default_probe()

    if import_specifier and await _is_file(probe, import_specifier):
        return import_specifier

    package_dir = _normalize(package_dir)
    probe_path: str | Path = import_specifier or str(package_dir)

    sub_parts = _relative_parts(_normalize(probe_path), package_dir)
    if sub_parts is None:
        log.debug(
            "resolver.outside_package",
            package=manifest.name,
            specifier=import_specifier,
        )
        return str(probe_path)

    if sub_parts:
        export_key = "./" + "/".join(sub_parts)
        target = manifest.export_target(export_key)
        if target is not None:
            probe_path = _rewrite_export_target(package_dir, target, sub_parts)
            if await _is_file(probe, probe_path):
                return str(probe_path)
    else:
        log.debug(
            "resolver.root_entry",
            package=manifest.name,
            entry_point=manifest.entry_point(),
        )

    return await find_source_path(probe_path, package_dir, manifest, probe=probe)
