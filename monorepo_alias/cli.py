"""CLI entry point for inspecting a workspace: monorepo-alias.

Subcommands:
    monorepo-alias scan /path/to/workspace          # List discovered packages
    monorepo-alias aliases --cwd packages/site      # Aliases + globs for one package
    monorepo-alias resolve packages/lib [SPECIFIER] # Resolve one import to its source file
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path

import click

from monorepo_alias.config import WorkspaceConfig, find_workspace_root
from monorepo_alias.core.logging import setup_logging
from monorepo_alias.exceptions import MonorepoAliasError
from monorepo_alias.resolver import resolve_source_path
from monorepo_alias.scanner import MANIFEST_FILENAME, load_manifest, scan_workspace
from monorepo_alias.synthesizer import gen_monorepo_info


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """monorepo-alias: map workspace package imports to their source files."""
    setup_logging("DEBUG" if verbose else None)


@main.command("scan")
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(root: str, as_json: bool) -> None:
    """List every package manifest under ROOT."""
    try:
        manifests = asyncio.run(scan_workspace(root))
    except MonorepoAliasError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    rows = sorted(
        ({"directory": str(d), "name": m.name, "is_lib": m.build_options.is_lib}
         for d, m in manifests.items()),
        key=lambda r: r["directory"],
    )
    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    click.echo(f"Found {len(rows)} package(s)\n")
    for row in rows:
        lib = "  (lib)" if row["is_lib"] else ""
        click.echo(f"  {row['name'] or '<unnamed>'}  {row['directory']}{lib}")


@main.command("aliases")
@click.option("--root", default=None, type=click.Path(exists=True, file_okay=False),
              help="Workspace root (default: discovered from --cwd)")
@click.option("--cwd", default=".", type=click.Path(exists=True, file_okay=False),
              help="Package running the dev server")
@click.option("--prefix", default=None, help="Only alias packages whose name starts with this")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def aliases(root: str | None, cwd: str, prefix: str | None, as_json: bool) -> None:
    """Show the aliases and include/exclude globs synthesized for a package."""
    try:
        config = WorkspaceConfig.create(root or find_workspace_root(cwd), cwd)
        info = asyncio.run(gen_monorepo_info(config, prefix))
    except MonorepoAliasError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(info.as_dict(), indent=2))
        return

    click.echo(f"Workspace root: {config.root_dir}")
    click.echo(f"\nAliases ({len(info.aliases)}):")
    for alias in info.aliases:
        click.echo(f"  {alias.find} -> {alias.replacement}")
    click.echo(f"\nGlobs ({len(info.include_exclude_globs)}):")
    for glob in info.include_exclude_globs:
        click.echo(f"  {glob}")


@main.command("resolve")
@click.argument("package_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("specifier", required=False)
def resolve(package_dir: str, specifier: str | None) -> None:
    """Resolve SPECIFIER (an absolute path under PACKAGE_DIR) to its source file."""
    package_path = Path(os.path.abspath(package_dir))

    async def _resolve() -> str:
        manifest = await load_manifest(package_path / MANIFEST_FILENAME)
        return await resolve_source_path(package_path, manifest, specifier)

    try:
        click.echo(asyncio.run(_resolve()))
    except MonorepoAliasError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except FileNotFoundError:
        click.echo(f"Error: no {MANIFEST_FILENAME} in {package_path}", err=True)
        sys.exit(1)
