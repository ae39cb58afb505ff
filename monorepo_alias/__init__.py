"""monorepo-alias: resolve workspace package imports to their source trees."""

__version__ = "0.1.0"

from monorepo_alias.config import SynthesisOptions, WorkspaceConfig, find_workspace_root
from monorepo_alias.exceptions import (
    ManifestParseError,
    MonorepoAliasError,
    WorkspaceConfigError,
)
from monorepo_alias.models.alias import AliasEntry, MonorepoInfo
from monorepo_alias.models.manifest import BuildOptions, ExportConditions, Manifest
from monorepo_alias.probe import LocalPathProbe, PathProbe
from monorepo_alias.resolver import find_source_path, resolve_source_path
from monorepo_alias.scanner import load_manifest, scan_workspace
from monorepo_alias.synthesizer import gen_monorepo_info, synthesize

__all__ = [
    "AliasEntry",
    "BuildOptions",
    "ExportConditions",
    "LocalPathProbe",
    "Manifest",
    "ManifestParseError",
    "MonorepoAliasError",
    "MonorepoInfo",
    "PathProbe",
    "SynthesisOptions",
    "WorkspaceConfig",
    "WorkspaceConfigError",
    "find_source_path",
    "find_workspace_root",
    "gen_monorepo_info",
    "load_manifest",
    "resolve_source_path",
    "scan_workspace",
    "synthesize",
]
