"""Data models for alias synthesis results."""

from __future__ import annotations

from dataclasses import dataclass, field

from monorepo_alias.models.manifest import Manifest
from monorepo_alias.probe import PathProbe
from monorepo_alias.resolver import resolve_source_path


@dataclass(frozen=True)
class AliasEntry:
    """Redirects imports of ``find`` to the package directory ``replacement``.

    The directory and manifest are fixed when the entry is built; later scans
    produce new entries rather than mutating this one.
    """

    find: str
    replacement: str
    manifest: Manifest = field(repr=False, compare=False)
    probe: PathProbe | None = field(default=None, repr=False, compare=False)

    async def custom_resolver(self, source: str | None = None) -> str:
        """Resolve an alias-rewritten import specifier to its source file."""
        return await resolve_source_path(
            self.replacement, self.manifest, source, probe=self.probe
        )

    def as_dict(self) -> dict[str, str]:
        return {"find": self.find, "replacement": self.replacement}


@dataclass
class MonorepoInfo:
    """Result of one synthesis run."""

    aliases: list[AliasEntry] = field(default_factory=list)
    include_exclude_globs: list[str] = field(default_factory=list)

    @property
    def optimize_deps_exclude(self) -> list[str]:
        """Aliased package names, kept out of dependency pre-bundling."""
        return [alias.find for alias in self.aliases]

    def alias_for(self, name: str) -> AliasEntry | None:
        return next((a for a in self.aliases if a.find == name), None)

    def as_dict(self) -> dict:
        return {
            "aliases": [a.as_dict() for a in self.aliases],
            "include_exclude_globs": list(self.include_exclude_globs),
        }
