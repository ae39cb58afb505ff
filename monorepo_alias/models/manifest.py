"""Package manifest (package.json) model."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ROOT_EXPORT_KEY = "."

# Condition precedence, highest first
ESM_CONDITIONS: tuple[str, ...] = ("import", "default")
CJS_CONDITIONS: tuple[str, ...] = ("require",)

# Keys that mark a top-level exports object as a bare condition map
KNOWN_CONDITIONS = frozenset(
    {
        "import",
        "require",
        "default",
        "source",
        "types",
        "node",
        "browser",
        "module",
        "development",
        "production",
    }
)


class ExportConditions(BaseModel):
    """Per-condition targets of one ``exports`` entry."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    import_: str | None = Field(default=None, alias="import")
    default: str | None = None
    require: str | None = None
    source: str | None = None

    def get(self, condition: str) -> str | None:
        if condition == "import":
            return self.import_
        return getattr(self, condition, None)

    def pick(self, conditions: tuple[str, ...]) -> str | None:
        """Return the first non-empty target among *conditions*."""
        for condition in conditions:
            target = self.get(condition)
            if target:
                return target
        return None

    def targets(self) -> list[str]:
        """Output targets (``import``, ``default``, ``require``) that are set."""
        return [t for t in (self.import_, self.default, self.require) if t]


class BuildOptions(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    is_lib: bool = Field(default=False, alias="isLib")
    src_dir: str | None = Field(default=None, alias="srcDir")


class Manifest(BaseModel):
    """Normalized package.json.

    Only the fields that drive source resolution and alias synthesis are kept;
    everything else in the file is ignored. Instances are frozen so resolver
    closures can hold them safely.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = ""
    module_type: Literal["module", "commonjs"] | None = Field(default=None, alias="type")
    main: str | None = None
    module: str | None = None
    exports: dict[str, ExportConditions] = Field(default_factory=dict)
    build_options: BuildOptions = Field(default_factory=BuildOptions, alias="buildOptions")
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict, alias="devDependencies")

    @field_validator("name", mode="before")
    @classmethod
    def _null_name(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("dependencies", "dev_dependencies", mode="before")
    @classmethod
    def _null_deps(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("build_options", mode="before")
    @classmethod
    def _null_build_options(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("exports", mode="before")
    @classmethod
    def _normalize_exports(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, str):
            return {ROOT_EXPORT_KEY: {"default": v}}
        if not isinstance(v, dict):
            raise ValueError("exports must be a string or an object")

        # {"import": "./dist/index.mjs", "require": "./dist/index.cjs"}
        if v and all(key in KNOWN_CONDITIONS for key in v):
            v = {ROOT_EXPORT_KEY: v}

        normalized: dict[str, dict[str, str]] = {}
        for key, conditions in v.items():
            if key != ROOT_EXPORT_KEY and not key.startswith("./"):
                raise ValueError(f"exports key {key!r} must be '.' or start with './'")
            if isinstance(conditions, str):
                conditions = {"default": conditions}
            elif not isinstance(conditions, dict):
                conditions = {}
            # Nested condition objects and arrays are not followed
            normalized[key] = {c: t for c, t in conditions.items() if isinstance(t, str)}
        return normalized

    # ── derived views ────────────────────────────────────────────────────

    @property
    def is_esm(self) -> bool:
        return self.module_type == "module"

    @property
    def src_dir(self) -> str:
        return self.build_options.src_dir or "src"

    @property
    def condition_order(self) -> tuple[str, ...]:
        return ESM_CONDITIONS if self.is_esm else CJS_CONDITIONS

    def export_target(self, key: str) -> str | None:
        """Target of ``exports[key]`` by condition precedence.

        Returns None when the key is not exported and ``""`` when it is
        exported without a matching condition.
        """
        conditions = self.exports.get(key)
        if conditions is None:
            return None
        return conditions.pick(self.condition_order) or ""

    def entry_point(self) -> str | None:
        """Nominal root entry: ``module``/``main`` overridden by ``exports["."]``."""
        entry = (self.module if self.is_esm else self.main) or self.main
        root_target = self.export_target(ROOT_EXPORT_KEY)
        if root_target is not None:
            entry = root_target or None
        return entry

    def output_paths(self) -> list[str]:
        """Every declared output path: ``main``, ``module`` and all export targets."""
        paths = [p for p in (self.main, self.module) if p]
        for conditions in self.exports.values():
            paths.extend(conditions.targets())
        return paths

    def workspace_dependencies(self, protocol: str = "workspace:") -> set[str]:
        """Names of dependencies linked to sibling workspace packages."""
        merged = {**self.dependencies, **self.dev_dependencies}
        return {name for name, version in merged.items() if version.startswith(protocol)}
