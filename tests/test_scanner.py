"""Tests for the workspace scanner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from monorepo_alias.exceptions import ManifestParseError
from monorepo_alias.scanner import load_manifest, parse_manifest, scan_workspace


class TestScanWorkspace:
    @pytest.mark.asyncio
    async def test_finds_every_package(self, workspace: Path):
        manifests = await scan_workspace(workspace)
        names = {m.name for m in manifests.values()}
        assert names == {
            "repo-root",
            "@wendraw/site",
            "@wendraw/styles",
            "@wendraw/ui",
            "@wendraw/tools",
            "@wendraw/starry-cli",
            "@wendraw/unrelated",
        }

    @pytest.mark.asyncio
    async def test_keys_are_absolute_directories(self, workspace: Path):
        manifests = await scan_workspace(workspace)
        assert workspace / "packages" / "styles" in manifests
        assert all(d.is_absolute() for d in manifests)

    @pytest.mark.asyncio
    async def test_skips_node_modules(self, workspace: Path):
        manifests = await scan_workspace(workspace)
        assert not any("node_modules" in d.parts for d in manifests)

    @pytest.mark.asyncio
    async def test_directory_without_manifest(self, tmp_path: Path):
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "README.md").write_text("# docs")
        assert await scan_workspace(tmp_path) == {}

    @pytest.mark.asyncio
    async def test_nested_packages(self, tmp_path: Path, make_package):
        make_package(tmp_path / "a", {"name": "a"})
        make_package(tmp_path / "a" / "examples" / "b", {"name": "b"})
        manifests = await scan_workspace(tmp_path)
        assert manifests[tmp_path / "a"].name == "a"
        assert manifests[tmp_path / "a" / "examples" / "b"].name == "b"

    @pytest.mark.asyncio
    async def test_custom_skip_markers(self, tmp_path: Path, make_package):
        make_package(tmp_path / "a", {"name": "a"})
        make_package(tmp_path / "fixtures" / "b", {"name": "b"})
        manifests = await scan_workspace(tmp_path, skip_markers=("node_modules", "fixtures"))
        assert {m.name for m in manifests.values()} == {"a"}

    @pytest.mark.asyncio
    async def test_fresh_result_each_call(self, workspace: Path):
        first = await scan_workspace(workspace)
        second = await scan_workspace(workspace)
        assert first == second
        assert first is not second

    @pytest.mark.asyncio
    async def test_in_memory_probe(self, make_probe):
        probe = make_probe(
            {
                "/w/package.json": json.dumps({"name": "root"}),
                "/w/lib/package.json": json.dumps({"name": "@w/lib"}),
                "/w/lib/src/index.ts": "",
                "/w/lib/node_modules/x/package.json": json.dumps({"name": "x"}),
            }
        )
        manifests = await scan_workspace("/w", probe=probe)
        assert {str(d): m.name for d, m in manifests.items()} == {"/w": "root", "/w/lib": "@w/lib"}

    @pytest.mark.asyncio
    async def test_each_entry_classified_once(self, make_probe):
        class CountingProbe(make_probe):
            def __init__(self, files):
                super().__init__(files)
                self.is_dir_calls: list[str] = []

            def is_dir(self, path) -> bool:
                self.is_dir_calls.append(str(path))
                return super().is_dir(path)

        probe = CountingProbe(
            {
                "/w/package.json": json.dumps({"name": "root"}),
                "/w/lib/package.json": json.dumps({"name": "@w/lib"}),
                "/w/lib/src/index.ts": "",
            }
        )
        await scan_workspace("/w", probe=probe)
        assert sorted(probe.is_dir_calls) == sorted(set(probe.is_dir_calls))
        assert "/w/lib/package.json" in probe.is_dir_calls


class TestManifestSelection:
    @pytest.mark.asyncio
    async def test_exact_name_preferred(self, tmp_path: Path):
        (tmp_path / "a.package.json").write_text(json.dumps({"name": "decoy"}))
        (tmp_path / "package.json").write_text(json.dumps({"name": "real"}))
        manifests = await scan_workspace(tmp_path)
        assert manifests[tmp_path].name == "real"

    @pytest.mark.asyncio
    async def test_first_suffix_match_without_exact_name(self, tmp_path: Path):
        (tmp_path / "b.package.json").write_text(json.dumps({"name": "second"}))
        (tmp_path / "a.package.json").write_text(json.dumps({"name": "first"}))
        manifests = await scan_workspace(tmp_path)
        assert manifests[tmp_path].name == "first"

    @pytest.mark.asyncio
    async def test_directory_named_like_manifest_ignored(self, tmp_path: Path):
        (tmp_path / "package.json").mkdir()
        assert await scan_workspace(tmp_path) == {}


class TestParseErrors:
    @pytest.mark.asyncio
    async def test_malformed_json_aborts_scan(self, workspace: Path):
        (workspace / "packages" / "broken").mkdir()
        (workspace / "packages" / "broken" / "package.json").write_text("{not json")
        with pytest.raises(ManifestParseError) as exc_info:
            await scan_workspace(workspace)
        assert exc_info.value.path.endswith("package.json")
        assert "malformed JSON" in exc_info.value.reason

    def test_invalid_shape(self):
        with pytest.raises(ManifestParseError):
            parse_manifest("package.json", json.dumps(["not", "an", "object"]))

    def test_invalid_exports_key(self):
        with pytest.raises(ManifestParseError):
            parse_manifest("package.json", json.dumps({"name": "x", "exports": {"bad": "./a.js"}}))

    @pytest.mark.asyncio
    async def test_missing_file_propagates(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            await load_manifest(tmp_path / "package.json")

    @pytest.mark.asyncio
    async def test_unreadable_root_propagates(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            await scan_workspace(tmp_path / "missing")
