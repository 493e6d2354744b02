"""Tests for skm.toml source manifests."""

import pytest
from pathlib import Path

from skm.bundle import ArtifactType
from skm.manifest import (
    BundleDeclaration,
    ComponentPaths,
    bundle_from_declaration,
    load_manifest,
    scan_component_dir,
)


def test_load_manifest_missing(tmp_path):
    assert load_manifest(tmp_path) is None


def test_load_manifest_parses_declarations(manifest_source):
    """Invalid declarations are skipped, valid ones kept in order."""
    manifest = load_manifest(manifest_source)

    assert manifest.name == "team"
    assert [d.name for d in manifest.bundles] == ["core"]
    core = manifest.bundles[0]
    assert core.path == "plugins/core"
    assert core.description == "Core workflow"
    assert core.tags == ["debug"]
    assert core.paths.skills == "skills/base"
    assert core.paths.agents == "agents"


def test_load_manifest_malformed_toml(tmp_path, caplog):
    (tmp_path / "skm.toml").write_text("[[bundles]\nname = ")

    assert load_manifest(tmp_path) is None
    assert "malformed" in caplog.text


def test_component_paths_dir_for():
    paths = ComponentPaths(rules="policies")
    assert paths.dir_for(ArtifactType.RULE) == "policies"
    assert paths.dir_for(ArtifactType.COMMAND) == "commands"


def test_bundle_from_declaration(manifest_source):
    """Folders and flat files in the declared directories are both scanned."""
    declaration = load_manifest(manifest_source).bundles[0]
    bundle = bundle_from_declaration(manifest_source, declaration)

    assert bundle.name == "core"
    assert bundle.meta.description == "Core workflow"
    assert [a.name for a in bundle.skills] == ["debugging", "tracing"]
    assert [a.name for a in bundle.commands] == ["fix"]

    debugging, tracing = bundle.skills
    assert debugging.companion_root == manifest_source / "plugins" / "core" / "skills" / "base" / "debugging"
    assert tracing.companion_root is None


def test_bundle_from_declaration_missing_dirs(tmp_path):
    declaration = BundleDeclaration(name="ghost", path="nowhere")
    assert bundle_from_declaration(tmp_path, declaration).is_empty()


def test_scan_component_dir_accepts_mdc(tmp_path):
    (tmp_path / "rules").mkdir()
    (tmp_path / "rules" / "legacy.mdc").write_text("---\nalwaysApply: true\n---\n")
    (tmp_path / "rules" / "_draft.md").write_text("draft")

    artifacts = scan_component_dir(tmp_path / "rules", ArtifactType.RULE)

    assert [a.name for a in artifacts] == ["legacy"]
