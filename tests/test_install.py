"""Tests for bundle installation and refresh."""

import pytest
from pathlib import Path

from skm.bundle import ArtifactType
from skm.config import Config, SourceConfig
from skm.install import (
    BundleNotFoundError,
    install_bundle,
    install_bundle_from_source,
    install_from_source,
    refresh_installed,
)
from skm.install_manifest import InstallManifest
from skm.source import LocalSource
from skm.target import Tool


def _bundle(source_root, name):
    return next(b for b in LocalSource(source_root).list_bundles() if b.name == name)


def test_install_bundle_claude(flat_source, project):
    """Every artifact lands in the Claude layout and the install is recorded."""
    stats = install_bundle(_bundle(flat_source, "docs"), Tool.CLAUDE, project, source_label="local", verbose=False)

    assert stats == {"installed": 3, "skipped": 0, "errors": []}
    assert (project / ".claude" / "skills" / "docs-writing" / "SKILL.md").exists()
    assert (project / ".claude" / "agents" / "docs" / "reviewer.md").exists()
    assert (project / ".claude" / "commands" / "docs" / "publish.md").exists()

    manifest = InstallManifest.load(Tool.CLAUDE, project)
    assert manifest.bundle_names() == ["docs"]
    assert manifest.bundles[0].source == "local"


def test_install_bundle_type_filter(flat_source, project):
    stats = install_bundle(
        _bundle(flat_source, "docs"), Tool.OPENCODE, project,
        types=[ArtifactType.SKILL], verbose=False,
    )

    assert stats["installed"] == 1
    assert stats["skipped"] == 2
    assert (project / ".opencode" / "skill" / "docs-writing" / "SKILL.md").exists()
    assert not (project / ".opencode" / "agent").exists()


def test_install_bundle_nothing_written_no_manifest(flat_source, project):
    install_bundle(
        _bundle(flat_source, "docs"), Tool.CURSOR, project,
        types=[ArtifactType.RULE], verbose=False,
    )
    assert not InstallManifest.path_for(Tool.CURSOR, project).exists()


def test_install_bundle_continues_after_failure(flat_source, project):
    """One unreadable artifact is reported; the rest are still installed."""
    bundle = _bundle(flat_source, "docs")
    bundle.agents[0].content_path.unlink()

    stats = install_bundle(bundle, Tool.CODEX, project, verbose=False)

    assert stats["installed"] == 2
    assert len(stats["errors"]) == 1
    assert stats["errors"][0].startswith("agent:reviewer")
    assert (project / ".codex" / "prompts" / "docs-publish.md").exists()


def test_install_resources_with_companions(resources_source, project):
    stats = install_bundle(_bundle(resources_source, "pdf"), Tool.CURSOR, project, verbose=False)

    skill_dir = project / ".cursor" / "skills" / "pdf-pdf"
    assert stats["installed"] == 2
    assert (skill_dir / "scripts" / "extract.py").exists()
    assert (skill_dir / "reference.md").exists()
    assert not (skill_dir / "meta.yaml").exists()
    # Agents become rules in Cursor
    assert (project / ".cursor" / "rules" / "pdf-pdf" / "RULE.md").exists()


def test_install_is_idempotent(flat_source, project):
    bundle = _bundle(flat_source, "docs")
    install_bundle(bundle, Tool.OPENCODE, project, verbose=False)
    first = (project / ".opencode" / "agent" / "docs-reviewer.md").read_text()

    install_bundle(bundle, Tool.OPENCODE, project, verbose=False)

    assert (project / ".opencode" / "agent" / "docs-reviewer.md").read_text() == first
    assert InstallManifest.load(Tool.OPENCODE, project).bundle_names() == ["docs"]


def test_install_bundle_from_source_not_found(flat_source, project):
    with pytest.raises(BundleNotFoundError) as excinfo:
        install_bundle_from_source(LocalSource(flat_source), "nope", Tool.CLAUDE, project, verbose=False)

    assert excinfo.value.available == ["docs", "testing"]
    assert isinstance(excinfo.value, LookupError)


def test_install_from_source(flat_source, project):
    totals = install_from_source(LocalSource(flat_source), Tool.CODEX, project, verbose=False)

    assert totals["bundles"] == 2
    assert totals["installed"] == 4
    assert InstallManifest.load(Tool.CODEX, project).bundle_names() == ["docs", "testing"]


def _config_for(*roots):
    return Config(sources=[SourceConfig(type="local", path=str(root)) for root in roots])


def test_refresh_installed(flat_source, project):
    """Changed source content is rewritten into the existing install."""
    install_bundle(_bundle(flat_source, "docs"), Tool.OPENCODE, project, verbose=False)
    (flat_source / "docs" / "commands" / "publish.md").write_text("Publish v2.\n")

    stats = refresh_installed(_config_for(flat_source), Tool.OPENCODE, project, verbose=False)

    assert stats == {"refreshed": 1, "not_found": [], "errors": []}
    assert (project / ".opencode" / "command" / "docs-publish.md").read_text() == "Publish v2.\n"


def test_refresh_installed_reports_missing_bundles(flat_source, project):
    stray = project / ".codex" / "prompts" / "gone-cmd.md"
    stray.parent.mkdir(parents=True)
    stray.write_text("x")

    stats = refresh_installed(_config_for(flat_source), Tool.CODEX, project, verbose=False)

    assert stats["refreshed"] == 0
    assert stats["not_found"] == ["gone-cmd"]


def test_refresh_installed_nothing_installed(flat_source, project):
    stats = refresh_installed(_config_for(flat_source), Tool.CLAUDE, project, verbose=False)
    assert stats == {"refreshed": 0, "not_found": [], "errors": []}


def test_refresh_uses_source_priority(flat_source, tmp_path, project):
    """The first source providing a bundle wins."""
    override = tmp_path / "override"
    (override / "docs" / "commands").mkdir(parents=True)
    (override / "docs" / "commands" / "publish.md").write_text("Override.\n")
    install_bundle(_bundle(flat_source, "docs"), Tool.CODEX, project, verbose=False)

    refresh_installed(_config_for(override, flat_source), Tool.CODEX, project, verbose=False)

    assert (project / ".codex" / "prompts" / "docs-publish.md").read_text() == "Override.\n"
