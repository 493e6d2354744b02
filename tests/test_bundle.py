"""Tests for bundle.py scanners."""

import pytest
from pathlib import Path

from skm.bundle import (
    ArtifactType,
    bundle_from_path,
    bundle_from_resources,
    bundles_from_marketplace,
    bundles_from_resources,
    find_content_file,
    is_marketplace_format,
    is_resources_format,
    is_skipped_name,
)


def test_artifact_type_names():
    """Verify directory and canonical file names per type."""
    assert ArtifactType.SKILL.dir_name == "skills"
    assert ArtifactType.RULE.canonical_filename == "RULE.md"
    assert ArtifactType.AGENT.content_filenames == ("AGENT.md", "agent.md")
    assert ArtifactType.RULE.alt_dir_names == ("cursor-rules",)


@pytest.mark.parametrize("name,skipped", [
    (".git", True),
    ("_templates", True),
    ("docs", False),
])
def test_is_skipped_name(name, skipped):
    assert is_skipped_name(name) is skipped


def test_bundle_from_path_flat(flat_source):
    """Each type directory contributes its .md files."""
    bundle = bundle_from_path(flat_source / "docs")

    assert bundle.name == "docs"
    assert [a.name for a in bundle.skills] == ["writing"]
    assert [a.name for a in bundle.agents] == ["reviewer"]
    assert [a.name for a in bundle.commands] == ["publish"]
    assert bundle.rules == []
    assert bundle.skills[0].companion_root is None


def test_bundle_from_path_ignores_non_markdown(tmp_path):
    (tmp_path / "b" / "skills").mkdir(parents=True)
    (tmp_path / "b" / "skills" / "notes.txt").write_text("not a skill")
    (tmp_path / "b" / "skills" / ".hidden.md").write_text("# Hidden")

    bundle = bundle_from_path(tmp_path / "b")

    assert bundle.is_empty()


def test_bundle_counts(flat_source):
    bundle = bundle_from_path(flat_source / "docs")
    assert bundle.counts() == {"skills": 1, "agents": 1, "commands": 1, "rules": 0}


def test_is_resources_format(resources_source, flat_source):
    assert is_resources_format(resources_source)
    assert not is_resources_format(flat_source)


def test_find_content_file_prefers_canonical(tmp_path):
    """SKILL.md wins over other markdown in the folder."""
    folder = tmp_path / "s"
    folder.mkdir()
    (folder / "aaa.md").write_text("a")
    (folder / "SKILL.md").write_text("skill")

    assert find_content_file(folder, ArtifactType.SKILL) == folder / "SKILL.md"


def test_find_content_file_falls_back_to_first_markdown(tmp_path):
    folder = tmp_path / "s"
    folder.mkdir()
    (folder / "zeta.md").write_text("z")
    (folder / "alpha.md").write_text("a")

    assert find_content_file(folder, ArtifactType.COMMAND) == folder / "alpha.md"


def test_bundles_from_resources_merges_by_meta_name(resources_source):
    """Skill and agent with meta name 'pdf' end up in one bundle."""
    bundles = {b.name: b for b in bundles_from_resources(resources_source)}

    assert set(bundles) == {"pdf", "style", "deploy"}
    pdf = bundles["pdf"]
    assert [a.name for a in pdf.skills] == ["pdf"]
    assert [a.name for a in pdf.agents] == ["pdf"]
    assert pdf.meta.author == "alice"
    assert pdf.meta.description == "Work with PDF files"


def test_bundles_from_resources_artifact_details(resources_source):
    bundles = {b.name: b for b in bundles_from_resources(resources_source)}

    skill = bundles["pdf"].skills[0]
    assert skill.companion_root == resources_source / "resources" / "skills" / "pdf-tools"
    # cursor-rules/ is accepted for rules
    assert bundles["style"].rules[0].content_path.name == "RULE.md"
    # Any markdown file works when the canonical name is missing
    assert bundles["deploy"].commands[0].content_path.name == "deploy-steps.md"


def test_bundle_from_resources_single_bundle(resources_source):
    """Single-bundle mode gathers every resource under one name."""
    bundle = bundle_from_resources(resources_source, "everything")

    assert bundle.name == "everything"
    assert len(bundle.skills) == 1
    assert len(bundle.agents) == 1
    assert len(bundle.commands) == 1
    assert len(bundle.rules) == 1


def test_resources_malformed_meta_uses_folder_name(tmp_path):
    folder = tmp_path / "resources" / "skills" / "broken"
    folder.mkdir(parents=True)
    (folder / "SKILL.md").write_text("# Broken\n")
    (folder / "meta.yaml").write_text("name: [unclosed\n")

    bundles = bundles_from_resources(tmp_path)

    assert [b.name for b in bundles] == ["broken"]


def test_resources_folder_without_markdown_skipped(tmp_path):
    folder = tmp_path / "resources" / "skills" / "assets-only"
    folder.mkdir(parents=True)
    (folder / "image.png").write_bytes(b"\x89PNG")

    assert bundles_from_resources(tmp_path) == []


def test_is_marketplace_format(marketplace_source, flat_source):
    assert is_marketplace_format(marketplace_source)
    assert not is_marketplace_format(flat_source)


def test_bundles_from_marketplace(marketplace_source):
    """Each skill folder is a single-skill bundle with frontmatter metadata."""
    bundles = {b.name: b for b in bundles_from_marketplace(marketplace_source)}

    assert set(bundles) == {"pptx", "xlsx"}
    pptx = bundles["pptx"]
    assert pptx.meta.author == "bob"
    assert pptx.meta.description == "Create slide decks"
    assert pptx.skills[0].companion_root == marketplace_source / "skills" / "pptx"
    # No frontmatter: folder name, no metadata
    assert bundles["xlsx"].meta.description is None
