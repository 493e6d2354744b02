"""Tests for utils.py functions."""

import pytest
from pathlib import Path

from skm.utils import (
    combined_name,
    config_dir,
    copy_companions,
    display_path,
    expand_tilde,
    extract_yaml_frontmatter,
    load_yaml_file,
    safe_name,
    write_folder_artifact,
)


def test_extract_yaml_frontmatter():
    """Verify dict + body returned."""
    content = """---
name: test
description: test desc
---

# Body

Content"""

    metadata, body = extract_yaml_frontmatter(content)

    assert metadata["name"] == "test"
    assert metadata["description"] == "test desc"
    assert body.startswith("# Body")


def test_extract_yaml_frontmatter_invalid(caplog):
    content = "---\nname: [broken\n---\nBody"

    metadata, body = extract_yaml_frontmatter(content)

    assert metadata is None
    assert body == content
    assert "unparseable frontmatter" in caplog.text


def test_load_yaml_file_non_mapping(tmp_path, caplog):
    path = tmp_path / "meta.yaml"
    path.write_text("- just\n- a list\n")

    assert load_yaml_file(path) is None
    assert load_yaml_file(tmp_path / "missing.yaml") is None
    assert "expected a mapping" in caplog.text


def test_expand_tilde_and_display_path(isolated_home):
    assert expand_tilde("~") == isolated_home
    assert expand_tilde("~/skills") == isolated_home / "skills"
    assert expand_tilde("/opt/skills") == Path("/opt/skills")
    assert display_path(isolated_home / "skills") == "~/skills"
    assert display_path(Path("/opt/skills")) == "/opt/skills"


def test_config_dir_default(isolated_home, monkeypatch):
    monkeypatch.delenv("SKM_CONFIG_DIR")
    assert config_dir() == isolated_home / ".config" / "skm"


def test_safe_and_combined_names():
    assert safe_name("a/b\\c") == "a-b-c"
    assert combined_name("team/docs", "writing") == "team-docs-writing"


def test_copy_companions_skips_content_and_meta(tmp_path):
    src = tmp_path / "src"
    (src / "assets").mkdir(parents=True)
    (src / "SKILL.md").write_text("skill")
    (src / "meta.yaml").write_text("name: x")
    (src / "helper.sh").write_text("echo hi")
    (src / "assets" / "logo.svg").write_text("<svg/>")
    dest = tmp_path / "dest"
    dest.mkdir()

    copied = copy_companions(src, src / "SKILL.md", dest)

    assert copied == 2
    assert sorted(p.name for p in dest.iterdir()) == ["assets", "helper.sh"]


def test_copy_companions_without_root(tmp_path):
    assert copy_companions(None, tmp_path / "x.md", tmp_path) == 0


def test_write_folder_artifact_overwrites(tmp_path):
    """Re-installing replaces the content file and refreshes companions."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "SKILL.md").write_text("skill")
    (src / "notes.md").write_text("v1")
    dest = tmp_path / "out" / "b-skill"

    write_folder_artifact(dest, "SKILL.md", "first", src, src / "SKILL.md")
    (src / "notes.md").write_text("v2")
    written = write_folder_artifact(dest, "SKILL.md", "second", src, src / "SKILL.md")

    assert written.read_text() == "second"
    assert (dest / "notes.md").read_text() == "v2"


def test_load_yaml_file_invalid_utf8(tmp_path, caplog):
    path = tmp_path / "meta.yaml"
    path.write_bytes(b"name: \xff\n")

    assert load_yaml_file(path) is None
    assert "Ignoring malformed" in caplog.text
