"""Shared fixtures for tests."""

import pytest
from pathlib import Path


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config and git cache out of the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("SKM_CONFIG_DIR", str(home / ".config" / "skm"))
    return home


@pytest.fixture
def flat_source(tmp_path):
    """A source with flat-format bundles: {bundle}/{type}/*.md"""
    root = tmp_path / "flat-source"

    (root / "docs" / "skills").mkdir(parents=True)
    (root / "docs" / "agents").mkdir(parents=True)
    (root / "docs" / "commands").mkdir(parents=True)
    (root / "docs" / "skills" / "writing.md").write_text(
        "# Writing\n\nWrite clear documentation.\n"
    )
    (root / "docs" / "agents" / "reviewer.md").write_text(
        "---\nname: reviewer\ndescription: Reviews docs\ntools: Read, Grep\ncolor: blue\n---\n\nYou review docs.\n"
    )
    (root / "docs" / "commands" / "publish.md").write_text(
        "---\ndescription: Publish docs\n---\n\nPublish the docs site.\n"
    )

    (root / "testing" / "rules").mkdir(parents=True)
    (root / "testing" / "rules" / "coverage.md").write_text(
        "# Coverage\n\nKeep coverage above 80%.\n"
    )

    # Not bundles
    (root / ".git").mkdir()
    (root / "_templates" / "skills").mkdir(parents=True)
    (root / "_templates" / "skills" / "template.md").write_text("# Template\n")
    (root / "empty").mkdir()

    return root


@pytest.fixture
def resources_source(tmp_path):
    """A source using resources/{type}/{folder}/ with meta.yaml."""
    root = tmp_path / "resources-source"

    skill = root / "resources" / "skills" / "pdf-tools"
    (skill / "scripts").mkdir(parents=True)
    (skill / "SKILL.md").write_text("# PDF Tools\n\nExtract text from PDFs.\n")
    (skill / "meta.yaml").write_text(
        "name: pdf\nauthor: alice\ndescription: Work with PDF files\n"
    )
    (skill / "reference.md").write_text("# Reference\n")
    (skill / "scripts" / "extract.py").write_text("print('extract')\n")

    agent = root / "resources" / "agents" / "pdf-agent"
    agent.mkdir(parents=True)
    (agent / "AGENT.md").write_text("---\nname: pdf\ntools: Read\n---\n\nPDF agent.\n")
    (agent / "meta.yaml").write_text("name: pdf\n")

    rule = root / "resources" / "cursor-rules" / "style"
    rule.mkdir(parents=True)
    (rule / "RULE.md").write_text("# Style\n\nFollow the style guide.\n")

    command = root / "resources" / "commands" / "deploy"
    command.mkdir(parents=True)
    (command / "deploy-steps.md").write_text("Deploy the app.\n")

    return root


@pytest.fixture
def marketplace_source(tmp_path):
    """A source using skills/{name}/SKILL.md with YAML frontmatter."""
    root = tmp_path / "marketplace"

    pptx = root / "skills" / "pptx"
    pptx.mkdir(parents=True)
    (pptx / "SKILL.md").write_text(
        "---\nname: pptx\ndescription: Create slide decks\nmetadata:\n  author: bob\n---\n\n# PPTX\n"
    )
    (pptx / "LICENSE.txt").write_text("MIT\n")

    xlsx = root / "skills" / "xlsx"
    xlsx.mkdir(parents=True)
    (xlsx / "SKILL.md").write_text("# XLSX\n\nSpreadsheets.\n")

    return root


@pytest.fixture
def manifest_source(tmp_path):
    """A source declaring its bundles in skm.toml."""
    root = tmp_path / "manifest-source"

    plugin = root / "plugins" / "core"
    (plugin / "skills" / "base" / "debugging").mkdir(parents=True)
    (plugin / "skills" / "base" / "debugging" / "SKILL.md").write_text("# Debugging\n")
    (plugin / "skills" / "base" / "tracing.md").write_text("# Tracing\n")
    (plugin / "commands").mkdir(parents=True)
    (plugin / "commands" / "fix.md").write_text("Fix the bug.\n")

    (root / "skm.toml").write_text(
        '[source]\n'
        'name = "team"\n'
        '\n'
        '[[bundles]]\n'
        'name = "core"\n'
        'path = "plugins/core"\n'
        'description = "Core workflow"\n'
        'tags = ["debug"]\n'
        '\n'
        '[bundles.paths]\n'
        'skills = "skills/base"\n'
        '\n'
        '[[bundles]]\n'
        'name = "broken"\n'
    )
    return root


@pytest.fixture
def project(tmp_path):
    """An empty project directory to install into."""
    path = tmp_path / "project"
    path.mkdir()
    return path
