"""Tests for frontmatter normalization and rule/command conversion."""

import pytest
from pathlib import Path

from skm.frontmatter import (
    DEFAULT_DESCRIPTION,
    convert_to_command,
    convert_to_rule,
    normalize_rule,
    normalize_skill,
    split_frontmatter,
    synthesize_description,
)


def test_split_frontmatter():
    frontmatter, body = split_frontmatter("---\nname: a\n---\nBody\n")
    assert frontmatter == ["name: a\n"]
    assert body == "Body\n"


def test_split_frontmatter_unclosed():
    content = "---\nname: a\nno closing line\n"
    assert split_frontmatter(content) == (None, content)


def test_normalize_skill_without_frontmatter():
    """A block with name and a synthesized description is prepended."""
    result = normalize_skill("# Writing Guide\n\nWrite well.\n", "docs-writing")

    assert result == (
        '---\nname: docs-writing\ndescription: "Writing Guide"\n---\n'
        "# Writing Guide\n\nWrite well.\n"
    )


def test_normalize_skill_inserts_missing_fields_after_opening():
    content = "---\ndescription: Existing\nlicense: MIT\n---\n\nBody\n"

    result = normalize_skill(content, "b-skill")

    assert result == "---\nname: b-skill\ndescription: Existing\nlicense: MIT\n---\n\nBody\n"


def test_normalize_skill_complete_is_unchanged():
    content = "---\nname: x\ndescription: y\n---\nBody\n"
    assert normalize_skill(content, "other") == content


def test_normalize_skill_is_idempotent():
    once = normalize_skill("Just some text\n", "b-n")
    assert normalize_skill(once, "b-n") == once


def test_normalize_rule_adds_always_apply():
    result = normalize_rule("---\nname: r\ndescription: d\n---\nBody\n", "b-r")
    assert result == "---\nalwaysApply: false\nname: r\ndescription: d\n---\nBody\n"


def test_normalize_rule_keeps_existing_always_apply():
    content = "---\nname: r\ndescription: d\nalwaysApply: true\n---\nBody\n"
    assert normalize_rule(content, "b-r") == content


def test_synthesize_description_truncates():
    description = synthesize_description("x" * 250)
    assert len(description) == 200
    assert description.endswith("...")


def test_synthesize_description_empty_body():
    assert synthesize_description("\n\n#\n") == DEFAULT_DESCRIPTION


def test_description_is_quoted():
    """Quotes in the first line are escaped."""
    result = normalize_skill('Say "hello" to users\n', "b-n")
    assert 'description: "Say \\"hello\\" to users"' in result


def test_convert_to_rule_no_frontmatter():
    result = convert_to_rule("# Test Rule\n\nSome content here", Path("test-rule.md"))

    assert result.startswith("---\n")
    assert 'description: "Test Rule"' in result
    assert "alwaysApply: false" in result
    assert result.endswith("# Test Rule\n\nSome content here")


def test_convert_to_rule_with_existing_frontmatter():
    content = "---\ndescription: existing\n---\n# Content"
    assert convert_to_rule(content, Path("test.md")) == content


def test_convert_to_rule_uses_filename_when_no_heading():
    result = convert_to_rule("Some content without a heading", Path("my-custom-rule.md"))
    assert 'description: "my-custom-rule"' in result


def test_convert_to_command_strips_frontmatter():
    content = "---\ndescription: test\nalwaysApply: false\n---\n# Rule Content\n\nBody here"

    result = convert_to_command(content)

    assert result == "# Rule Content\n\nBody here"


def test_convert_to_command_no_frontmatter():
    content = "# Simple Content\n\nNo frontmatter here"
    assert convert_to_command(content) == content


def test_convert_to_command_only_frontmatter():
    content = "---\ndescription: test\n---"
    assert convert_to_command(content) == content
