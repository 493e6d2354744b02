"""
Frontmatter Normalization

Skills and rules need `name` and `description` in their YAML frontmatter;
rules also need `alwaysApply`. Missing fields are inserted right after the
opening `---` line. Every other line is left exactly as written, and a file
that already has every required field is returned unchanged.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

DELIMITER = "---"
DESCRIPTION_LIMIT = 200
DEFAULT_DESCRIPTION = "Skill instructions"


def split_frontmatter(content: str) -> Tuple[Optional[List[str]], str]:
    """Split content into (frontmatter lines, body).

    Frontmatter is the text strictly between a leading `---` line and the
    next `---` line. Lines keep their line endings. Returns (None, content)
    when the file does not open with a complete block.
    """
    lines = content.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n").rstrip() != DELIMITER:
        return None, content

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n").rstrip() == DELIMITER:
            return lines[1:index], "".join(lines[index + 1:])
    return None, content


def join_frontmatter(frontmatter: Sequence[str], body: str) -> str:
    return DELIMITER + "\n" + "".join(frontmatter) + DELIMITER + "\n" + body


def has_field(frontmatter: Sequence[str], key: str) -> bool:
    """True when a top-level `key:` line exists."""
    prefix = f"{key}:"
    return any(line.startswith(prefix) for line in frontmatter)


def quote(value: str) -> str:
    """Double-quoted YAML scalar."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def synthesize_description(body: str) -> str:
    """Description from the first meaningful body line.

    Headings lose their `#` markers. Text longer than the limit is cut to
    197 characters plus `...`.
    """
    for line in body.splitlines():
        text = line.strip()
        if not text or text == DELIMITER:
            continue
        if text.startswith("#"):
            text = text.lstrip("#").strip()
            if not text:
                continue
        if len(text) > DESCRIPTION_LIMIT:
            text = text[: DESCRIPTION_LIMIT - 3] + "..."
        return text
    return DEFAULT_DESCRIPTION


def _normalize(content: str, default_name: str, rule: bool) -> str:
    frontmatter, body = split_frontmatter(content)
    if frontmatter is None:
        body = content

    required = {
        "name": lambda: f"name: {default_name}",
        "description": lambda: f"description: {quote(synthesize_description(body))}",
    }
    if rule:
        required["alwaysApply"] = lambda: "alwaysApply: false"

    if frontmatter is None:
        block = [make() for make in required.values()]
        return DELIMITER + "\n" + "\n".join(block) + "\n" + DELIMITER + "\n" + content

    missing = [make() for key, make in required.items() if not has_field(frontmatter, key)]
    if not missing:
        return content

    opening, rest = content.split("\n", 1)
    return opening + "\n" + "".join(f"{line}\n" for line in missing) + rest


def normalize_skill(content: str, default_name: str) -> str:
    """Ensure `name` and `description` frontmatter fields."""
    return _normalize(content, default_name, rule=False)


def normalize_rule(content: str, default_name: str) -> str:
    """Ensure `name`, `description` and `alwaysApply` frontmatter fields."""
    return _normalize(content, default_name, rule=True)


# =============================================================================
# RULE <-> COMMAND CONVERSION
# =============================================================================


def convert_to_rule(content: str, source_path: Path) -> str:
    """Wrap a plain markdown file in rule frontmatter.

    Files that already carry frontmatter are returned as they are.
    """
    if split_frontmatter(content)[0] is not None:
        return content

    first_line = content.split("\n", 1)[0]
    if first_line.startswith("#"):
        title = first_line.lstrip("#").strip() or source_path.stem
    else:
        title = source_path.stem or "converted-rule"

    return f"---\ndescription: {quote(title)}\nalwaysApply: false\n---\n\n{content}"


def convert_to_command(content: str) -> str:
    """Drop the frontmatter block, keeping only the instructions."""
    frontmatter, body = split_frontmatter(content)
    if frontmatter is None or not body.strip():
        return content
    return body.lstrip()
