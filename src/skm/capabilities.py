"""
Agent Tool Capabilities

Claude agents list granted tools on one line:

    tools: Read, Grep, Glob

OpenCode agents use a nested mapping of lowercase names to booleans:

    tools:
      read: true
      grep: true
      write: false

Conversion is line based so the rest of the frontmatter is preserved.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from .frontmatter import join_frontmatter, split_frontmatter
from .utils import logger

# Claude tool name -> OpenCode capability. Edit variants collapse to "edit".
CLAUDE_TO_OPENCODE: Dict[str, str] = {
    "Read": "read",
    "Write": "write",
    "Edit": "edit",
    "MultiEdit": "edit",
    "NotebookEdit": "edit",
    "Bash": "bash",
    "Grep": "grep",
    "Glob": "glob",
    "LS": "list",
    "WebFetch": "webfetch",
    "WebSearch": "websearch",
    "Task": "task",
    "TodoWrite": "todowrite",
    "TodoRead": "todoread",
    "Skill": "skill",
}

# OpenCode capability -> Claude tool name
OPENCODE_TO_CLAUDE: Dict[str, str] = {
    "read": "Read",
    "write": "Write",
    "edit": "Edit",
    "patch": "Edit",
    "bash": "Bash",
    "grep": "Grep",
    "glob": "Glob",
    "list": "LS",
    "webfetch": "WebFetch",
    "websearch": "WebSearch",
    "task": "Task",
    "todowrite": "TodoWrite",
    "todoread": "TodoRead",
    "skill": "Skill",
}

# Only meaningful to Claude
CLAUDE_ONLY_FIELDS = ("color",)


class ToolsStyle(Enum):
    LIST = "list"  # tools: Read, Grep
    MAPPING = "mapping"  # tools:\n  read: true
    NONE = "none"


def to_opencode_name(name: str) -> str:
    mapped = CLAUDE_TO_OPENCODE.get(name)
    if mapped is None:
        mapped = name.lower()
        logger.warning("Unknown tool '%s', passing through as '%s'", name, mapped)
    return mapped


def to_claude_name(name: str) -> str:
    mapped = OPENCODE_TO_CLAUDE.get(name)
    if mapped is None:
        logger.warning("Unknown tool '%s', passing through unchanged", name)
        return name
    return mapped


def _find_tools_line(frontmatter: List[str]) -> Optional[Tuple[int, str]]:
    for index, line in enumerate(frontmatter):
        if line.startswith("tools:"):
            return index, line[len("tools:"):].strip()
    return None


def detect_tools_style(content: str) -> ToolsStyle:
    frontmatter, _ = split_frontmatter(content)
    if frontmatter is None:
        return ToolsStyle.NONE
    found = _find_tools_line(frontmatter)
    if found is None:
        return ToolsStyle.NONE
    _, value = found
    if not value:
        return ToolsStyle.MAPPING
    # A single name without a comma is still a one-item list
    return ToolsStyle.LIST


def _parse_list(value: str) -> List[str]:
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        value = value[1:-1]
    names = []
    for item in value.split(","):
        item = item.strip().strip("'\"").strip()
        if item:
            names.append(item)
    return names


def _mapping_block_end(frontmatter: List[str], start: int) -> int:
    """Index just past the indented lines that follow `tools:`."""
    end = start + 1
    while end < len(frontmatter):
        line = frontmatter[end]
        if line.strip() and line[0] not in (" ", "\t"):
            break
        end += 1
    return end


def _dedupe(names: List[str]) -> List[str]:
    seen = []
    for name in names:
        if name not in seen:
            seen.append(name)
    return seen


def to_mapping_style(content: str) -> str:
    """Convert a Claude agent (tools list) to OpenCode (tools mapping).

    The Claude-only `color` field is dropped. Files without a tools list are
    returned unchanged.
    """
    if detect_tools_style(content) is not ToolsStyle.LIST:
        return content

    frontmatter, body = split_frontmatter(content)
    index, value = _find_tools_line(frontmatter)
    capabilities = _dedupe([to_opencode_name(n) for n in _parse_list(value)])

    converted: List[str] = []
    for position, line in enumerate(frontmatter):
        if position == index:
            converted.append("tools:\n")
            converted.extend(f"  {cap}: true\n" for cap in capabilities)
        elif any(line.startswith(f"{key}:") for key in CLAUDE_ONLY_FIELDS):
            continue
        else:
            converted.append(line)

    return join_frontmatter(converted, body)


def to_list_style(content: str) -> str:
    """Convert an OpenCode agent (tools mapping) to Claude (tools list).

    Entries set to false are dropped. Files without a tools mapping are
    returned unchanged.
    """
    if detect_tools_style(content) is not ToolsStyle.MAPPING:
        return content

    frontmatter, body = split_frontmatter(content)
    index, _ = _find_tools_line(frontmatter)
    end = _mapping_block_end(frontmatter, index)

    enabled = []
    for line in frontmatter[index + 1:end]:
        text = line.strip()
        if not text or text.startswith("#") or ":" not in text:
            continue
        key, _, flag = text.partition(":")
        if flag.strip().lower() == "true":
            enabled.append(to_claude_name(key.strip()))

    names = _dedupe(enabled)
    tools_line = f"tools: {', '.join(names)}\n" if names else 'tools: ""\n'

    converted = list(frontmatter[:index]) + [tools_line] + list(frontmatter[end:])
    return join_frontmatter(converted, body)
