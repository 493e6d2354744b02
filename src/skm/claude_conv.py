"""
Claude Code Writer
Installs bundle artifacts in Claude Code layout.

Output structure:
- .claude/skills/{bundle}-{name}/SKILL.md (+ companion files)
- .claude/agents/{bundle}/{name}.md (tools as a comma list)
- .claude/commands/{bundle}/{name}.md
- .claude/rules/{bundle}-{name}/RULE.md (+ companion files)

Reference: https://docs.anthropic.com/en/docs/claude-code/sub-agents
"""

from pathlib import Path

from .bundle import Artifact, ArtifactType
from .capabilities import to_list_style
from .frontmatter import normalize_rule, normalize_skill
from .utils import combined_name, safe_name, write_folder_artifact, write_text

TOOL_DIR = ".claude"


def write_claude(target_dir: Path, bundle_name: str, artifact: Artifact) -> Path:
    root = target_dir / TOOL_DIR
    content = artifact.content_path.read_text(encoding="utf-8")
    combined = combined_name(bundle_name, artifact.name)

    if artifact.artifact_type is ArtifactType.SKILL:
        return write_folder_artifact(
            root / "skills" / combined,
            "SKILL.md",
            normalize_skill(content, combined),
            artifact.companion_root,
            artifact.content_path,
        )

    if artifact.artifact_type is ArtifactType.RULE:
        return write_folder_artifact(
            root / "rules" / combined,
            "RULE.md",
            normalize_rule(content, combined),
            artifact.companion_root,
            artifact.content_path,
        )

    # Agents and commands nest by bundle instead of combining names
    nested = root / artifact.artifact_type.dir_name / safe_name(bundle_name)
    dest_file = nested / f"{safe_name(artifact.name)}.md"
    if artifact.artifact_type is ArtifactType.AGENT:
        content = to_list_style(content)
    return write_text(dest_file, content)
