"""
Cursor AI Writer
Installs bundle artifacts in Cursor layout.

Output structure:
- .cursor/skills/{bundle}-{name}/SKILL.md (+ companion files)
- .cursor/rules/{bundle}-{name}/RULE.md (rules, and agents as rules)
- .cursor/commands/{bundle}-{name}.md

Cursor has no sub-agents, so agents are installed as on-demand rules
(alwaysApply: false). Older installs used flat .cursor/rules/*.mdc files;
those are still recognised when listing and removing.

Reference: https://cursor.com/docs/context/rules
"""

from pathlib import Path

from .bundle import Artifact, ArtifactType
from .frontmatter import normalize_rule, normalize_skill
from .utils import combined_name, write_folder_artifact, write_text

TOOL_DIR = ".cursor"


def write_cursor(target_dir: Path, bundle_name: str, artifact: Artifact) -> Path:
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

    if artifact.artifact_type in (ArtifactType.RULE, ArtifactType.AGENT):
        return write_folder_artifact(
            root / "rules" / combined,
            "RULE.md",
            normalize_rule(content, combined),
            artifact.companion_root,
            artifact.content_path,
        )

    return write_text(root / "commands" / f"{combined}.md", content)
