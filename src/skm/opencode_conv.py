"""
OpenCode Writer
Installs bundle artifacts in OpenCode layout.

Output structure:
- .opencode/skill/{bundle}-{name}/SKILL.md (+ companion files)
- .opencode/agent/{bundle}-{name}.md (tools as a boolean mapping)
- .opencode/command/{bundle}-{name}.md
- .opencode/rule/{bundle}-{name}/RULE.md (+ companion files)

Reference: https://opencode.ai/docs/agents/
           https://opencode.ai/docs/commands/
"""

from pathlib import Path

from .bundle import Artifact, ArtifactType
from .capabilities import to_mapping_style
from .frontmatter import normalize_rule, normalize_skill
from .utils import combined_name, write_folder_artifact, write_text

TOOL_DIR = ".opencode"

# OpenCode uses singular directory names
TYPE_DIRS = {
    ArtifactType.SKILL: "skill",
    ArtifactType.AGENT: "agent",
    ArtifactType.COMMAND: "command",
    ArtifactType.RULE: "rule",
}


def write_opencode(target_dir: Path, bundle_name: str, artifact: Artifact) -> Path:
    root = target_dir / TOOL_DIR
    type_dir = root / TYPE_DIRS[artifact.artifact_type]
    content = artifact.content_path.read_text(encoding="utf-8")
    combined = combined_name(bundle_name, artifact.name)

    if artifact.artifact_type is ArtifactType.SKILL:
        return write_folder_artifact(
            type_dir / combined,
            "SKILL.md",
            normalize_skill(content, combined),
            artifact.companion_root,
            artifact.content_path,
        )

    if artifact.artifact_type is ArtifactType.RULE:
        return write_folder_artifact(
            type_dir / combined,
            "RULE.md",
            normalize_rule(content, combined),
            artifact.companion_root,
            artifact.content_path,
        )

    if artifact.artifact_type is ArtifactType.AGENT:
        content = to_mapping_style(content)
    return write_text(type_dir / f"{combined}.md", content)
