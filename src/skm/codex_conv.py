"""
Codex Writer
Installs bundle artifacts in OpenAI Codex CLI layout.

Output structure:
- .codex/skills/{bundle}-{name}/SKILL.md (+ companion files)
- .codex/agents/{bundle}-{name}.md (copied as-is)
- .codex/prompts/{bundle}-{name}.md (commands become custom prompts)
- .codex/rules/{bundle}-{name}/RULE.md (+ companion files)
"""

from pathlib import Path

from .bundle import Artifact, ArtifactType
from .frontmatter import normalize_rule, normalize_skill
from .utils import combined_name, write_folder_artifact, write_text

TOOL_DIR = ".codex"


def write_codex(target_dir: Path, bundle_name: str, artifact: Artifact) -> Path:
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
    if artifact.artifact_type is ArtifactType.AGENT:
        return write_text(root / "agents" / f"{combined}.md", content)
    return write_text(root / "prompts" / f"{combined}.md", content)
