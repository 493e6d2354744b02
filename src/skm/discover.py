"""
Installed Artifact Discovery

Reconstructs what is installed in a target directory purely from path
shape, for every tool:

- .claude/skills/*/SKILL.md, .claude/rules/*/RULE.md
- .claude/agents/{bundle}/*.md, .claude/commands/{bundle}/*.md
- .opencode/skill/*/SKILL.md, .opencode/rule/*/RULE.md
- .opencode/agent/*.md, .opencode/command/*.md
- .cursor/skills/*/SKILL.md, .cursor/rules/*/RULE.md, .cursor/rules/*.mdc
- .cursor/commands/*.md
- .codex/skills/*/SKILL.md, .codex/rules/*/RULE.md
- .codex/agents/*.md, .codex/prompts/*.md

Combined {bundle}-{name} installs carry no bundle in their path; they are
attributed by longest "{bundle}-" prefix, first against the install
manifest and then against bundles the sources currently provide. The
heuristic can pick the wrong bundle when one bundle name is a prefix of
another (e.g. "foo" and "foo-bar").
"""

import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .bundle import ArtifactType
from .install_manifest import InstallManifest
from .target import Tool

FOLDER = "folder"  # {dir}/{name}/SKILL.md or RULE.md
FLAT = "flat"  # {dir}/{name}.md
NESTED = "nested"  # {dir}/{bundle}/{name}.md
LEGACY_MDC = "mdc"  # {dir}/{name}.mdc

LAYOUT: Dict[Tool, List[Tuple[str, ArtifactType, str]]] = {
    Tool.CLAUDE: [
        ("skills", ArtifactType.SKILL, FOLDER),
        ("agents", ArtifactType.AGENT, NESTED),
        ("commands", ArtifactType.COMMAND, NESTED),
        ("rules", ArtifactType.RULE, FOLDER),
    ],
    Tool.OPENCODE: [
        ("skill", ArtifactType.SKILL, FOLDER),
        ("agent", ArtifactType.AGENT, FLAT),
        ("command", ArtifactType.COMMAND, FLAT),
        ("rule", ArtifactType.RULE, FOLDER),
    ],
    Tool.CURSOR: [
        ("skills", ArtifactType.SKILL, FOLDER),
        ("rules", ArtifactType.RULE, FOLDER),
        ("rules", ArtifactType.RULE, LEGACY_MDC),
        ("commands", ArtifactType.COMMAND, FLAT),
    ],
    Tool.CODEX: [
        ("skills", ArtifactType.SKILL, FOLDER),
        ("agents", ArtifactType.AGENT, FLAT),
        ("prompts", ArtifactType.COMMAND, FLAT),
        ("rules", ArtifactType.RULE, FOLDER),
    ],
}


@dataclass(frozen=True)
class InstalledArtifact:
    name: str
    artifact_type: ArtifactType
    tool: Tool
    file_path: Path
    bundle: Optional[str] = None

    @property
    def is_folder_based(self) -> bool:
        return (
            self.artifact_type in (ArtifactType.SKILL, ArtifactType.RULE)
            and self.file_path.name == self.artifact_type.canonical_filename
        )

    @property
    def unique_id(self) -> str:
        """Identity shared by the same artifact installed for several tools."""
        return f"{self.bundle}/{self.name}" if self.bundle else self.name


def discover_installed(base: Path, tool: Optional[Tool] = None) -> List[InstalledArtifact]:
    """Find installed artifacts under base, for one tool or all of them."""
    tools = [tool] if tool else list(Tool)
    found: List[InstalledArtifact] = []
    for current in tools:
        root = base / current.dir_name
        if not root.is_dir():
            continue
        for dir_name, artifact_type, shape in LAYOUT[current]:
            type_dir = root / dir_name
            if type_dir.is_dir():
                found.extend(_scan(type_dir, artifact_type, current, shape))
    return found


def _scan(type_dir: Path, artifact_type: ArtifactType, tool: Tool, shape: str) -> List[InstalledArtifact]:
    items = []
    if shape == FOLDER:
        filename = artifact_type.canonical_filename
        for entry in sorted(type_dir.iterdir()):
            if entry.is_dir() and (entry / filename).is_file():
                items.append(InstalledArtifact(entry.name, artifact_type, tool, entry / filename))
    elif shape in (FLAT, LEGACY_MDC):
        suffix = ".mdc" if shape == LEGACY_MDC else ".md"
        for entry in sorted(type_dir.iterdir()):
            if entry.is_file() and entry.suffix == suffix:
                items.append(InstalledArtifact(entry.stem, artifact_type, tool, entry))
    elif shape == NESTED:
        for entry in sorted(type_dir.rglob("*.md")):
            if not entry.is_file():
                continue
            bundle = entry.parent.name if entry.parent != type_dir else None
            items.append(InstalledArtifact(entry.stem, artifact_type, tool, entry, bundle))
    return items


# =============================================================================
# ATTRIBUTION
# =============================================================================


def longest_prefix_match(installed_name: str, bundle_names: Iterable[str]) -> Optional[str]:
    """Longest bundle name whose "{bundle}-" prefixes installed_name."""
    best: Optional[str] = None
    for name in bundle_names:
        if installed_name.startswith(f"{name}-") and (best is None or len(name) > len(best)):
            best = name
    return best


def manifest_bundle_names(base: Path) -> Dict[Tool, List[str]]:
    return {tool: InstallManifest.load(tool, base).bundle_names() for tool in Tool}


def attribute_bundles(
    installed: List[InstalledArtifact],
    manifest_names: Dict[Tool, List[str]],
    known_bundle_names: Iterable[str] = (),
) -> List[InstalledArtifact]:
    """Fill in missing bundle attribution by name prefix."""
    known = list(known_bundle_names)
    result = []
    for item in installed:
        if item.bundle is None:
            bundle = longest_prefix_match(item.name, manifest_names.get(item.tool, []))
            if bundle is None:
                bundle = longest_prefix_match(item.name, known)
            if bundle is not None:
                item = replace(item, bundle=bundle)
        result.append(item)
    return result


def matches_bundle(item: InstalledArtifact, bundle_name: str) -> bool:
    if item.bundle == bundle_name:
        return True
    # Combined {bundle}-{name} installs, and single-skill bundles
    return item.name.startswith(f"{bundle_name}-") or item.name == bundle_name


# =============================================================================
# REMOVAL
# =============================================================================


def remove_installed(item: InstalledArtifact) -> None:
    """Delete an installed artifact.

    Folder-based artifacts lose their whole folder. Flat files are unlinked
    and empty parent directories are pruned up to the tool directory.
    """
    if item.is_folder_based:
        shutil.rmtree(item.file_path.parent)
        return

    item.file_path.unlink()
    parent = item.file_path.parent
    while parent.name and not parent.name.startswith(".") and not any(parent.iterdir()):
        parent.rmdir()
        parent = parent.parent


# =============================================================================
# GROUPING
# =============================================================================


def filter_by_tool(items: List[InstalledArtifact], tool: Tool) -> List[InstalledArtifact]:
    return [i for i in items if i.tool is tool]


def group_by_tool(
    items: List[InstalledArtifact],
) -> Dict[Tool, Dict[ArtifactType, List[InstalledArtifact]]]:
    grouped: Dict[Tool, Dict[ArtifactType, List[InstalledArtifact]]] = {}
    for item in items:
        grouped.setdefault(item.tool, {}).setdefault(item.artifact_type, []).append(item)
    return grouped


def group_same_artifacts(items: List[InstalledArtifact]) -> Dict[str, List[InstalledArtifact]]:
    """Group the same artifact installed for several tools."""
    grouped: Dict[str, List[InstalledArtifact]] = {}
    for item in items:
        grouped.setdefault(item.unique_id, []).append(item)
    return grouped
