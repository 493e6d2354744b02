"""
Bundle Model and Scanners

A bundle is a named collection of skills, agents, commands and rules.
Sources publish bundles in one of several layouts; this module scans the
layouts that live on the filesystem directly:

Flat format:
- {bundle}/skills/*.md
- {bundle}/agents/*.md
- {bundle}/commands/*.md
- {bundle}/rules/*.md

Resources format:
- resources/{skills,agents,commands,rules,cursor-rules}/{folder}/meta.yaml
- resources/{...}/{folder}/skill.md (or agent.md, command.md, rule.md, any .md)

Marketplace format:
- skills/{name}/SKILL.md (+ companion files)

The manifest-declared format (skm.toml) lives in manifest.py.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .utils import extract_yaml_frontmatter, load_yaml_file, logger

META_FILE = "meta.yaml"


class ArtifactType(Enum):
    SKILL = "skill"
    AGENT = "agent"
    COMMAND = "command"
    RULE = "rule"

    @property
    def dir_name(self) -> str:
        return f"{self.value}s"

    @property
    def alt_dir_names(self) -> Tuple[str, ...]:
        """Extra directory names accepted in the resources format."""
        if self is ArtifactType.RULE:
            return ("cursor-rules",)
        return ()

    @property
    def canonical_filename(self) -> str:
        return f"{self.value.upper()}.md"

    @property
    def content_filenames(self) -> Tuple[str, str]:
        return (self.canonical_filename, f"{self.value}.md")

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class Artifact:
    """A single skill, agent, command or rule."""
    name: str
    content_path: Path
    artifact_type: ArtifactType
    companion_root: Optional[Path] = None  # set for folder-based artifacts only


@dataclass
class BundleMeta:
    author: Optional[str] = None
    description: Optional[str] = None


@dataclass
class Bundle:
    name: str
    root_path: Path
    skills: List[Artifact] = field(default_factory=list)
    agents: List[Artifact] = field(default_factory=list)
    commands: List[Artifact] = field(default_factory=list)
    rules: List[Artifact] = field(default_factory=list)
    meta: BundleMeta = field(default_factory=BundleMeta)

    def artifacts(self, artifact_type: ArtifactType) -> List[Artifact]:
        return {
            ArtifactType.SKILL: self.skills,
            ArtifactType.AGENT: self.agents,
            ArtifactType.COMMAND: self.commands,
            ArtifactType.RULE: self.rules,
        }[artifact_type]

    def all_artifacts(self) -> List[Artifact]:
        return self.skills + self.agents + self.commands + self.rules

    def is_empty(self) -> bool:
        return not (self.skills or self.agents or self.commands or self.rules)

    def counts(self) -> Dict[str, int]:
        return {t.dir_name: len(self.artifacts(t)) for t in ArtifactType}

    def add(self, artifact: Artifact) -> None:
        self.artifacts(artifact.artifact_type).append(artifact)

    def sort(self) -> None:
        """Sort every artifact list by name."""
        for artifact_type in ArtifactType:
            self.artifacts(artifact_type).sort(key=_artifact_sort_key)


def _artifact_sort_key(artifact: Artifact) -> Tuple[str, str]:
    return (artifact.name, str(artifact.content_path))


def is_skipped_name(name: str) -> bool:
    """Hidden entries and _templates are never bundles or artifacts."""
    return name.startswith(".") or name.startswith("_")


# =============================================================================
# FLAT FORMAT
# =============================================================================


def bundle_from_path(path: Path, name: Optional[str] = None) -> Bundle:
    """Scan a flat-format bundle directory."""
    bundle = Bundle(name=name or path.name, root_path=path)
    for artifact_type in ArtifactType:
        type_dir = path / artifact_type.dir_name
        if not type_dir.is_dir():
            continue
        for entry in sorted(type_dir.iterdir()):
            if entry.is_file() and entry.suffix == ".md" and not is_skipped_name(entry.name):
                bundle.add(Artifact(entry.stem, entry, artifact_type))
    bundle.sort()
    return bundle


def has_flat_layout(path: Path) -> bool:
    return any((path / t.dir_name).is_dir() for t in ArtifactType)


# =============================================================================
# RESOURCES FORMAT
# =============================================================================


def is_resources_format(root: Path) -> bool:
    return (root / "resources").is_dir()


def find_content_file(folder: Path, artifact_type: ArtifactType) -> Optional[Path]:
    """Canonical content file of a folder, else the first .md by name."""
    for filename in artifact_type.content_filenames:
        candidate = folder / filename
        if candidate.is_file():
            return candidate
    markdown = sorted(p for p in folder.iterdir() if p.is_file() and p.suffix == ".md")
    return markdown[0] if markdown else None


def _resource_folders(resources_dir: Path, artifact_type: ArtifactType):
    for dir_name in (artifact_type.dir_name,) + artifact_type.alt_dir_names:
        type_dir = resources_dir / dir_name
        if not type_dir.is_dir():
            continue
        for entry in sorted(type_dir.iterdir()):
            if entry.is_dir() and not is_skipped_name(entry.name):
                yield entry


def scan_resource_folder(
    folder: Path, artifact_type: ArtifactType
) -> Optional[Tuple[Artifact, BundleMeta]]:
    """Read one resources/{type}/{folder}/ entry.

    The display name comes from meta.yaml when it has one, else the folder
    name. Folders without any markdown are skipped.
    """
    content = find_content_file(folder, artifact_type)
    if content is None:
        logger.debug("Skipping %s: no markdown content", folder)
        return None

    meta = load_yaml_file(folder / META_FILE) or {}
    name = meta.get("name")
    if not isinstance(name, str) or not name.strip():
        name = folder.name

    artifact = Artifact(name.strip(), content, artifact_type, companion_root=folder)
    return artifact, BundleMeta(
        author=_optional_str(meta.get("author")),
        description=_optional_str(meta.get("description")),
    )


def bundle_from_resources(root: Path, bundle_name: str) -> Bundle:
    """Single-bundle mode: every resource goes into one named bundle."""
    bundle = Bundle(name=bundle_name, root_path=root)
    resources_dir = root / "resources"
    if not resources_dir.is_dir():
        return bundle
    for artifact_type in ArtifactType:
        for folder in _resource_folders(resources_dir, artifact_type):
            scanned = scan_resource_folder(folder, artifact_type)
            if scanned:
                bundle.add(scanned[0])
    bundle.sort()
    return bundle


def bundles_from_resources(root: Path) -> List[Bundle]:
    """Multi-bundle mode: one bundle per resolved display name.

    Resources in different type directories whose meta.yaml resolves to
    the same name merge into the same bundle.
    """
    resources_dir = root / "resources"
    if not resources_dir.is_dir():
        return []

    bundles: Dict[str, Bundle] = {}
    for artifact_type in ArtifactType:
        for folder in _resource_folders(resources_dir, artifact_type):
            scanned = scan_resource_folder(folder, artifact_type)
            if not scanned:
                continue
            artifact, meta = scanned
            bundle = bundles.get(artifact.name)
            if bundle is None:
                bundle = Bundle(name=artifact.name, root_path=folder)
                bundles[artifact.name] = bundle
            bundle.meta.author = bundle.meta.author or meta.author
            bundle.meta.description = bundle.meta.description or meta.description
            bundle.add(artifact)

    for bundle in bundles.values():
        bundle.sort()
    return sorted(bundles.values(), key=lambda b: b.name)


# =============================================================================
# MARKETPLACE FORMAT
# =============================================================================


def is_marketplace_format(root: Path) -> bool:
    skills_dir = root / "skills"
    if not skills_dir.is_dir():
        return False
    return any(
        d.is_dir() and (d / "SKILL.md").is_file() for d in skills_dir.iterdir()
    )


def bundles_from_marketplace(root: Path) -> List[Bundle]:
    """Each skills/{name}/SKILL.md is a single-skill bundle."""
    bundles = []
    for folder in sorted((root / "skills").iterdir()):
        skill_file = folder / "SKILL.md"
        if not folder.is_dir() or is_skipped_name(folder.name) or not skill_file.is_file():
            continue

        frontmatter, _ = extract_yaml_frontmatter(skill_file.read_text(encoding="utf-8"))
        frontmatter = frontmatter or {}
        name = _optional_str(frontmatter.get("name")) or folder.name
        author = _optional_str(frontmatter.get("author"))
        metadata = frontmatter.get("metadata")
        if author is None and isinstance(metadata, dict):
            author = _optional_str(metadata.get("author"))

        bundle = Bundle(
            name=name,
            root_path=folder,
            meta=BundleMeta(author=author, description=_optional_str(frontmatter.get("description"))),
        )
        bundle.add(Artifact(name, skill_file, ArtifactType.SKILL, companion_root=folder))
        bundles.append(bundle)

    return sorted(bundles, key=lambda b: b.name)


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
