"""
Source Manifest (skm.toml)

A source can declare its bundles explicitly instead of relying on layout
detection:

    [source]
    name = "my-source"
    description = "..."

    [[bundles]]
    name = "bundle-a"
    path = "plugins/a"
    description = "..."
    tags = ["docs"]

    [bundles.paths]
    skills = "skills/base"
    agents = "agents/base"

Each declared type directory may hold flat .md/.mdc files, per-artifact
folders ({name}/SKILL.md etc.), or a mix of both.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli

from .bundle import (
    Artifact,
    ArtifactType,
    Bundle,
    BundleMeta,
    find_content_file,
    is_skipped_name,
)
from .utils import logger

MANIFEST_FILE = "skm.toml"


@dataclass
class ComponentPaths:
    skills: str = "skills"
    agents: str = "agents"
    commands: str = "commands"
    rules: str = "rules"

    def dir_for(self, artifact_type: ArtifactType) -> str:
        return getattr(self, artifact_type.dir_name)


@dataclass
class BundleDeclaration:
    name: str
    path: str
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    paths: ComponentPaths = field(default_factory=ComponentPaths)


@dataclass
class SourceManifest:
    name: Optional[str] = None
    description: Optional[str] = None
    bundles: List[BundleDeclaration] = field(default_factory=list)


def load_manifest(source_root: Path) -> Optional[SourceManifest]:
    """Load skm.toml from a source root.

    Returns None when the file is absent or cannot be parsed; declarations
    missing a name or path are skipped with a warning.
    """
    manifest_path = source_root / MANIFEST_FILE
    if not manifest_path.is_file():
        return None

    try:
        data = tomli.loads(manifest_path.read_text(encoding="utf-8"))
    except (tomli.TOMLDecodeError, UnicodeDecodeError) as e:
        logger.warning("Ignoring malformed %s: %s", manifest_path, e)
        return None

    source = data.get("source") or {}
    raw_bundles = data.get("bundles") or []
    if not isinstance(source, dict) or not isinstance(raw_bundles, list):
        logger.warning("Ignoring %s: unexpected structure", manifest_path)
        return None

    manifest = SourceManifest(
        name=_str_or_none(source.get("name")),
        description=_str_or_none(source.get("description")),
    )
    for index, raw in enumerate(raw_bundles):
        declaration = _parse_declaration(raw)
        if declaration is None:
            logger.warning("Skipping bundle #%d in %s: 'name' and 'path' are required", index + 1, manifest_path)
            continue
        manifest.bundles.append(declaration)

    return manifest


def _parse_declaration(raw: Any) -> Optional[BundleDeclaration]:
    if not isinstance(raw, dict):
        return None
    name = _str_or_none(raw.get("name"))
    path = _str_or_none(raw.get("path"))
    if not name or not path:
        return None

    paths = ComponentPaths()
    raw_paths = raw.get("paths")
    if isinstance(raw_paths, dict):
        for artifact_type in ArtifactType:
            override = _str_or_none(raw_paths.get(artifact_type.dir_name))
            if override:
                setattr(paths, artifact_type.dir_name, override)

    tags = raw.get("tags")
    return BundleDeclaration(
        name=name,
        path=path,
        description=_str_or_none(raw.get("description")),
        tags=[str(t) for t in tags] if isinstance(tags, list) else [],
        paths=paths,
    )


def bundle_from_declaration(source_root: Path, declaration: BundleDeclaration) -> Bundle:
    """Build a bundle by scanning the directories a declaration points at."""
    bundle_root = source_root / declaration.path
    bundle = Bundle(
        name=declaration.name,
        root_path=bundle_root,
        meta=BundleMeta(description=declaration.description),
    )
    for artifact_type in ArtifactType:
        type_dir = bundle_root / declaration.paths.dir_for(artifact_type)
        for artifact in scan_component_dir(type_dir, artifact_type):
            bundle.add(artifact)
    bundle.sort()
    return bundle


def scan_component_dir(directory: Path, artifact_type: ArtifactType) -> List[Artifact]:
    """Scan a type directory holding flat files, artifact folders, or both."""
    if not directory.is_dir():
        return []

    artifacts = []
    for entry in sorted(directory.iterdir()):
        if is_skipped_name(entry.name):
            continue
        if entry.is_file() and entry.suffix in (".md", ".mdc"):
            artifacts.append(Artifact(entry.stem, entry, artifact_type))
        elif entry.is_dir():
            content = find_content_file(entry, artifact_type)
            if content is not None:
                artifacts.append(Artifact(entry.name, content, artifact_type, companion_root=entry))

    artifacts.sort(key=lambda a: a.name)
    return artifacts


def _str_or_none(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
