"""Install state for {target}/{tool-dir}/.skm.toml.

Records which bundles were installed for a tool and where they came from.
It only helps attribution; the files on disk are the source of truth.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import tomli
import tomli_w

from .target import Tool
from .utils import logger

MANIFEST_NAME = ".skm.toml"


@dataclass
class ManifestEntry:
    name: str
    source: str


@dataclass
class InstallManifest:
    bundles: List[ManifestEntry] = field(default_factory=list)

    @staticmethod
    def path_for(tool: Tool, target_dir: Path) -> Path:
        return target_dir / tool.dir_name / MANIFEST_NAME

    @classmethod
    def load(cls, tool: Tool, target_dir: Path) -> "InstallManifest":
        """Load the manifest; a missing or corrupt file gives an empty one."""
        path = cls.path_for(tool, target_dir)
        if not path.exists():
            return cls()
        try:
            with open(path, "rb") as f:
                data = tomli.load(f)
        except (tomli.TOMLDecodeError, UnicodeDecodeError) as e:
            logger.warning("Corrupt install manifest at %s: %s", path, e)
            return cls()

        raw_bundles = data.get("bundles")
        if not isinstance(raw_bundles, list):
            raw_bundles = []
        entries = []
        for raw in raw_bundles:
            if isinstance(raw, dict) and isinstance(raw.get("name"), str):
                entries.append(ManifestEntry(name=raw["name"], source=str(raw.get("source", ""))))
        return cls(bundles=entries)

    def save(self, tool: Tool, target_dir: Path) -> None:
        path = self.path_for(tool, target_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {"bundles": [{"name": e.name, "source": e.source} for e in self.bundles]}
        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def record_install(self, name: str, source: str) -> None:
        """Add a bundle, or update its source if already recorded."""
        for entry in self.bundles:
            if entry.name == name:
                entry.source = source
                return
        self.bundles.append(ManifestEntry(name=name, source=source))

    def remove_bundle(self, name: str) -> bool:
        before = len(self.bundles)
        self.bundles = [e for e in self.bundles if e.name != name]
        return len(self.bundles) < before

    def bundle_names(self) -> List[str]:
        return [e.name for e in self.bundles]

    def is_empty(self) -> bool:
        return not self.bundles
