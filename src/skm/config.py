"""
Configuration Module

Persists the configured skill sources (in priority order) and the default
tool. Sources earlier in the list win when two provide the same bundle.

Config stored in: ~/.config/skm/config.json
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .bundle import Bundle
from .source import GitSource, LocalSource, Source, SourceError
from .utils import config_dir, expand_tilde, logger

DEFAULT_TOOL = "claude"
DEFAULT_SOURCE_PATH = "~/.claude-skills"


class SourceNotFoundError(LookupError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Source '{name}' not found. Add it with: skm sources add <path> --name {name}")


def is_git_url(location: str) -> bool:
    return location.startswith(("http://", "https://", "git@")) or location.endswith(".git")


@dataclass
class SourceConfig:
    """A configured source: a local path or a git URL."""
    type: str  # "local" or "git"
    path: Optional[str] = None
    url: Optional[str] = None
    name: Optional[str] = None
    bundle: Optional[str] = None  # group a resources/ source into one bundle

    @classmethod
    def from_location(cls, location: str, name: Optional[str] = None) -> "SourceConfig":
        if is_git_url(location):
            return cls(type="git", url=location, name=name)
        if not location.startswith("~"):
            location = str(Path(location).expanduser().resolve())
        return cls(type="local", path=location, name=name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["SourceConfig"]:
        kind = data.get("type")
        if kind == "local" and isinstance(data.get("path"), str):
            return cls(type="local", path=data["path"], name=data.get("name"), bundle=data.get("bundle"))
        if kind == "git" and isinstance(data.get("url"), str):
            return cls(type="git", url=data["url"], name=data.get("name"), bundle=data.get("bundle"))
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @property
    def location(self) -> str:
        return self.path if self.type == "local" else self.url

    def to_source(self) -> Source:
        if self.type == "git":
            return GitSource(self.url, bundle_name=self.bundle)
        return LocalSource(expand_tilde(self.path), bundle_name=self.bundle)

    def matches(self, path_or_url: str) -> bool:
        """Match by raw location, expanded path, or name."""
        if self.name is not None and self.name == path_or_url:
            return True
        if self.type == "git":
            return self.url == path_or_url
        return self.path == path_or_url or expand_tilde(self.path) == expand_tilde(path_or_url)


@dataclass
class Config:
    default_tool: str = DEFAULT_TOOL
    sources: List[SourceConfig] = field(default_factory=list)

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    @staticmethod
    def config_path() -> Path:
        return config_dir() / "config.json"

    @classmethod
    def exists(cls) -> bool:
        return cls.config_path().exists()

    @classmethod
    def load(cls) -> Optional["Config"]:
        """Load config from disk; None if there is no usable config file."""
        path = cls.config_path()
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Ignoring malformed config %s: %s", path, e)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: expected an object", path)
            return None

        sources = []
        for raw in data.get("sources") or []:
            source = SourceConfig.from_dict(raw) if isinstance(raw, dict) else None
            if source is None:
                logger.warning("Skipping invalid source entry in %s: %r", path, raw)
                continue
            sources.append(source)
        return cls(default_tool=data.get("default_tool") or DEFAULT_TOOL, sources=sources)

    @classmethod
    def load_or_default(cls) -> "Config":
        """Saved config, or the default single local source ~/.claude-skills."""
        config = cls.load()
        if config is not None:
            return config
        return cls(sources=[SourceConfig(type="local", path=DEFAULT_SOURCE_PATH)])

    def save(self) -> None:
        path = self.config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "default_tool": self.default_tool,
            "sources": [s.to_dict() for s in self.sources],
        }
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    # =========================================================================
    # SOURCE MANAGEMENT
    # =========================================================================

    def add_source(self, source: SourceConfig) -> bool:
        """Append a source unless the same path/url is already configured."""
        for existing in self.sources:
            if existing.type == source.type and existing.location == source.location:
                return False
        self.sources.append(source)
        return True

    def remove_source(self, path_or_url: str) -> bool:
        before = len(self.sources)
        self.sources = [s for s in self.sources if not s.matches(path_or_url)]
        return len(self.sources) < before

    def move_source(self, from_index: int, to_index: int) -> None:
        """Change a source's priority."""
        if not (0 <= from_index < len(self.sources) and 0 <= to_index < len(self.sources)):
            raise IndexError("Invalid source index")
        source = self.sources.pop(from_index)
        self.sources.insert(to_index, source)

    def get_sources(self) -> List[Source]:
        return [s.to_source() for s in self.sources]

    def git_sources(self) -> List[GitSource]:
        return [s.to_source() for s in self.sources if s.type == "git"]

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def scan(self) -> List[Tuple[Source, List[Bundle], Optional[Exception]]]:
        """List bundles of every source; a failing source carries its error."""
        results = []
        for source in self.get_sources():
            try:
                results.append((source, source.list_bundles(), None))
            except (OSError, UnicodeDecodeError, SourceError) as e:
                logger.warning("Could not read source %s: %s", source.display_path(), e)
                results.append((source, [], e))
        return results

    def find_bundle(self, name: str) -> Optional[Tuple[Source, Bundle]]:
        """First bundle with this name, in source priority order."""
        for source, bundles, _ in self.scan():
            for bundle in bundles:
                if bundle.name == name:
                    return source, bundle
        return None

    def find_bundle_by_prefix(self, installed_name: str) -> Optional[Bundle]:
        """Bundle whose "{name}-" is the longest prefix of an installed name.

        Fallback for installs that predate the install manifest.
        """
        best: Optional[Bundle] = None
        for _, bundles, _ in self.scan():
            for bundle in bundles:
                if installed_name.startswith(f"{bundle.name}-") and (
                    best is None or len(bundle.name) > len(best.name)
                ):
                    best = bundle
        return best

    def find_source_by_name(self, name: str) -> Optional[Tuple[Source, SourceConfig]]:
        for source_config in self.sources:
            if source_config.name == name:
                return source_config.to_source(), source_config
        return None

    def known_bundle_names(self) -> List[str]:
        names: List[str] = []
        for _, bundles, _ in self.scan():
            for bundle in bundles:
                if bundle.name not in names:
                    names.append(bundle.name)
        return names


def parse_bundle_ref(ref: str) -> Tuple[Optional[str], str]:
    """Split "source/bundle" into (source, bundle). A bare name has no source."""
    if "/" in ref:
        source, bundle = ref.split("/", 1)
        return source, bundle
    return None, ref
