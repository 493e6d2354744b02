"""
Skill Sources

A source is anything that can list bundles: a local directory or a git
repository mirrored into the cache.

Git mirrors are stored in: ~/.config/skm/cache/{host}/{owner}/{repo}
"""

import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from .bundle import (
    Bundle,
    bundle_from_path,
    bundle_from_resources,
    bundles_from_marketplace,
    bundles_from_resources,
    has_flat_layout,
    is_marketplace_format,
    is_resources_format,
    is_skipped_name,
)
from .manifest import bundle_from_declaration, load_manifest
from .utils import Colors, config_dir, display_path, logger


class SourceError(Exception):
    """A source could not be fetched or updated."""


class Source(ABC):
    @abstractmethod
    def list_bundles(self) -> List[Bundle]:
        """List all non-empty bundles, sorted by name."""

    @abstractmethod
    def display_path(self) -> str:
        """Human readable origin of this source."""


class LocalSource(Source):
    """A directory on disk.

    Layouts are tried in order: skm.toml manifest, resources/ folder,
    marketplace skills/{name}/SKILL.md, then flat bundle directories.
    """

    def __init__(self, path: Path, bundle_name: Optional[str] = None):
        self.path = Path(path)
        self.bundle_name = bundle_name  # single-bundle resources mode

    def list_bundles(self) -> List[Bundle]:
        if not self.path.is_dir():
            return []

        manifest = load_manifest(self.path)
        if manifest and manifest.bundles:
            logger.debug("%s: using %d declared bundles", self.path, len(manifest.bundles))
            bundles = [bundle_from_declaration(self.path, d) for d in manifest.bundles]
        elif is_resources_format(self.path):
            if self.bundle_name:
                bundles = [bundle_from_resources(self.path, self.bundle_name)]
            else:
                bundles = bundles_from_resources(self.path)
        elif is_marketplace_format(self.path):
            bundles = bundles_from_marketplace(self.path)
        else:
            bundles = self._scan_flat()

        return sorted((b for b in bundles if not b.is_empty()), key=lambda b: b.name)

    def _scan_flat(self) -> List[Bundle]:
        bundles = []
        for entry in sorted(self.path.iterdir()):
            if entry.is_dir() and not is_skipped_name(entry.name):
                bundles.append(bundle_from_path(entry))
        # The source root may itself be a single bundle
        if has_flat_layout(self.path):
            bundles.append(bundle_from_path(self.path))
        return bundles

    def display_path(self) -> str:
        return display_path(self.path)


class GitSource(Source):
    """A git repository cloned into the local cache."""

    def __init__(self, url: str, cache_root: Optional[Path] = None, bundle_name: Optional[str] = None):
        self.url = url
        self.cache_root = cache_root or (config_dir() / "cache")
        self.bundle_name = bundle_name

    @staticmethod
    def url_to_path(url: str) -> str:
        """https://github.com/user/repo.git and git@github.com:user/repo -> github.com/user/repo"""
        url = url.rstrip("/")
        if url.endswith(".git"):
            url = url[: -len(".git")]
        if url.startswith("https://"):
            return url[len("https://"):]
        if url.startswith("http://"):
            return url[len("http://"):]
        if url.startswith("git@"):
            return url[len("git@"):].replace(":", "/")
        return url

    @property
    def cache_path(self) -> Path:
        return self.cache_root / self.url_to_path(self.url)

    def is_cloned(self) -> bool:
        return (self.cache_path / ".git").exists()

    def ensure_cloned(self) -> None:
        """Clone the repository unless a checkout already exists."""
        if self.is_cloned():
            return

        print(f"  {Colors.CYAN}Cloning{Colors.ENDC} {self.url}...")
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        self._git("clone", "--depth", "1", self.url, str(self.cache_path))

    def pull(self) -> bool:
        """Fast-forward the mirror. Returns True if anything changed."""
        if not self.is_cloned():
            self.ensure_cloned()
            return True

        before = self._head()
        self._git("-C", str(self.cache_path), "pull", "--ff-only")
        return self._head() != before

    def _head(self) -> str:
        return self._git("-C", str(self.cache_path), "rev-parse", "HEAD").strip()

    def _git(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                check=True, capture_output=True, text=True,
            )
        except subprocess.CalledProcessError as e:
            raise SourceError(f"git failed for {self.url}: {(e.stderr or '').strip()}") from e
        except FileNotFoundError as e:
            raise SourceError("git executable not found") from e
        return result.stdout

    def list_bundles(self) -> List[Bundle]:
        self.ensure_cloned()
        return LocalSource(self.cache_path, bundle_name=self.bundle_name).list_bundles()

    def display_path(self) -> str:
        return self.url
