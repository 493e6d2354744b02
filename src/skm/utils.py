import logging
import os
import re
import shutil
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

# Configure module logger
logger = logging.getLogger("skm")


# ANSI colors
class Colors:
    HEADER = "\033[95m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    ENDC = "\033[0m"


# =============================================================================
# PATH HELPERS
# =============================================================================


def home_dir() -> Path:
    """Home directory, honouring $HOME so tests can redirect it."""
    home = os.environ.get("HOME")
    return Path(home) if home else Path.home()


def config_dir() -> Path:
    """~/.config/skm, or $SKM_CONFIG_DIR when set."""
    override = os.environ.get("SKM_CONFIG_DIR")
    if override:
        return Path(override)
    return home_dir() / ".config" / "skm"


def expand_tilde(path: str) -> Path:
    """Expand a leading ~ to the home directory."""
    if path == "~":
        return home_dir()
    if path.startswith("~/"):
        return home_dir() / path[2:]
    return Path(path)


def display_path(path: Path) -> str:
    """Show paths under the home directory as ~/..."""
    try:
        relative = Path(path).relative_to(home_dir())
    except ValueError:
        return str(path)
    return f"~/{relative}"


def safe_name(name: str) -> str:
    """Make a display name usable as a single path component."""
    return name.replace("/", "-").replace("\\", "-")


# =============================================================================
# CONTENT UTILITIES
# =============================================================================

_RE_FRONTMATTER = re.compile(r"^---\n(.*?)\n---\n*", re.DOTALL)


def extract_yaml_frontmatter(content: str) -> Tuple[Optional[Dict[str, Any]], str]:
    """Extract YAML frontmatter from markdown content.

    Returns (None, content) when there is no frontmatter or it does not
    parse to a mapping.
    """
    match = _RE_FRONTMATTER.match(content)
    if match:
        try:
            frontmatter = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            logger.warning("Ignoring unparseable frontmatter: %s", e)
            return None, content
        if isinstance(frontmatter, dict):
            return frontmatter, content[match.end():]

    return None, content


def load_yaml_file(path: Path) -> Optional[Dict[str, Any]]:
    """Load a small YAML mapping file. Missing or malformed files give None."""
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        logger.warning("Ignoring malformed %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping", path)
        return None
    return data


# =============================================================================
# COMMON CONVERTER HELPERS
# =============================================================================

COMPANION_EXCLUDES = ("meta.yaml",)


def combined_name(bundle_name: str, artifact_name: str) -> str:
    """{bundle}-{name}, safe to use as one path component."""
    return safe_name(f"{bundle_name}-{artifact_name}")


def write_text(dest_file: Path, content: str) -> Path:
    dest_file.parent.mkdir(parents=True, exist_ok=True)
    dest_file.write_text(content, encoding="utf-8")
    return dest_file


def copy_companions(companion_root: Optional[Path], content_path: Path, dest_dir: Path) -> int:
    """Copy everything next to the content file into dest_dir.

    The content file itself and resource metadata are skipped. Returns the
    number of top-level entries copied.
    """
    if companion_root is None or not companion_root.is_dir():
        return 0

    copied = 0
    for item in sorted(companion_root.iterdir()):
        if item.name == content_path.name or item.name in COMPANION_EXCLUDES:
            continue
        target = dest_dir / item.name
        if item.is_dir():
            shutil.copytree(item, target, dirs_exist_ok=True)
        else:
            shutil.copy2(item, target)
        copied += 1
    return copied


def write_folder_artifact(
    dest_dir: Path,
    filename: str,
    content: str,
    companion_root: Optional[Path],
    content_path: Path,
) -> Path:
    """Write {dest_dir}/{filename} plus companion files.

    Companions are copied first so the transformed content file always wins.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    copy_companions(companion_root, content_path, dest_dir)
    return write_text(dest_dir / filename, content)
