"""
Target Tools

Each supported tool has its own directory convention; the per-tool writers
live in *_conv.py modules. Tool.write_artifact is the single entry point.
"""

from enum import Enum
from pathlib import Path
from typing import Callable, Dict

from .bundle import Artifact, ArtifactType
from .claude_conv import write_claude
from .codex_conv import write_codex
from .cursor_conv import write_cursor
from .opencode_conv import TYPE_DIRS as OPENCODE_TYPE_DIRS
from .opencode_conv import write_opencode
from .utils import home_dir, logger


class Tool(Enum):
    CLAUDE = "claude"
    OPENCODE = "opencode"
    CURSOR = "cursor"
    CODEX = "codex"

    @classmethod
    def from_name(cls, name: str) -> "Tool":
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown tool '{name}' (expected one of: {valid})") from None

    @property
    def dir_name(self) -> str:
        return f".{self.value}"

    @property
    def display_name(self) -> str:
        return {
            Tool.CLAUDE: "Claude",
            Tool.OPENCODE: "OpenCode",
            Tool.CURSOR: "Cursor",
            Tool.CODEX: "Codex",
        }[self]

    def global_target(self) -> Path:
        """Directory to install into for --global."""
        home = home_dir()
        if self is Tool.OPENCODE:
            return home / ".config" / "opencode"
        if self is Tool.CURSOR:
            logger.warning("Cursor doesn't support global config, using current directory")
            return Path.cwd()
        return home

    def write_artifact(self, target_dir: Path, bundle_name: str, artifact: Artifact) -> Path:
        """Install one artifact and return the path of its primary file."""
        return _WRITERS[self](target_dir, bundle_name, artifact)

    def dest_info(self, artifact_type: ArtifactType, bundle_name: str) -> str:
        """Short description of where a type lands, for progress output."""
        if self is Tool.CLAUDE:
            if artifact_type in (ArtifactType.AGENT, ArtifactType.COMMAND):
                return f".claude/{artifact_type.dir_name}/{bundle_name}/"
            return f".claude/{artifact_type.dir_name}/{bundle_name}-*/"
        if self is Tool.OPENCODE:
            return f".opencode/{OPENCODE_TYPE_DIRS[artifact_type]}/{bundle_name}-*"
        if self is Tool.CURSOR:
            if artifact_type is ArtifactType.AGENT:
                return f".cursor/rules/{bundle_name}-*/"
            return f".cursor/{artifact_type.dir_name}/{bundle_name}-*"
        if artifact_type is ArtifactType.COMMAND:
            return f".codex/prompts/{bundle_name}-*"
        return f".codex/{artifact_type.dir_name}/{bundle_name}-*"


_WRITERS: Dict[Tool, Callable[[Path, str, Artifact], Path]] = {
    Tool.CLAUDE: write_claude,
    Tool.OPENCODE: write_opencode,
    Tool.CURSOR: write_cursor,
    Tool.CODEX: write_codex,
}
