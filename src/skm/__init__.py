"""
skm - Skill bundle manager for AI coding assistants.

Discovers bundles of skills, agents, commands and rules from configured
sources and installs them in each tool's own layout:
- Claude (.claude/)
- OpenCode (.opencode/)
- Cursor (.cursor/)
- Codex (.codex/)
"""

__version__ = "1.0.0"

__all__ = [
    "bundle",
    "capabilities",
    "cli",
    "config",
    "discover",
    "frontmatter",
    "install",
    "install_manifest",
    "manifest",
    "services",
    "source",
    "target",
    "utils",
]
