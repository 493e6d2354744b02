"""
Business logic for 'skm here'.
Collects what is installed in a directory and returns structured data for display.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from skm.discover import (
    InstalledArtifact,
    attribute_bundles,
    discover_installed,
    manifest_bundle_names,
)
from skm.target import Tool


@dataclass
class ToolStatus:
    tool: Tool
    artifacts: List[InstalledArtifact]
    manifest_bundles: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.artifacts)


@dataclass
class ProjectStatus:
    project_path: Path
    tool_statuses: List[ToolStatus]

    @property
    def total(self) -> int:
        return sum(t.count for t in self.tool_statuses)

    @property
    def artifacts(self) -> List[InstalledArtifact]:
        return [a for t in self.tool_statuses for a in t.artifacts]


def collect_status(
    project_path: Path,
    tool: Optional[Tool] = None,
    known_bundle_names: Iterable[str] = (),
) -> ProjectStatus:
    """Main entry point. Collects installed artifacts per tool."""
    manifests = manifest_bundle_names(project_path)
    installed = attribute_bundles(
        discover_installed(project_path, tool),
        manifests,
        known_bundle_names,
    )

    by_tool: Dict[Tool, List[InstalledArtifact]] = {}
    for item in installed:
        by_tool.setdefault(item.tool, []).append(item)

    statuses = [
        ToolStatus(tool=t, artifacts=by_tool[t], manifest_bundles=manifests.get(t, []))
        for t in Tool
        if t in by_tool
    ]
    return ProjectStatus(project_path=project_path, tool_statuses=statuses)
