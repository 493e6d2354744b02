"""
Display formatting for 'skm here' output.
Separated from collection logic for testability.
"""

from skm.bundle import ArtifactType
from skm.discover import group_by_tool
from skm.services.status_service import ProjectStatus
from skm.utils import Colors, display_path


def display_status(status: ProjectStatus, filtered: bool = False) -> None:
    """Print installed artifacts grouped by tool and type."""
    if not status.total:
        if filtered:
            print(f"{Colors.YELLOW}No installed skills found for the specified tool.{Colors.ENDC}")
        else:
            print(f"{Colors.YELLOW}No installed skills found.{Colors.ENDC}")
        print("\nInstall skills with: skm <bundle>")
        return

    print(f"\n{Colors.BOLD}📍 Installed in:{Colors.ENDC} {display_path(status.project_path)}\n")

    grouped = group_by_tool(status.artifacts)
    for tool_status in status.tool_statuses:
        print(f"  {Colors.CYAN}{Colors.BOLD}{tool_status.tool.display_name}{Colors.ENDC}")
        by_type = grouped.get(tool_status.tool, {})
        for artifact_type in ArtifactType:
            items = by_type.get(artifact_type, [])
            if not items:
                continue
            print(f"    {Colors.DIM}{artifact_type.dir_name}/{Colors.ENDC}")
            for item in items:
                print(f"      {item.unique_id}")
        print()

    summary = ", ".join(f"{t.count} {t.tool.display_name}" for t in status.tool_statuses)
    print(f"  {status.total} total ({summary})\n")
