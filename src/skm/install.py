"""
Bundle Installation

Writes bundle artifacts into a target directory for one tool and records
the install in {tool-dir}/.skm.toml. A failure on one artifact is counted
and reported; the remaining artifacts are still installed.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .bundle import ArtifactType, Bundle
from .discover import attribute_bundles, discover_installed, manifest_bundle_names
from .install_manifest import InstallManifest
from .source import Source
from .target import Tool
from .utils import Colors, display_path, logger

ALL_TYPES: List[ArtifactType] = list(ArtifactType)


class BundleNotFoundError(LookupError):
    def __init__(self, name: str, available: Sequence[str] = ()):
        self.name = name
        self.available = list(available)
        message = f"Bundle '{name}' not found"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)


def _new_stats() -> Dict[str, Any]:
    return {"installed": 0, "skipped": 0, "errors": []}


def install_bundle(
    bundle: Bundle,
    tool: Tool,
    target_dir: Path,
    types: Optional[Sequence[ArtifactType]] = None,
    source_label: str = "",
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Install every selected artifact of a bundle for one tool.

    Args:
        bundle: Bundle to install
        tool: Destination tool
        target_dir: Project (or global) directory to install into
        types: Artifact types to install, all of them by default
        source_label: Origin recorded in the install manifest
        verbose: Print progress messages

    Returns:
        Dict with installed/skipped counts and a list of errors
    """
    selected = list(types) if types else ALL_TYPES
    stats = _new_stats()

    if verbose:
        print(f"{Colors.BOLD}Installing {Colors.CYAN}{bundle.name}{Colors.ENDC}"
              f"{Colors.BOLD} for {tool.display_name}{Colors.ENDC} → {display_path(target_dir)}")

    for artifact_type in ArtifactType:
        artifacts = bundle.artifacts(artifact_type)
        if not artifacts:
            continue
        if artifact_type not in selected:
            stats["skipped"] += len(artifacts)
            continue

        written = 0
        for artifact in artifacts:
            try:
                tool.write_artifact(target_dir, bundle.name, artifact)
                written += 1
            except (OSError, UnicodeDecodeError) as e:
                stats["errors"].append(f"{artifact_type.value}:{artifact.name}: {e}")
                logger.warning("Failed to install %s %s: %s", artifact_type.value, artifact.name, e)
                if verbose:
                    print(f"  {Colors.RED}✗ {artifact.name}: {e}{Colors.ENDC}")

        stats["installed"] += written
        if verbose and written:
            print(f"  {Colors.GREEN}✓{Colors.ENDC} {written} {artifact_type.dir_name:<9}"
                  f" → {tool.dest_info(artifact_type, bundle.name)}")

    if stats["installed"]:
        try:
            manifest = InstallManifest.load(tool, target_dir)
            manifest.record_install(bundle.name, source_label)
            manifest.save(tool, target_dir)
        except OSError as e:
            stats["errors"].append(f"manifest: {e}")
            logger.warning("Could not update install manifest: %s", e)

    return stats


def install_bundle_from_source(
    source: Source,
    bundle_name: str,
    tool: Tool,
    target_dir: Path,
    types: Optional[Sequence[ArtifactType]] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """Install one named bundle from a specific source."""
    bundles = source.list_bundles()
    for bundle in bundles:
        if bundle.name == bundle_name:
            return install_bundle(bundle, tool, target_dir, types, source.display_path(), verbose)
    raise BundleNotFoundError(bundle_name, [b.name for b in bundles])


def install_from_source(
    source: Source,
    tool: Tool,
    target_dir: Path,
    types: Optional[Sequence[ArtifactType]] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """Install every bundle a source provides."""
    totals = _new_stats()
    totals["bundles"] = 0
    for bundle in source.list_bundles():
        stats = install_bundle(bundle, tool, target_dir, types, source.display_path(), verbose)
        totals["bundles"] += 1
        totals["installed"] += stats["installed"]
        totals["skipped"] += stats["skipped"]
        totals["errors"].extend(stats["errors"])
    return totals


def refresh_installed(
    config,
    tool: Tool,
    target_dir: Path,
    types: Optional[Sequence[ArtifactType]] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Re-install every bundle that has artifacts installed for a tool.

    Installed artifacts are attributed to bundles through their path, the
    install manifest, or a name prefix. Unattributed artifacts are looked up
    by their own name.

    Returns:
        Dict with refreshed count, bundle names not found in any source,
        and a list of errors
    """
    stats: Dict[str, Any] = {"refreshed": 0, "not_found": [], "errors": []}
    installed = discover_installed(target_dir, tool)
    if not installed:
        return stats

    installed = attribute_bundles(
        installed,
        manifest_bundle_names(target_dir),
        config.known_bundle_names(),
    )
    names = sorted({item.bundle or item.name for item in installed})

    for name in names:
        found = config.find_bundle(name)
        if found is None:
            stats["not_found"].append(name)
            if verbose:
                print(f"  {Colors.YELLOW}⚠ {name}: not found in sources{Colors.ENDC}")
            continue

        source, bundle = found
        result = install_bundle(bundle, tool, target_dir, types, source.display_path(), verbose=False)
        stats["errors"].extend(result["errors"])
        if result["installed"]:
            stats["refreshed"] += 1
        if verbose:
            print(f"  {Colors.GREEN}✓{Colors.ENDC} {name} ({result['installed']} files)")

    return stats
