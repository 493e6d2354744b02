import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import questionary
from questionary import Separator, Style

from .bundle import ArtifactType, Bundle
from .config import Config, SourceConfig, SourceNotFoundError, parse_bundle_ref
from .discover import (
    attribute_bundles,
    discover_installed,
    group_by_tool,
    group_same_artifacts,
    manifest_bundle_names,
    matches_bundle,
    remove_installed,
)
from .frontmatter import convert_to_command, convert_to_rule
from .install import (
    BundleNotFoundError,
    install_bundle,
    install_bundle_from_source,
    install_from_source,
    refresh_installed,
)
from .install_manifest import InstallManifest
from .services import collect_status, display_status
from .setup_wizard import run_setup_wizard
from .source import GitSource, SourceError
from .target import Tool
from .utils import Colors, display_path, expand_tilde, logger

# Questionary style: no background highlight on the pointed/selected option
CUSTOM_STYLE = Style([
    ('qmark', 'fg:#00d4ff bold'),
    ('question', 'bold'),
    ('answer', 'fg:#00d4ff bold'),
    ('pointer', 'fg:#00d4ff bold'),
    ('highlighted', 'fg:#00d4ff bold bg:default'),
    ('selected', 'fg:#00d4ff bold bg:default'),
    ('checkbox', 'fg:#888888'),
    ('checkbox-selected', 'fg:#00d4ff bold'),
])

COMMANDS = ("add", "list", "sources", "here", "update", "convert", "rm")
VALUE_FLAGS = ("-t", "--to")
PREVIEW_LINES = 40
BACK = -1  # menu entry that leaves the current screen

# Defaults for options shared by the main parser and every subcommand
GLOBAL_DEFAULTS = {
    "opencode": False,
    "cursor": False,
    "codex": False,
    "global_install": False,
    "target": None,
    "skills_only": False,
    "agents_only": False,
    "commands_only": False,
    "rules_only": False,
    "verbose": False,
}


# =============================================================================
# ARGUMENT PARSING
# =============================================================================


def _global_options() -> argparse.ArgumentParser:
    """Options accepted before or after the subcommand."""
    common = argparse.ArgumentParser(add_help=False)
    suppress = argparse.SUPPRESS
    common.add_argument("-o", "--opencode", action="store_true", default=suppress,
                        help="Install for OpenCode (.opencode/)")
    common.add_argument("-c", "--cursor", action="store_true", default=suppress,
                        help="Install for Cursor (.cursor/)")
    common.add_argument("-x", "--codex", action="store_true", default=suppress,
                        help="Install for Codex (.codex/)")
    common.add_argument("-g", "--global", dest="global_install", action="store_true", default=suppress,
                        help="Install into the tool's global config directory")
    common.add_argument("-t", "--to", dest="target", metavar="DIR", default=suppress,
                        help="Install into DIR instead of the current directory")
    common.add_argument("--skills", dest="skills_only", action="store_true", default=suppress,
                        help="Only skills")
    common.add_argument("--agents", dest="agents_only", action="store_true", default=suppress,
                        help="Only agents")
    common.add_argument("--commands", dest="commands_only", action="store_true", default=suppress,
                        help="Only commands")
    common.add_argument("--rules", dest="rules_only", action="store_true", default=suppress,
                        help="Only rules")
    common.add_argument("-v", "--verbose", action="store_true", default=suppress,
                        help="Show debug output")
    return common


def build_parser() -> argparse.ArgumentParser:
    common = _global_options()
    parser = argparse.ArgumentParser(
        prog="skm",
        description="Manage AI coding tool skills for Claude, OpenCode, Cursor, and Codex",
        parents=[common],
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    add_parser = subparsers.add_parser("add", parents=[common], help="Install a bundle (same as 'skm <bundle>')")
    add_parser.add_argument("bundle", help="Bundle name, source name, or source/bundle")

    subparsers.add_parser("list", parents=[common], help="Browse available bundles")

    sources_parser = subparsers.add_parser("sources", parents=[common], help="Manage skill sources")
    sources_sub = sources_parser.add_subparsers(dest="sources_action", help="Sources action")
    sources_sub.add_parser("list", help="List configured sources")
    sources_add = sources_sub.add_parser("add", help="Add a local path or git URL")
    sources_add.add_argument("path", help="Local path or git URL")
    sources_add.add_argument("-n", "--name", default=None, help="Short name for source/bundle references")
    sources_remove = sources_sub.add_parser("remove", help="Remove a source")
    sources_remove.add_argument("path", help="Path, URL or name of the source")

    here_parser = subparsers.add_parser("here", parents=[common], help="Show skills installed in this directory")
    here_parser.add_argument("--tool", choices=[t.value for t in Tool], default=None, help="Only this tool")
    here_parser.add_argument("--remove", action="store_true", help="Pick installed skills to remove")
    here_parser.add_argument("--clean", action="store_true", help="Remove every installed skill")
    here_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    update_parser = subparsers.add_parser("update", parents=[common], help="Pull git sources and refresh installed bundles")
    update_parser.add_argument("--sources-only", action="store_true", help="Only pull git sources")

    convert_parser = subparsers.add_parser("convert", parents=[common], help="Convert between rule and command format")
    convert_parser.add_argument("source", type=Path, help="Markdown file to convert")
    convert_parser.add_argument("--to-rule", action="store_true", help="Command to rule (default: rule to command)")
    convert_parser.add_argument("--output", type=Path, default=None, help="Write to FILE instead of stdout")

    rm_parser = subparsers.add_parser("rm", parents=[common], help="Remove an installed bundle")
    rm_parser.add_argument("bundle", help="Bundle name")
    rm_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    return parser


def route_bundle_argument(argv: Sequence[str]) -> List[str]:
    """`skm <bundle>` is shorthand for `skm add <bundle>`."""
    argv = list(argv)
    skip_value = False
    for i, token in enumerate(argv):
        if skip_value:
            skip_value = False
            continue
        if token in VALUE_FLAGS:
            skip_value = True
            continue
        if token.startswith("-"):
            continue
        if token in COMMANDS:
            return argv
        return argv[:i] + ["add"] + argv[i:]
    return argv


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    args = build_parser().parse_args(route_bundle_argument(argv))
    for key, value in GLOBAL_DEFAULTS.items():
        if not hasattr(args, key):
            setattr(args, key, value)
    return args


def explicit_tool(args: argparse.Namespace) -> Optional[Tool]:
    if args.opencode:
        return Tool.OPENCODE
    if args.cursor:
        return Tool.CURSOR
    if args.codex:
        return Tool.CODEX
    return None


def selected_tool(args: argparse.Namespace, config: Config) -> Tool:
    tool = explicit_tool(args)
    if tool is not None:
        return tool
    try:
        return Tool.from_name(config.default_tool)
    except ValueError as e:
        logger.warning("%s; using claude", e)
        return Tool.CLAUDE


def selected_types(args: argparse.Namespace) -> Optional[List[ArtifactType]]:
    flags = [
        (args.skills_only, ArtifactType.SKILL),
        (args.agents_only, ArtifactType.AGENT),
        (args.commands_only, ArtifactType.COMMAND),
        (args.rules_only, ArtifactType.RULE),
    ]
    types = [artifact_type for enabled, artifact_type in flags if enabled]
    return types or None


def target_directory(args: argparse.Namespace, tool: Tool) -> Path:
    if args.global_install:
        return tool.global_target()
    if args.target:
        return expand_tilde(args.target).resolve()
    return Path.cwd()


# =============================================================================
# INSTALL
# =============================================================================


def _print_install_summary(stats: Dict) -> None:
    print()
    if "bundles" in stats:
        print(f"{Colors.GREEN}✓ Installed {stats['installed']} file(s) from {stats['bundles']} bundle(s){Colors.ENDC}")
    else:
        print(f"{Colors.GREEN}✓ Installed {stats['installed']} file(s){Colors.ENDC}")
    if stats["skipped"]:
        print(f"  {Colors.DIM}{stats['skipped']} file(s) skipped by type filter{Colors.ENDC}")
    if stats["errors"]:
        print(f"{Colors.RED}✗ {len(stats['errors'])} file(s) failed{Colors.ENDC}")


def do_install(
    config: Config,
    bundle_ref: str,
    tool: Tool,
    target_dir: Path,
    types: Optional[List[ArtifactType]],
) -> int:
    """Install "bundle", "source/bundle", or every bundle of a named source."""
    source_name, bundle_name = parse_bundle_ref(bundle_ref)
    if not bundle_name:
        print(f"{Colors.RED}Invalid bundle reference: {bundle_ref}{Colors.ENDC}")
        return 1

    try:
        if source_name is not None:
            found = config.find_source_by_name(source_name)
            if found is None:
                raise SourceNotFoundError(source_name)
            stats = install_bundle_from_source(found[0], bundle_name, tool, target_dir, types)
        else:
            named = config.find_source_by_name(bundle_name)
            if named is not None:
                stats = install_from_source(named[0], tool, target_dir, types)
            else:
                found_bundle = config.find_bundle(bundle_name)
                if found_bundle is None:
                    raise BundleNotFoundError(bundle_name, config.known_bundle_names())
                source, bundle = found_bundle
                stats = install_bundle(bundle, tool, target_dir, types, source.display_path())
    except (LookupError, OSError, UnicodeDecodeError, SourceError) as e:
        print(f"{Colors.RED}❌ {e}{Colors.ENDC}")
        return 1

    _print_install_summary(stats)
    return 1 if stats["errors"] else 0


# =============================================================================
# LIST / BROWSE
# =============================================================================


def list_bundles(config: Config) -> int:
    if not config.sources:
        print(f"{Colors.YELLOW}No sources configured.{Colors.ENDC}")
        print("Add a source with: skm sources add <path>")
        return 0

    print(f"{Colors.BOLD}Available bundles:{Colors.ENDC}\n")
    found_any = False
    had_errors = False

    for source, bundles, error in config.scan():
        if error is not None:
            had_errors = True
            continue
        if not bundles:
            continue
        found_any = True
        print(f"  {Colors.DIM}Source:{Colors.ENDC} {source.display_path()}")
        for bundle in bundles:
            if bundle.meta.description:
                print(f"    {Colors.CYAN}{bundle.name}/{Colors.ENDC} - {Colors.DIM}{bundle.meta.description}{Colors.ENDC}")
            else:
                print(f"    {Colors.CYAN}{bundle.name}/{Colors.ENDC}")
            for artifact_type in ArtifactType:
                count = len(bundle.artifacts(artifact_type))
                if count:
                    print(f"      {artifact_type.dir_name + '/':<10} {count} files")
        print()

    if not found_any:
        if had_errors:
            print(f"  {Colors.DIM}(no accessible bundles found){Colors.ENDC}\n")
        else:
            print(f"  {Colors.DIM}(no bundles found in configured sources){Colors.ENDC}\n")
    return 0


def _bundle_title(bundle: Bundle, source_label: str) -> str:
    description = bundle.meta.description or ""
    if len(description) > 40:
        description = description[:37] + "..."
    counts = bundle.counts()
    parts = [f"{bundle.name:<20}"]
    if description:
        parts.append(description)
    if bundle.meta.author:
        parts.append(f"by {bundle.meta.author}")
    parts.append(f"{counts['skills']}s {counts['agents']}a {counts['commands']}c {counts['rules']}r")
    parts.append(f"({source_label})")
    return " ".join(parts)


def file_preview(path: Path) -> str:
    """First heading or prose line of a file, for one-line previews."""
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return ""
    for line in lines:
        if not line.strip() or line.startswith("---"):
            continue
        if ":" in line and not line.startswith("#"):
            continue
        text = line.lstrip("#").strip()
        if len(text) > 50:
            text = text[:47] + "..."
        return f"- {text}"
    return ""


def _show_file(path: Path) -> None:
    print()
    print(f"{Colors.DIM}{'─' * 60}{Colors.ENDC}")
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        print(f"{Colors.RED}Could not read {path}: {e}{Colors.ENDC}")
        lines = []
    for line in lines[:PREVIEW_LINES]:
        print(line)
    if len(lines) > PREVIEW_LINES:
        print(f"{Colors.DIM}... ({len(lines) - PREVIEW_LINES} more lines){Colors.ENDC}")
    print(f"{Colors.DIM}{'─' * 60}{Colors.ENDC}\n")


def _show_bundle_details(bundle: Bundle) -> None:
    while True:
        print(f"\n{Colors.BOLD}Bundle:{Colors.ENDC} {Colors.CYAN}{bundle.name}{Colors.ENDC}\n")
        choices = []
        paths: List[Path] = []
        for artifact_type in ArtifactType:
            artifacts = bundle.artifacts(artifact_type)
            if not artifacts:
                continue
            choices.append(Separator(f"── {artifact_type.dir_name}/ ({len(artifacts)} files) ──"))
            for artifact in artifacts:
                title = f"  {artifact.name} {file_preview(artifact.content_path)}".rstrip()
                choices.append(questionary.Choice(title, value=len(paths)))
                paths.append(artifact.content_path)
        choices.append(questionary.Choice("← Back", value=BACK))

        selection = questionary.select("Select to view contents", choices=choices, style=CUSTOM_STYLE).ask()
        if selection is None or selection == BACK:
            return
        _show_file(paths[selection])


def browse_bundles(config: Config) -> int:
    """Interactive bundle browser; plain listing when not attached to a terminal."""
    if not sys.stdin.isatty():
        return list_bundles(config)
    if not config.sources:
        print(f"{Colors.YELLOW}No sources configured.{Colors.ENDC}")
        print("Add a source with: skm sources add <path>")
        return 0

    entries = []
    for source, bundles, _ in config.scan():
        for bundle in bundles:
            entries.append((source.display_path(), bundle))
    if not entries:
        print(f"{Colors.YELLOW}No bundles found in configured sources.{Colors.ENDC}")
        return 0

    while True:
        print(f"\n{Colors.BOLD}Available Bundles (type to search){Colors.ENDC}\n")
        choices = [
            questionary.Choice(_bundle_title(bundle, label), value=index)
            for index, (label, bundle) in enumerate(entries)
        ]
        choices.append(questionary.Choice("Quit", value=BACK))
        selection = questionary.select(
            "Select a bundle",
            choices=choices,
            use_search_filter=True,
            use_jk_keys=False,
            style=CUSTOM_STYLE,
        ).ask()
        if selection is None or selection == BACK:
            return 0
        _show_bundle_details(entries[selection][1])


# =============================================================================
# SOURCES
# =============================================================================


def sources_list(config: Config) -> int:
    if not config.sources:
        print(f"{Colors.YELLOW}No sources configured.{Colors.ENDC}")
        print("Add a source with: skm sources add <path>")
        return 0

    print(f"{Colors.HEADER}📦 Skill Sources (in priority order):{Colors.ENDC}\n")
    for i, source in enumerate(config.sources, start=1):
        name = f" ({Colors.YELLOW}{source.name}{Colors.ENDC})" if source.name else ""
        status = ""
        if source.type == "local" and not expand_tilde(source.path).exists():
            status = f" {Colors.RED}(missing){Colors.ENDC}"
        elif source.type == "git" and not GitSource(source.url).is_cloned():
            status = f" {Colors.DIM}(not cloned){Colors.ENDC}"
        print(f"  {Colors.DIM}[{i}]{Colors.ENDC} {Colors.CYAN}{source.location}{Colors.ENDC}{name}"
              f" {Colors.DIM}({source.type}){Colors.ENDC}{status}")
    print()
    return 0


def sources_add(config: Config, location: str, name: Optional[str] = None) -> int:
    source = SourceConfig.from_location(location, name)
    if source.type == "local" and not expand_tilde(source.path).exists():
        print(f"{Colors.YELLOW}⚠ {source.path} does not exist yet.{Colors.ENDC}")

    if not config.add_source(source):
        print(f"{Colors.YELLOW}Source already configured: {source.location}{Colors.ENDC}")
        return 0
    config.save()
    print(f"{Colors.GREEN}✅ Added source {source.location}{Colors.ENDC}")

    if source.type == "git":
        try:
            GitSource(source.url).ensure_cloned()
        except SourceError as e:
            print(f"{Colors.RED}Clone failed: {e}{Colors.ENDC}")
            print(f"{Colors.YELLOW}Retry with 'skm update'{Colors.ENDC}")
            return 1
    return 0


def sources_remove(config: Config, path_or_url: str) -> int:
    if not config.remove_source(path_or_url):
        print(f"{Colors.RED}❌ Source '{path_or_url}' not found.{Colors.ENDC}")
        return 1
    config.save()
    print(f"{Colors.GREEN}✅ Removed source {path_or_url}{Colors.ENDC}")
    return 0


def sources_interactive(config: Config) -> int:
    while True:
        sources_list(config)
        options = ["Add source", "Remove source"]
        if len(config.sources) > 1:
            options.append("Change priority")
        options.append("Done")

        action = questionary.select(
            "What would you like to do?",
            choices=options,
            default="Done",
            style=CUSTOM_STYLE,
        ).ask()

        if action is None or action == "Done":
            break
        if action == "Add source":
            location = questionary.text("Path or git URL:", style=CUSTOM_STYLE).ask()
            if location:
                sources_add(config, location.strip())
        elif action == "Remove source":
            if not config.sources:
                print(f"{Colors.YELLOW}No sources to remove.{Colors.ENDC}")
                continue
            location = questionary.select(
                "Select source to remove",
                choices=[s.location for s in config.sources],
                style=CUSTOM_STYLE,
            ).ask()
            if location:
                sources_remove(config, location)
        elif action == "Change priority":
            current = questionary.select(
                "Select source to move",
                choices=[
                    questionary.Choice(f"[{i + 1}] {s.location}", value=i)
                    for i, s in enumerate(config.sources)
                ],
                style=CUSTOM_STYLE,
            ).ask()
            if current is None:
                continue
            position = questionary.select(
                "Move to position",
                choices=[
                    questionary.Choice(f"Position {i + 1}", value=i)
                    for i in range(len(config.sources))
                ],
                style=CUSTOM_STYLE,
            ).ask()
            if position is not None and position != current:
                config.move_source(current, position)
                config.save()
                print(f"{Colors.GREEN}Priority updated.{Colors.ENDC}")

    _pull_git_sources(config, quiet=True)
    return 0


# =============================================================================
# UPDATE
# =============================================================================


def _pull_git_sources(config: Config, quiet: bool = False) -> int:
    """Pull every git source. Returns the number of failures."""
    git_sources = config.git_sources()
    if not git_sources:
        if not quiet:
            print(f"{Colors.YELLOW}No git sources configured.{Colors.ENDC}")
            print("Add a git source with: skm sources add <git-url>")
        return 0

    print(f"{Colors.BOLD}Updating git sources...{Colors.ENDC}\n")
    updated = current = failed = 0
    for source in git_sources:
        try:
            changed = source.pull()
        except SourceError as e:
            print(f"  {Colors.RED}✗ {source.url}: {e}{Colors.ENDC}")
            failed += 1
            continue
        if changed:
            print(f"  {Colors.GREEN}✓{Colors.ENDC} {source.url} updated")
            updated += 1
        else:
            if not quiet:
                print(f"  {Colors.DIM}{source.url} already up to date{Colors.ENDC}")
            current += 1

    if not quiet:
        print()
        if updated:
            print(f"  {Colors.GREEN}✓{Colors.ENDC} {updated} source(s) updated")
        if current:
            print(f"  {Colors.DIM}{current} source(s) already up to date{Colors.ENDC}")
        if failed:
            print(f"  {Colors.RED}✗ {failed} source(s) failed{Colors.ENDC}")
    return failed


def update(
    config: Config,
    tool: Tool,
    target_dir: Path,
    types: Optional[List[ArtifactType]],
    sources_only: bool = False,
) -> int:
    failed = _pull_git_sources(config)
    if sources_only:
        return 1 if failed else 0

    if not discover_installed(target_dir, tool):
        print(f"\n{Colors.YELLOW}No installed skills to refresh.{Colors.ENDC}")
        return 1 if failed else 0

    print(f"\n{Colors.BOLD}Refreshing installed skills...{Colors.ENDC}\n")
    stats = refresh_installed(config, tool, target_dir, types)

    print()
    if stats["refreshed"]:
        print(f"  {Colors.GREEN}✓{Colors.ENDC} {stats['refreshed']} bundle(s) refreshed")
    if stats["not_found"]:
        print(f"  {Colors.YELLOW}⚠ {len(stats['not_found'])} bundle(s) not found in sources{Colors.ENDC}")
    if stats["errors"]:
        print(f"  {Colors.RED}✗ {len(stats['errors'])} error(s){Colors.ENDC}")
    return 1 if failed or stats["errors"] else 0


# =============================================================================
# HERE / RM
# =============================================================================


def _confirm(message: str) -> bool:
    return bool(questionary.confirm(message, default=False, style=CUSTOM_STYLE).ask())


def _remove_all(items) -> int:
    """Remove installed artifacts, reporting each failure. Returns the failure count."""
    removed = failed = 0
    for item in items:
        try:
            remove_installed(item)
            removed += 1
        except OSError as e:
            print(f"{Colors.RED}Error: Failed to remove {item.file_path}: {e}{Colors.ENDC}")
            failed += 1

    print()
    if removed:
        print(f"{Colors.GREEN}✓ Removed {removed} skill(s){Colors.ENDC}")
    if failed:
        print(f"{Colors.RED}✗ Failed to remove {failed} skill(s){Colors.ENDC}")
    return failed


def interactive_remove(base: Path, tool: Optional[Tool], known_bundle_names: Iterable[str] = ()) -> int:
    items = attribute_bundles(
        discover_installed(base, tool), manifest_bundle_names(base), known_bundle_names
    )
    if not items:
        print(f"{Colors.YELLOW}No installed skills found.{Colors.ENDC}")
        return 0

    grouped = group_same_artifacts(items)
    choices = [
        questionary.Choice(
            f"{unique_id} ({', '.join(i.tool.display_name for i in grouped[unique_id])})",
            value=unique_id,
        )
        for unique_id in sorted(grouped)
    ]
    selected = questionary.checkbox(
        "Select skills to remove:",
        choices=choices,
        style=CUSTOM_STYLE,
        instruction="Space=toggle, Enter=confirm",
    ).ask()

    if not selected:
        print(f"{Colors.YELLOW}No skills selected.{Colors.ENDC}")
        return 0

    to_remove = [item for unique_id in selected for item in grouped[unique_id]]
    print(f"\n{Colors.BOLD}Will remove:{Colors.ENDC}")
    for unique_id in selected:
        tools = ", ".join(i.tool.display_name for i in grouped[unique_id])
        print(f"  {Colors.CYAN}{unique_id}{Colors.ENDC} from {tools}")
    print()

    if not _confirm(f"Remove {len(to_remove)} skill(s)?"):
        print(f"{Colors.YELLOW}Cancelled.{Colors.ENDC}")
        return 0
    return 1 if _remove_all(to_remove) else 0


def clean_all(base: Path, tool: Optional[Tool], skip_confirm: bool = False) -> int:
    items = discover_installed(base, tool)
    if not items:
        print(f"{Colors.YELLOW}No installed skills found.{Colors.ENDC}")
        return 0

    tool_desc = f" for {tool.display_name}" if tool else ""
    print(f"{Colors.BOLD}Found{Colors.ENDC} {len(items)} skill(s){tool_desc}\n")
    if not skip_confirm and not _confirm(f"Remove all {len(items)} skill(s)?"):
        print(f"{Colors.YELLOW}Cancelled.{Colors.ENDC}")
        return 0

    failed = _remove_all(items)
    for current in {item.tool for item in items}:
        manifest_path = InstallManifest.path_for(current, base)
        if manifest_path.exists():
            manifest_path.unlink()
    return 1 if failed else 0


def remove_bundle(
    bundle_name: str,
    base: Path,
    tool: Optional[Tool],
    skip_confirm: bool = False,
    known_bundle_names: Iterable[str] = (),
) -> int:
    """Remove every installed artifact attributed to a bundle."""
    items = attribute_bundles(
        discover_installed(base, tool), manifest_bundle_names(base), known_bundle_names
    )
    items = [item for item in items if matches_bundle(item, bundle_name)]

    if not items:
        print(f"No installed skills found for bundle '{Colors.CYAN}{bundle_name}{Colors.ENDC}'.")
        return 0

    print(f"{Colors.BOLD}Will remove:{Colors.ENDC}\n")
    grouped = group_by_tool(items)
    for current in Tool:
        if current not in grouped:
            continue
        print(f"  {Colors.CYAN}{Colors.BOLD}{current.display_name}{Colors.ENDC}")
        for artifact_type in ArtifactType:
            for item in grouped[current].get(artifact_type, []):
                print(f"    {Colors.DIM}{artifact_type.dir_name}/{Colors.ENDC}{item.name}"
                      f" {Colors.DIM}({display_path(item.file_path)}){Colors.ENDC}")
    print()

    if not skip_confirm and not _confirm(f"Remove {len(items)} file(s) from bundle '{bundle_name}'?"):
        print(f"{Colors.YELLOW}Cancelled.{Colors.ENDC}")
        return 0

    failed = _remove_all(items)
    for current in grouped:
        manifest = InstallManifest.load(current, base)
        if manifest.remove_bundle(bundle_name):
            try:
                manifest.save(current, base)
            except OSError as e:
                logger.warning("Could not update install manifest: %s", e)
    return 1 if failed else 0


# =============================================================================
# CONVERT
# =============================================================================


def convert_format(source: Path, to_rule: bool, output: Optional[Path] = None) -> int:
    if not source.is_file():
        print(f"{Colors.RED}Error: Source file does not exist: {source}{Colors.ENDC}")
        return 1

    content = source.read_text(encoding="utf-8")
    converted = convert_to_rule(content, source) if to_rule else convert_to_command(content)

    if output is None:
        print(converted)
        return 0
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(converted, encoding="utf-8")
    print(f"{Colors.GREEN}✅ Converted to {output}{Colors.ENDC}")
    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================


def main():
    """Main entry point."""
    try:
        sys.exit(_main_inner(sys.argv[1:]))
    except KeyboardInterrupt:
        print(f"\n{Colors.YELLOW}Cancelled.{Colors.ENDC}")
        sys.exit(130)


def _main_inner(argv: Sequence[str]) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if args.command is None and not Config.exists():
        config = run_setup_wizard()
        if config is None:
            return 1
    else:
        config = Config.load_or_default()

    tool = selected_tool(args, config)
    types = selected_types(args)

    if args.command == "convert":
        return convert_format(args.source, args.to_rule, args.output)

    if args.command == "sources":
        if args.sources_action == "list":
            return sources_list(config)
        if args.sources_action == "add":
            return sources_add(config, args.path, args.name)
        if args.sources_action == "remove":
            return sources_remove(config, args.path)
        return sources_interactive(config)

    if args.command == "list":
        return browse_bundles(config)

    target_dir = target_directory(args, tool)

    if args.command == "add":
        return do_install(config, args.bundle, tool, target_dir, types)

    if args.command == "here":
        filter_tool = Tool.from_name(args.tool) if args.tool else None
        if args.remove:
            return interactive_remove(target_dir, filter_tool, config.known_bundle_names())
        if args.clean:
            return clean_all(target_dir, filter_tool, args.yes)
        status = collect_status(target_dir, filter_tool, config.known_bundle_names())
        display_status(status, filtered=filter_tool is not None)
        return 0

    if args.command == "update":
        return update(config, tool, target_dir, types, args.sources_only)

    if args.command == "rm":
        return remove_bundle(
            args.bundle, target_dir, explicit_tool(args), args.yes, config.known_bundle_names()
        )

    return list_bundles(config)


if __name__ == "__main__":
    main()
