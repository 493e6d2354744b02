"""
First-run setup: pick where skills come from and save the config.
"""

from typing import Optional

import questionary
from questionary import Style

from .config import DEFAULT_SOURCE_PATH, Config, SourceConfig, is_git_url
from .source import SourceError
from .utils import Colors, expand_tilde

WIZARD_STYLE = Style([
    ("qmark", "fg:#00d4ff bold"),
    ("question", "bold"),
    ("answer", "fg:#00d4ff bold"),
    ("pointer", "fg:#00d4ff bold"),
    ("highlighted", "fg:#00d4ff bold bg:default"),
    ("selected", "fg:#00d4ff bold bg:default"),
])


def _ask_location() -> Optional[str]:
    choice = questionary.select(
        "Where are your skills?",
        choices=[
            questionary.Choice(f"Local directory ({DEFAULT_SOURCE_PATH})", value="default"),
            questionary.Choice("Another local directory...", value="path"),
            questionary.Choice("Git repository...", value="git"),
        ],
        style=WIZARD_STYLE,
    ).ask()

    if choice is None:
        return None
    if choice == "default":
        return DEFAULT_SOURCE_PATH
    if choice == "path":
        return questionary.path("Skills directory:", only_directories=True, style=WIZARD_STYLE).ask()
    return questionary.text(
        "Git URL:",
        instruction="(e.g. https://github.com/yourorg/skills)",
        style=WIZARD_STYLE,
    ).ask()


def run_setup_wizard() -> Optional[Config]:
    """Ask for the first source and default tool. Returns the saved config, None if cancelled."""
    print(f"\n{Colors.CYAN}Welcome to skm - let's set up your skill sources.{Colors.ENDC}\n")

    location = _ask_location()
    if not location:
        print(f"{Colors.YELLOW}Cancelled.{Colors.ENDC}")
        return None

    source = SourceConfig.from_location(location.strip())
    if source.type == "local" and not expand_tilde(source.path).exists():
        print(f"  {Colors.YELLOW}⚠ {source.path} does not exist yet; add skills there later.{Colors.ENDC}")

    default_tool = questionary.select(
        "Default tool to install for:",
        choices=["claude", "opencode", "cursor", "codex"],
        default="claude",
        style=WIZARD_STYLE,
    ).ask()
    if default_tool is None:
        print(f"{Colors.YELLOW}Cancelled.{Colors.ENDC}")
        return None

    config = Config(default_tool=default_tool, sources=[source])
    config.save()
    print(f"\n  {Colors.GREEN}✓ Saved {Config.config_path()}{Colors.ENDC}")

    if is_git_url(location):
        try:
            source.to_source().list_bundles()
        except SourceError as e:
            print(f"  {Colors.RED}Clone failed: {e}{Colors.ENDC}")
            print(f"  {Colors.YELLOW}Continuing anyway - retry with 'skm update'{Colors.ENDC}")
    print()
    return config
