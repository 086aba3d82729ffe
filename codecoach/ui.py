"""Central UI handler for codecoach.

Single source of truth for Rich console styling. Import this instead of
instantiating Console() in every command file.

Usage:
    from codecoach.ui import console, print_header, print_warning

    console.print("[positive]useState with functional update[/positive]")
    print_header("ANALYSIS")
"""

import sys

from rich.console import Console
from rich.theme import Theme

CODECOACH_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "positive": "green",
    "negative": "red",
    "idiomatic": "bold green",
    "trivial": "dim yellow",
    "fundamentals": "bold red",
    "intermediate": "bold yellow",
    "patterns": "bold blue",
    "slug": "bold magenta",
    "dim": "dim white",
})

# Single console instance - import this, don't create your own
console = Console(
    theme=CODECOACH_THEME,
    force_terminal=sys.stdout.isatty()
)


def print_header(title: str) -> None:
    """Print a styled section header with horizontal rules."""
    console.rule(f"[bold]{title}[/bold]")


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}")
