"""
UI Components

Standardized header, panels and the final summary.
"""

from typing import Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from agent_sandbox.models.results import FleetSummary

LOGO = "agent-sandbox"

# Color scheme
BRAND_COLOR = "cyan"
WARNING_COLOR = "yellow"
ERROR_COLOR = "red"


def show_header(
    title: str,
    subtitle: Optional[str] = None,
    details: Optional[Dict[str, str]] = None,
    console: Optional[Console] = None,
):
    """
    Display the command header.

    Args:
        title: Main title
        subtitle: Optional subtitle line
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)
    """
    if console is None:
        console = Console()

    prefix = f" [bold color(214)]{LOGO}[/bold color(214)] [dim]›[/dim]"
    console.print(f"{prefix} [bold white]{title}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{subtitle}[/dim]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [{BRAND_COLOR}]{escape(str(value))}[/{BRAND_COLOR}]")

    console.print()


def show_public_key(
    public_key: str, key_title: str, keys_url: str, console: Console
) -> None:
    """Show the registration instructions for the managed public key."""
    body = (
        f"Go to:  [cyan]{keys_url}[/cyan]\n"
        f"Click 'New SSH key', title it '[bold]{escape(key_title)}[/bold]',\n"
        "set type to 'Authentication Key', and paste the following:\n\n"
        f"[bold white]{escape(public_key.strip())}[/bold white]"
    )
    console.print()
    console.print(
        Panel(
            body,
            title="[bold yellow]ACTION REQUIRED: Add this public key to GitHub[/bold yellow]",
            title_align="left",
            border_style=WARNING_COLOR,
        )
    )


def show_summary(
    summary: FleetSummary, locations: Dict[str, str], console: Console
) -> None:
    """Show fleet counts, key locations and how to start the agent."""
    table = Table(title="Summary", title_justify="left", padding=(0, 1))
    table.add_column("Result", style=BRAND_COLOR, no_wrap=True)
    table.add_column("Repositories", justify="right")
    table.add_row("Cloned", str(summary.cloned))
    table.add_row("Updated", str(summary.updated))
    table.add_row("Skipped", str(summary.skipped))
    table.add_row(
        "Failed",
        f"[{ERROR_COLOR}]{summary.failed}[/{ERROR_COLOR}]" if summary.failed else "0",
    )

    console.print()
    console.print(table)

    if summary.failed_names:
        console.print(
            f"[{WARNING_COLOR}]⚠ Clone failed:[/{WARNING_COLOR}] "
            f"{escape(', '.join(summary.failed_names))}"
        )
    if summary.not_fast_forwarded:
        console.print(
            f"[{WARNING_COLOR}]⚠ Could not fast-forward (resolve manually):[/{WARNING_COLOR}] "
            f"{escape(', '.join(summary.not_fast_forwarded))}"
        )

    console.print("\n[bold]Key locations:[/bold]")
    for path, label in locations.items():
        console.print(f"  [cyan]{escape(path)}[/cyan]  [dim]← {escape(label)}[/dim]")

    console.print("\n[bold]To launch the coding agent inside the VM:[/bold]")
    console.print("  cd ~/sandboxes/<repo-name>")
    console.print("  claude\n")
