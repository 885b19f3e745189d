"""Rich-based output utilities for the gavel CLI.

Data goes to stdout, diagnostics to stderr, so output can be piped into jq.
"""

from typing import Any

from rich.console import Console

from gavel.core.text_safety import sanitize_for_display

# Shared console instances
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout."""
    console.print_json(data=data, indent=2, highlight=console.is_terminal)


def print_error(message: str) -> None:
    """Print an error message in red to stderr.

    Args:
        message: The error message to display. May contain node-supplied
            text, so it is sanitized first.
    """
    err_console.print(f"[bold red]Error:[/bold red] {sanitize_for_display(message)}")


def print_info(message: str) -> None:
    """Print an informational message to stderr."""
    err_console.print(f"[dim]{sanitize_for_display(message)}[/dim]")
