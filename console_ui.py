#!/usr/bin/env python3
"""
Console UI Module using Rich

Styled output, panels, key/value tables, spinners and yes/no prompts for
Kenosis. All terminal output goes through this class.
"""

from typing import Any, Optional, TextIO

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.prompt import Confirm
from rich.table import Table


class ConsoleUI:
    """Console UI handler using Rich"""

    def __init__(self, force_terminal: Optional[bool] = None, file: Optional[TextIO] = None):
        """Initialize console with optional terminal forcing and output stream"""
        self.console = Console(force_terminal=force_terminal, file=file, highlight=False)

    # Basic styled output methods
    def print_success(self, message: str):
        """Print success message in green"""
        self.console.print(message, style="green")

    def print_error(self, message: str):
        """Print error message in red"""
        self.console.print(message, style="red bold")

    def print_warning(self, message: str):
        """Print warning message in yellow"""
        self.console.print(message, style="yellow")

    def print_info(self, message: str):
        """Print info message in cyan"""
        self.console.print(message, style="cyan")

    def print_progress(self, message: str):
        """Print progress message in dim white"""
        self.console.print(message, style="white dim")

    def print_plain(self, message: str):
        self.console.print(message, style="white")

    def print_header(self, title: str, subtitle: Optional[str] = None):
        """Print a header with optional subtitle"""
        if subtitle:
            header_text = f"[bold]{title}[/bold]\n[dim]{subtitle}[/dim]"
        else:
            header_text = f"[bold]{title}[/bold]"

        panel = Panel(header_text, box=box.ROUNDED, padding=(0, 1))
        self.console.print(panel)

    def print_section(self, title: str, length: int = 40):
        """Print a bold section title followed by a dim rule"""
        self.console.print()
        self.console.print(f"[bold]{title}[/bold]")
        self.print_separator(length=length)

    def show_key_values(self, values: dict[str, Any]):
        """Display settings or figures in a two-column table"""
        table = Table(show_header=False, box=box.SIMPLE)
        table.add_column("Setting", style="cyan dim", min_width=20, justify="right")
        table.add_column("Value", style="cyan", min_width=30)

        for key, value in values.items():
            if isinstance(value, (list, tuple)):
                value = ", ".join(str(v) for v in value)
            table.add_row(key, str(value))

        self.console.print(table)

    def show_failures(self, failed: list[tuple[str, str]], title: str, show_limit: int = 10):
        """Show (item, reason) failures, truncated after *show_limit*"""
        if not failed:
            return

        self.print_error(f"{title} ({len(failed)}):")
        for item, reason in failed[:show_limit]:
            self.console.print(f"[red dim]  • {item}: {reason}[/red dim]")

        if len(failed) > show_limit:
            self.console.print(f"[red dim]  • ... and {len(failed) - show_limit} more[/red dim]")

    def create_activity_progress(self):
        """Create a Rich progress context manager for activity-only display (no counts)"""
        return Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )

    # Interactive prompts
    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask for yes/no confirmation"""
        return Confirm.ask(question, default=default, console=self.console)

    def print_separator(self, char: str = "─", length: int = 40):
        """Print a separator line"""
        self.console.print(char * length, style="dim")
