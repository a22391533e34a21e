#!/usr/bin/env python3
"""
Console UI Module using Rich

Provides the console interface of Ogkos: styled messages, the activity
spinner shown while the tree is built, the size breakdown table and
line-oriented input.
"""

from typing import Any, Optional

try:
    import readline  # noqa: F401  line editing for input()

    _HAS_READLINE = True
except ImportError:
    _HAS_READLINE = False

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table


class ConsoleUI:
    """Console UI handler using Rich"""

    def __init__(self, force_terminal: Optional[bool] = None, console: Optional[Console] = None):
        """Initialize console with optional terminal forcing or an existing console"""
        self.console = console or Console(force_terminal=force_terminal, highlight=False)

    # Basic styled output methods
    def print_success(self, message: str):
        """Print success message in green"""
        self.console.print(message, style="green", markup=False)

    def print_error(self, message: str):
        """Print error message in red"""
        self.console.print(message, style="red bold", markup=False)

    def print_warning(self, message: str):
        """Print warning message in yellow"""
        self.console.print(message, style="yellow", markup=False)

    def print_info(self, message: str):
        """Print info message in cyan"""
        self.console.print(message, style="cyan", markup=False)

    def print_plain(self, message: str):
        """Print message in plain white"""
        self.console.print(message, style="white", markup=False)

    def print_header(self, title: str, subtitle: Optional[str] = None):
        """Print a header with optional subtitle"""
        if subtitle:
            header_text = f"[bold]{escape(title)}[/bold]\n[dim]{escape(subtitle)}[/dim]"
        else:
            header_text = f"[bold]{escape(title)}[/bold]"

        panel = Panel(header_text, box=box.ROUNDED, padding=(0, 1))
        self.console.print(panel)

    # Configuration display
    def show_configuration(self, config: dict[str, Any], title: str = "Configuration"):
        """Display configuration in a formatted table"""
        table = Table(title=title, show_header=False, box=box.SIMPLE)
        table.add_column("Setting", style="cyan dim", min_width=20, justify="right")
        table.add_column("Value", style="cyan", min_width=30)

        for key, value in config.items():
            if isinstance(value, list):
                value = ", ".join(str(v) for v in value)
            table.add_row(key, str(value))

        self.console.print(table)

    # Size breakdown of a node
    def show_node(
        self,
        name: str,
        size_text: str,
        rows: Optional[list[tuple[str, str, float]]] = None,
        name_width: int = 64,
    ):
        """Show a node's size followed by its ranked children

        Args:
            name: Display name of the node
            size_text: Formatted aggregate size
            rows: (child name, formatted size, percentage) tuples; None for non-directories
            name_width: Width of the right-aligned name column
        """
        self.console.print(f"{name}: {size_text}", markup=False, highlight=False)
        if rows is None:
            return

        self.console.print(f"{'file name':>{name_width}} {'size':>8} {'%':>6}", style="bold", markup=False)
        self.print_separator("-", name_width + 16)
        for child_name, child_size, percentage in rows:
            self.console.print(
                f"{child_name:>{name_width}} {child_size:>8} {percentage:5.1f}%",
                markup=False,
                highlight=False,
            )

    # Progress display
    def create_activity_progress(self):
        """Create a Rich progress context manager for activity-only display (no counts)"""
        return Progress(
            SpinnerColumn(),
            TextColumn("{task.description}", markup=False),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )

    # Interactive input
    def read_line(self, prompt: str = "> ") -> Optional[str]:
        """Read one line of input; returns None on end-of-input or Ctrl+C"""
        try:
            if _HAS_READLINE:
                # readline has to own the prompt to redraw it while editing
                return input(prompt)
            return self.console.input(prompt)
        except (EOFError, KeyboardInterrupt):
            self.console.print()
            return None

    # Utility methods
    def print_separator(self, char: str = "─", length: int = 50):
        """Print a separator line"""
        self.console.print(char * length, style="dim", markup=False)
