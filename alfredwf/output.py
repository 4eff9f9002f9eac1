"""Console output for the alfredwf CLI."""

from typing import Any, Optional

from rich.console import Console


class OutputFormatter:
    """Prints user-facing messages with consistent styling.

    Errors and warnings always print. Informational messages are suppressed
    when quiet is set.
    """

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        """Initialize output formatter.

        Args:
            quiet: Suppress non-essential output
            console: Rich console to print to
        """
        self.quiet = quiet
        self.console = console or Console(highlight=False, soft_wrap=True)

    def print(self, message: Any = "") -> None:
        """Print a message verbatim."""
        self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        self.console.print(f"WARNING: {message}", style="yellow", markup=False)

    def error(self, message: str) -> None:
        self.console.print(message, style="bold red", markup=False)
