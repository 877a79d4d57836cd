"""Output formatting for the pydotfiles CLI."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


# Status symbols
CHECK_MARK = "✓"
CROSS_MARK = "✗"
WARNING_MARK = "⚠"
INFO_MARK = "ℹ"
ARROW_MARK = "→"


class OutputFormatter:
    """Formats messages, tables and JSON for terminal output."""

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def _emit(
        self,
        symbol: str,
        message: str,
        style: str,
        console: Optional[Console] = None,
    ) -> None:
        target = console or self.console
        target.print(f"[{style}]{symbol}[/{style}] ", end="")
        target.print(message, markup=False, soft_wrap=True)

    def print(self, message: str = "") -> None:
        """Print a plain line (suppressed in quiet and JSON modes)."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, markup=False, soft_wrap=True)

    def header(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(message, style="bold", markup=False, soft_wrap=True)

    def info(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self._emit(INFO_MARK, message, "blue")

    def success(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self._emit(CHECK_MARK, message, "green")

    def modified(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self._emit(ARROW_MARK, message, "magenta")

    def warning(self, message: str) -> None:
        """Print a warning (suppressed in JSON mode only)."""
        if self.json_output:
            return
        self._emit(WARNING_MARK, message, "yellow", self.err_console)

    def error(self, message: str) -> None:
        """Print an error. Errors are always shown, even in quiet mode."""
        self._emit(CROSS_MARK, message, "red", self.err_console)

    def command_hint(self, command: str) -> None:
        """Print a shell command the user is expected to run."""
        if self.quiet or self.json_output:
            return
        self.console.print(f"   {command}", style="cyan", markup=False, soft_wrap=True)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled list of key/value lines.

        Args:
            title: Summary title
            items: List of (label, value) tuples
        """
        if self.json_output:
            self.output_json({label: value for label, value in items})
            return
        if self.quiet:
            return

        self.console.print()
        self.console.print(title, style="bold", markup=False)
        width = max((len(label) for label, _ in items), default=0)
        for label, value in items:
            self.console.print(
                f"  {label.ljust(width)}  {value}", markup=False, soft_wrap=True
            )

    def output_table(
        self,
        data: list[dict[str, Any]],
        columns: list[str],
        headers: Optional[dict[str, str]] = None,
        title: Optional[str] = None,
    ) -> None:
        """Render rows as a table, or as a JSON list in JSON mode.

        Args:
            data: Rows to render
            columns: Keys of each row to display, in order
            headers: Optional mapping of column key to header text
            title: Optional table title
        """
        if self.json_output:
            self.output_json(data)
            return

        headers = headers or {}
        table = Table(title=title, show_lines=False)
        for column in columns:
            table.add_column(headers.get(column, column), overflow="fold")
        for row in data:
            table.add_row(*(str(row.get(column, "")) for column in columns))
        self.console.print(table)

    def output_json(self, data: Any) -> None:
        """Print data as indented JSON."""
        self.console.print(
            json.dumps(data, indent=2, default=str),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
