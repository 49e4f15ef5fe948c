"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich for spinners, colored output and the per-type summary table.
Supports verbosity levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table

from src.sync_engine.models import OperationKind, SessionResult, SyncReport


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Pull complete")
        >>> with handler.spinner("Pulling..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False, console: Optional[Console] = None):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
            console: Console to write to (created if omitted)
        """
        self.verbosity = verbosity
        self.console = console or Console(
            no_color=no_color,
            highlight=False,
        )
        self._live: Optional[Live] = None

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display a spinner while the block runs.

        The spinner can be stopped early with stop_spinner(), for example
        before an interactive prompt.

        Example:
            >>> with handler.spinner("Pulling assets..."):
            ...     pass
        """
        live = Live(Spinner("dots", text=message), console=self.console, refresh_per_second=10)
        self._live = live
        live.start()
        try:
            yield
        finally:
            self.stop_spinner()

    def stop_spinner(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

    def print_report(self, report: SyncReport) -> None:
        """Display the final session message."""
        if report.is_error:
            self.error(report.message)
        else:
            self.success(report.message)

    def print_session_summary(self, session: SessionResult) -> None:
        """Display a per-type table of the session (only if verbosity >= 1).

        Args:
            session: Session to summarize
        """
        if self.verbosity < 1 or not session.outcomes:
            return

        compare = session.operation == OperationKind.COMPARE
        table = Table(title=f"{session.operation.value.capitalize()} Summary")
        table.add_column("Type")
        if compare:
            table.add_column("Compared", justify="right")
            table.add_column("Differences", justify="right")
        else:
            table.add_column("Succeeded", justify="right", style="green")
            table.add_column("Failed", justify="right", style="red")
            table.add_column("Warnings", justify="right", style="yellow")
            table.add_column("Deleted", justify="right")
        table.add_column("Status")

        for outcome in session.outcomes:
            name = outcome.artifact_type.value
            if outcome.site_id:
                name += f" ({outcome.site_id})"
            status = f"[red]error: {outcome.error}[/red]" if outcome.failed else "[green]ok[/green]"
            if compare:
                table.add_row(name, str(outcome.total_count), str(outcome.diff_count), status)
            else:
                deleted = str(outcome.deleted_count)
                if outcome.delete_failed_count:
                    deleted += f" ({outcome.delete_failed_count} failed)"
                table.add_row(
                    name,
                    str(outcome.succeeded_count),
                    str(outcome.failed_count),
                    str(outcome.warning_count),
                    deleted,
                    status,
                )

        self.console.print(table)
