"""Human-readable and JSON reporting for execution results."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)

from maid.organization.models import ExecutionReport, Operation

_KIND_LABELS = {
    "rename": "RENAME",
    "move": "MOVE",
    "trash_move": "TRASH",
}


class Reporter:
    """Render an :class:`ExecutionReport` to a rich console."""

    def __init__(
        self, console: Console, *, verbose: bool = False, json_output: bool = False
    ) -> None:
        self._console = console
        self._verbose = verbose
        self._json_output = json_output

    @contextmanager
    def progress(
        self, total: int, *, description: str
    ) -> Iterator[Optional[Callable[[Operation], None]]]:
        """Show a transient progress bar while ``total`` operations run.

        The bar is drawn only for non-verbose text output on a terminal. Otherwise the
        context yields ``None`` and prints nothing.

        Yields:
            Optional[Callable[[Operation], None]]: Callback advancing the bar by one.
        """
        if self._verbose or self._json_output or total == 0 or not self._console.is_terminal:
            yield None
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeRemainingColumn(),
            console=self._console,
            transient=True,
        ) as bar:
            task = bar.add_task(description, total=total)
            yield lambda _operation: bar.advance(task)

    def emit(self, report: ExecutionReport, *, command: str) -> None:
        """Print the report.

        Verbose mode prints one line per operation and per retained file. Failures, scan
        errors and the summary line are always printed. JSON mode prints a single document.

        Args:
            report: Result of applying or simulating a plan.
            command: Command name used in the summary line.
        """
        if self._json_output:
            self._console.print_json(data=build_payload(report, command=command))
            return

        for operation in report.operations:
            if self._verbose or operation.error is not None:
                self._console.print(self.format_operation(operation, report))

        if self._verbose:
            for decision in report.kept:
                relative = escape(_relative(decision.path, report.root))
                reason = f"[dim]({decision.reason})[/dim]"
                self._console.print(f"[green]KEEP[/green] {relative} {reason}")
            for note in report.notes:
                self._console.print(f"[yellow]Note:[/yellow] {escape(note)}")

        if report.errors:
            self._console.print("[red]Errors encountered:[/red]")
            for entry in report.errors:
                self._console.print(f"  - {escape(entry)}")

        metrics: dict[str, Any] = dict(report.counts())
        if command != "keep":
            metrics.pop("kept")
        if report.dry_run:
            metrics["dry_run"] = True
        self._console.print(format_summary_line(command, report.root, metrics))
        if report.dry_run:
            self._console.print("[yellow]Dry run selected; no files were changed.[/yellow]")

    def format_operation(self, operation: Operation, report: ExecutionReport) -> str:
        """Return the verbose line for ``operation``."""
        label = _KIND_LABELS[operation.kind.value]
        source = escape(_relative(operation.source, report.root))
        destination = escape(_relative(operation.destination, report.root))
        if operation.error is not None:
            status = f"[red]failed: {escape(operation.error)}[/red]"
        elif operation.executed:
            status = "[green]executed[/green]"
        elif report.dry_run:
            status = "[yellow]simulated[/yellow]"
        else:
            status = "[dim]skipped[/dim]"
        return f"[cyan]{label}[/cyan] {source} -> {destination} ({status})"


def format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command.capitalize()} summary for {escape(str(root))}: {parts}.[/green]"


def build_payload(report: ExecutionReport, *, command: str) -> dict[str, Any]:
    """Return the JSON document describing ``report`` for machine consumers."""
    data = report.model_dump(mode="json")
    return {
        "command": command,
        "context": {
            "root": data["root"],
            "mode": data["mode"],
            "dry_run": data["dry_run"],
        },
        "counts": report.counts(),
        "operations": data["operations"],
        "kept": data["kept"],
        "notes": data["notes"],
        "errors": data["errors"],
    }


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


__all__ = ["Reporter", "build_payload", "format_summary_line"]
