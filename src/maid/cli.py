"""Command line interface for maid."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from maid.config import ConfigError, ConfigManager, MaidConfig, resolve_with_precedence
from maid.config.resolver import expand_dotted
from maid.errors import RootInaccessibleError
from maid.ingestion.discovery import ensure_root
from maid.ingestion.pipeline import IngestionPipeline
from maid.organization import (
    OperationExecutor,
    OrganizerPlanner,
    PlanMode,
    RetentionPolicy,
)
from maid.reporting import Reporter
from maid.watch import ChangeBatch, WatchService

console = Console()

_PATH_OPTION = click.option(
    "-p",
    "--path",
    "path",
    type=click.Path(file_okay=True, dir_okay=True, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory to process.",
)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command with exit code 1.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _configure_logging(config: MaidConfig, *, verbose: bool, json_output: bool) -> None:
    level = logging.getLevelName(config.logging.level)
    if verbose:
        level = min(level, logging.INFO)
    if json_output:
        level = max(level, logging.ERROR)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _resolve_verbose(ctx: click.Context, verbose: bool, config: MaidConfig) -> bool:
    if ctx.get_parameter_source("verbose") == ParameterSource.COMMANDLINE:
        return verbose
    return config.cli.verbose_default


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign ``value`` at a dotted ``path`` inside ``target``.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """
    node = target
    for segment in path[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="maid-cli")
def cli() -> None:
    """Maid renames, restructures, and prunes cryptically named documents and scripts."""


@cli.command()
@_PATH_OPTION
@click.option("-R", "--recursive", is_flag=True, help="Include all subdirectories.")
@click.option(
    "-r",
    "--restructure",
    is_flag=True,
    help="Move files into per-category directories instead of renaming in place.",
)
@click.option("-n", "--dry-run", is_flag=True, help="Preview changes without modifying files.")
@click.option("-v", "--verbose", is_flag=True, help="Print one line per operation.")
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON report.")
@click.pass_context
def clean(
    ctx: click.Context,
    path: Path,
    recursive: bool,
    restructure: bool,
    dry_run: bool,
    verbose: bool,
    json_output: bool,
) -> None:
    """Rename files to canonical names and optionally restructure them by category.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Root directory to clean.
        recursive: Whether to include subdirectories.
        restructure: Whether to relocate files into per-category directories.
        dry_run: If True, report the plan without mutating files.
        verbose: If True, print every planned or executed operation.
        json_output: If True, emit a JSON report instead of text.
    """
    try:
        config = ConfigManager().load()
        verbose_enabled = _resolve_verbose(ctx, verbose, config)
        _configure_logging(config, verbose=verbose_enabled, json_output=json_output)

        root = ensure_root(path)
        pipeline = IngestionPipeline.from_config(
            config, recursive=recursive or config.processing.recurse_directories
        )
        result = pipeline.run(root)

        planner = OrganizerPlanner(
            pipeline.namer, script_directory=config.organization.script_directory
        )
        mode = PlanMode.RESTRUCTURE if restructure else PlanMode.IN_PLACE
        plan = planner.build_plan(result.records, root=root, mode=mode)

        reporter = Reporter(console, verbose=verbose_enabled, json_output=json_output)
        with reporter.progress(len(plan.operations), description="Cleaning") as advance:
            report = OperationExecutor().apply(plan, dry_run=dry_run, on_operation=advance)
        report.errors.extend(result.errors)
        reporter.emit(report, command="clean")
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except RootInaccessibleError as exc:
        _handle_cli_error(
            str(exc), code="root_inaccessible", json_output=json_output, original=exc
        )
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while cleaning files: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )


@cli.command()
@_PATH_OPTION
@click.option("-R", "--recursive", is_flag=True, help="Include all subdirectories.")
@click.option(
    "--recent-days",
    type=click.FloatRange(min=0),
    help="Keep files modified within this many days.",
)
@click.option("-n", "--dry-run", is_flag=True, help="Preview changes without modifying files.")
@click.option("-v", "--verbose", is_flag=True, help="Print one line per operation.")
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON report.")
@click.pass_context
def keep(
    ctx: click.Context,
    path: Path,
    recursive: bool,
    recent_days: float | None,
    dry_run: bool,
    verbose: bool,
    json_output: bool,
) -> None:
    """Keep important files and move the rest into a timestamped trash directory.

    Files are kept when they were modified recently, already carry their canonical
    name, or contain a reserved marker token. Nothing is deleted: disposable files
    move to ``<path>/.maid-trash/<timestamp>/`` with their relative paths preserved.
    """
    try:
        overrides = {"retention.recent_days": recent_days} if recent_days is not None else None
        config = ConfigManager().load(cli_overrides=overrides)
        verbose_enabled = _resolve_verbose(ctx, verbose, config)
        _configure_logging(config, verbose=verbose_enabled, json_output=json_output)

        root = ensure_root(path)
        pipeline = IngestionPipeline.from_config(
            config, recursive=recursive or config.processing.recurse_directories
        )
        result = pipeline.run(root)

        retention = config.retention
        policy = RetentionPolicy(
            pipeline.namer,
            recent_days=retention.recent_days,
            markers=retention.markers,
            trash_dirname=retention.trash_dirname,
            stamp_format=retention.stamp_format,
        )
        plan = policy.build_plan(result.records, root=root)

        reporter = Reporter(console, verbose=verbose_enabled, json_output=json_output)
        with reporter.progress(len(plan.operations), description="Sorting") as advance:
            report = OperationExecutor().apply(plan, dry_run=dry_run, on_operation=advance)
        report.errors.extend(result.errors)
        reporter.emit(report, command="keep")
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except RootInaccessibleError as exc:
        _handle_cli_error(
            str(exc), code="root_inaccessible", json_output=json_output, original=exc
        )
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while sorting important files: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )


def _emit_change_batch(batch: ChangeBatch) -> None:
    for changed in batch.changed:
        console.print(f"[cyan]Change detected:[/cyan] {escape(str(changed))}")
    for suggestion in batch.suggestions:
        console.print(f"  Suggested action: [green]{escape(suggestion)}[/green]")


@cli.command()
@_PATH_OPTION
@click.option("-R", "--recursive", is_flag=True, help="Include subdirectories while polling.")
@click.option(
    "-i",
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds between polls.",
)
@click.option("--polls", type=click.IntRange(min=1), help="Stop after this many polls.")
def watch(path: Path, recursive: bool, interval: float | None, polls: int | None) -> None:
    """Poll PATH for changed files and suggest a `maid clean` command.

    Args:
        path: Directory to monitor.
        recursive: Whether to include subdirectories.
        interval: Optional polling interval override in seconds.
        polls: Optional number of polls after which the command exits.
    """
    try:
        config = ConfigManager().load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    _configure_logging(config, verbose=False, json_output=False)

    pipeline = IngestionPipeline.from_config(
        config, recursive=recursive or config.processing.recurse_directories
    )
    try:
        service = WatchService(
            path,
            scanner=pipeline.scanner,
            interval=interval or config.cli.watch_interval_seconds,
        )
    except RootInaccessibleError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(
        f"[cyan]Watching {escape(str(service.root))} every "
        f"{interval or config.cli.watch_interval_seconds:g}s. Press Ctrl+C to stop.[/cyan]"
    )
    try:
        service.watch(_emit_change_batch, max_polls=polls)
    except KeyboardInterrupt:
        service.stop()
        console.print("[yellow]Watch stopped by user request.[/yellow]")
    except RootInaccessibleError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.group()
def config() -> None:
    """Manage maid configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        config = manager.load(include_env=not no_env, ensure_file=True)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text().splitlines()

    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException(
            "KEY must specify a dotted path such as 'retention.recent_days'."
        )

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = expand_dotted(manager.load_file_overrides(), layer_name="file")
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=MaidConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if not line.startswith(("-# Last updated", "+# Last updated"))
    ]
    changed = [line for line in diff if not line.startswith(("+++", "---"))]
    if not any(line.startswith(("+", "-")) for line in changed):
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
