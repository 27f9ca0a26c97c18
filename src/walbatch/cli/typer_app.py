"""
walbatch Typer CLI Application

Thin composition layer over the batch engine: ``run`` builds a batch
from a plan file and executes it, ``show`` prints the records of a log.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from walbatch.cli.output import CommandOutput
from walbatch.cli.plan import load_plan
from walbatch.config.settings import Settings, load_settings
from walbatch.core.batch import BatchResult
from walbatch.core.log_manager import read_records
from walbatch.core.models import BatchStartRecord, StatusUpdateRecord
from walbatch.shared.constants import Application, CLICommands, CLIDefaults, CLIHelp
from walbatch.shared.errors import (
    BatchExecutionError,
    WalBatchError,
    WalWriteError,
)
from walbatch.utils.logging_config import setup_logging_from_settings

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    """Log level enumeration for type safety."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=Application.VERSION))
        raise typer.Exit


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    rich_markup_mode=CLIHelp.APP_STYLE,
    no_args_is_help=True,
)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version information and exit.",
        ),
    ] = False,
) -> None:
    """walbatch - all-or-nothing file moves and copies."""


def _emit_json(output: CommandOutput) -> None:
    typer.echo(output.to_json().decode("utf-8"))


def _fail(command: str, error: WalBatchError, exit_code: int, *, json_output: bool, console: Console) -> NoReturn:
    if json_output:
        _emit_json(CommandOutput.failure(command, error))
    else:
        console.print(f"[red]Error:[/red] {error.message}")
    raise typer.Exit(exit_code)


def _load_settings(config: Path | None, command: str, *, json_output: bool, console: Console) -> Settings:
    try:
        return load_settings(config)
    except WalBatchError as e:
        _fail(command, e, CLIDefaults.EXIT_USAGE_ERROR, json_output=json_output, console=console)


@app.command(CLICommands.RUN, help=CLIHelp.RUN_HELP)
def run_command(
    plan: Annotated[
        Path,
        typer.Argument(help=CLIHelp.RUN_PLAN_HELP, exists=True, dir_okay=False, readable=True),
    ],
    wal: Annotated[Optional[Path], typer.Option("--wal", "-w", help=CLIHelp.RUN_WAL_HELP)] = None,
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help=CLIHelp.CONFIG_HELP)] = None,
    log_level: Annotated[
        Optional[LogLevel],
        typer.Option("--log-level", case_sensitive=False, help="Override the configured logging level."),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help=CLIHelp.JSON_HELP)] = False,
) -> None:
    """Execute a plan file as one batch."""
    console = Console()
    command = CLICommands.RUN

    settings = _load_settings(config, command, json_output=json_output, console=console)
    if json_output:
        settings.logging.console = False
    setup_logging_from_settings(
        settings.logging,
        level_override=log_level.value if log_level else None,
    )

    try:
        batch = load_plan(plan).build_batch(wal, settings.execution)
    except WalBatchError as e:
        _fail(command, e, CLIDefaults.EXIT_USAGE_ERROR, json_output=json_output, console=console)

    logger.debug("Running %r", batch)
    try:
        result: BatchResult = batch.execute_all(
            durable_log=settings.execution.durable_log,
            rollback_on_log_failure=settings.execution.rollback_on_log_failure,
        )
    except BatchExecutionError as e:
        if json_output:
            _emit_json(CommandOutput.failure(command, e, e.log_warnings))
        else:
            console.print(f"[red]Batch failed at step {e.failed_index}:[/red] {e.original_error}")
            console.print(f"Undone steps: {len(e.undone_indices)}")
            for index, undo_error in e.undo_errors:
                console.print(f"[red]Undo of step {index} failed:[/red] {undo_error}")
            for warning in e.log_warnings:
                console.print(f"[yellow]Log warning:[/yellow] {warning}")
        raise typer.Exit(CLIDefaults.EXIT_ERROR) from e
    except WalWriteError as e:
        _fail(command, e, CLIDefaults.EXIT_ERROR, json_output=json_output, console=console)

    if json_output:
        _emit_json(
            CommandOutput(
                success=True,
                command=command,
                data={"wal_path": str(result.wal_path), "executed": result.executed},
            )
        )
    else:
        console.print(f"[green]Batch succeeded:[/green] {result.executed} operations executed")
        console.print(f"Log: {result.wal_path}")


def _record_row(record: BatchStartRecord | StatusUpdateRecord) -> list[str]:
    if isinstance(record, BatchStartRecord):
        return [record.type, "", "", f"{len(record.commands)} commands", str(record.wal_path), ""]
    cmd = record.cmd
    return [
        record.type,
        record.action.value,
        str(record.index),
        cmd.name.value if cmd else "",
        str(cmd.source_path) if cmd else "",
        str(cmd.target_path) if cmd else "",
    ]


@app.command(CLICommands.SHOW, help=CLIHelp.SHOW_HELP)
def show_command(
    wal: Annotated[Path, typer.Argument(help=CLIHelp.SHOW_WAL_HELP)],
    json_output: Annotated[bool, typer.Option("--json", help=CLIHelp.JSON_HELP)] = False,
) -> None:
    """Print every record of a log."""
    console = Console()
    command = CLICommands.SHOW

    try:
        records = read_records(wal)
    except WalBatchError as e:
        _fail(command, e, CLIDefaults.EXIT_ERROR, json_output=json_output, console=console)

    if json_output:
        records_data = [record.model_dump(mode="json") for record in records]
        _emit_json(CommandOutput(success=True, command=command, data={"records": records_data}))
        return

    table = Table(title=f"Batch log: {wal}")
    for column in ("Type", "Action", "Index", "Operation", "Source", "Target"):
        table.add_column(column)
    for record in records:
        table.add_row(*_record_row(record))
    console.print(table)
