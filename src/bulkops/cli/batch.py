"""CLI commands for batch copy/move/delete."""

from __future__ import annotations

import asyncio
import importlib
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from bulkops.core.config import load_settings
from bulkops.core.errors import FileOperationError
from bulkops.core.schemas import BatchOperationOptions, BatchOperationResult
from bulkops.core.service import FileOperationService, create_file_operation_service
from bulkops.utils.logging import configure_logging

app: TyperType = typer.Typer(help="Copy, move or delete files in bulk.")

SourcesArgument = Annotated[
    list[Path],
    typer.Argument(help="Files or directories to process."),
]
DestOption = Annotated[
    Path,
    typer.Option("--dest", "-d", help="Destination directory."),
]
StopOnErrorFlag = Annotated[
    bool,
    typer.Option("--stop-on-error", help="Abort the batch at the first failure."),
]
RollbackFlag = Annotated[
    bool,
    typer.Option("--rollback", help="Undo completed items when the batch aborts."),
]
ConcurrencyOption = Annotated[
    int | None,
    typer.Option(
        "--max-concurrency", min=1, help="Items processed concurrently per slice."
    ),
]
RetriesOption = Annotated[
    int | None,
    typer.Option("--retries", min=0, help="Retries of recoverable failures."),
]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", help="Emit the result as JSON."),
]

BatchCall = Callable[
    [FileOperationService, BatchOperationOptions], Awaitable[BatchOperationResult]
]


def _run_batch(
    label: str,
    total: int,
    call: BatchCall,
    *,
    stop_on_error: bool,
    rollback: bool,
    max_concurrency: int | None,
    retries: int | None,
    json_output: bool,
) -> None:
    settings = load_settings()
    configure_logging(settings)
    service = create_file_operation_service(settings=settings)

    console = Console(stderr=True)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=False,
        disable=json_output,
    )

    with progress:
        task = progress.add_task(label, total=total)

        def on_progress(completed: int, _total: int, current: Path | None) -> None:
            name = current.name if current is not None else ""
            progress.update(task, completed=completed, description=f"{label} {name}")

        options = BatchOperationOptions(
            continue_on_error=not stop_on_error,
            enable_rollback=rollback,
            max_concurrency=max_concurrency or settings.max_concurrency,
            max_retries=settings.max_retries if retries is None else retries,
            progress_callback=on_progress,
        )

        try:
            result = asyncio.run(call(service, options))
        except FileOperationError as exc:
            if json_output:
                typer.echo(json.dumps({"aborted": exc.to_dict()}, indent=2))
            else:
                typer.secho(
                    f"Aborted: {exc.message} ({exc.path})",
                    err=True,
                    fg=typer.colors.RED,
                )
            raise typer.Exit(code=1) from exc

    _report(result, json_output)
    if result.failed:
        raise typer.Exit(code=1)


def _report(result: BatchOperationResult, json_output: bool) -> None:
    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    for path in result.successful:
        typer.secho(f"OK      {path}", fg=typer.colors.GREEN)
    for failure in result.failed:
        typer.secho(
            f"FAILED  {failure.path}: {failure.error.user_message()}",
            fg=typer.colors.RED,
        )
    typer.echo(
        f"Processed {result.total_processed}: "
        f"{len(result.successful)} succeeded, {len(result.failed)} failed"
    )


def copy(
    sources: SourcesArgument,
    dest: DestOption,
    stop_on_error: StopOnErrorFlag = False,
    rollback: RollbackFlag = False,
    max_concurrency: ConcurrencyOption = None,
    retries: RetriesOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Copy files or directories into a destination directory."""

    _run_batch(
        "Copy",
        len(sources),
        lambda service, options: service.copy_files_batch(sources, dest, options),
        stop_on_error=stop_on_error,
        rollback=rollback,
        max_concurrency=max_concurrency,
        retries=retries,
        json_output=json_output,
    )


def move(
    sources: SourcesArgument,
    dest: DestOption,
    stop_on_error: StopOnErrorFlag = False,
    rollback: RollbackFlag = False,
    max_concurrency: ConcurrencyOption = None,
    retries: RetriesOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Move files or directories into a destination directory."""

    _run_batch(
        "Move",
        len(sources),
        lambda service, options: service.move_files_batch(sources, dest, options),
        stop_on_error=stop_on_error,
        rollback=rollback,
        max_concurrency=max_concurrency,
        retries=retries,
        json_output=json_output,
    )


def delete(
    sources: SourcesArgument,
    stop_on_error: StopOnErrorFlag = False,
    rollback: RollbackFlag = False,
    max_concurrency: ConcurrencyOption = None,
    retries: RetriesOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Delete files or directories (directories recursively)."""

    _run_batch(
        "Delete",
        len(sources),
        lambda service, options: service.delete_files_batch(sources, options),
        stop_on_error=stop_on_error,
        rollback=rollback,
        max_concurrency=max_concurrency,
        retries=retries,
        json_output=json_output,
    )


app.command("copy")(copy)
app.command("move")(move)
app.command("delete")(delete)
