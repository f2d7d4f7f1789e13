"""Operator console for the content catalog."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from importlib import metadata
from pathlib import Path
from typing import Annotated, Optional, TypeVar

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskID, TextColumn
from rich.table import Table

from catalog_console.app_logging import configure_logging
from catalog_console.containers import AppContainer, build_container
from catalog_console.domain.errors import ConsoleError
from catalog_console.domain.records import AssetUploadRequest, PersistedRecord
from catalog_console.services.pipeline import AssetRecordPipeline

T = TypeVar("T")

app = typer.Typer(
    name="catalog-console",
    help="Manage testimonials, success stories and videos.",
)

console = Console()

EntityArg = Annotated[
    str, typer.Argument(help="testimonials, success, videos or responses")
]
SetOption = Annotated[
    Optional[list[str]],
    typer.Option("--set", help="Field value as NAME=VALUE. Repeatable."),
]
FileOption = Annotated[
    Optional[list[str]],
    typer.Option("--file", help="Upload a file into an asset field as NAME=PATH."),
]
UrlOption = Annotated[
    Optional[list[str]],
    typer.Option("--url", help="Set an asset field by URL as NAME=URL."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        try:
            current = metadata.version("catalog-console")
        except metadata.PackageNotFoundError:
            current = "unknown"
        console.print(f"catalog-console {current}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log requests and uploads.")
    ] = False,
) -> None:
    """Catalog Console - manage catalog records and their assets."""
    configure_logging(logging.INFO if verbose else logging.WARNING)


def _run(action: Callable[[AppContainer], Awaitable[T]]) -> T:
    async def runner() -> T:
        container = build_container()
        try:
            return await action(container)
        finally:
            await container.close_resources()

    try:
        return asyncio.run(runner())
    except ConsoleError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(code=1) from exc


def _pairs(values: list[str] | None, option: str) -> list[tuple[str, str]]:
    pairs = []
    for raw in values or []:
        name, sep, value = raw.partition("=")
        if not sep or not name:
            raise typer.BadParameter(
                f"expected NAME=VALUE, got {raw!r}", param_hint=option
            )
        pairs.append((name.strip(), value))
    return pairs


def _pipeline(container: AppContainer, entity: str) -> AssetRecordPipeline:
    try:
        return container.pipeline(entity)
    except KeyError as exc:
        raise typer.BadParameter(str(exc.args[0]), param_hint="ENTITY") from exc


def _apply_inputs(
    pipeline: AssetRecordPipeline,
    fields: list[str] | None,
    files: list[str] | None,
    urls: list[str] | None,
) -> None:
    try:
        for name, value in _pairs(fields, "--set"):
            pipeline.set_field(name, value)
        for name, value in _pairs(urls, "--url"):
            pipeline.enter_url(name, value)
        for name, value in _pairs(files, "--file"):
            path = Path(value).expanduser()
            if not path.is_file():
                raise typer.BadParameter(
                    f"no such file {value!r}", param_hint="--file"
                )
            pipeline.validate_file(name, AssetUploadRequest.from_path(path))
    except KeyError as exc:
        raise typer.BadParameter(str(exc.args[0])) from exc


async def _submit_with_progress(
    pipeline: AssetRecordPipeline,
) -> PersistedRecord | None:
    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
        transient=True,
    ) as progress:
        tasks: dict[str, TaskID] = {}

        def observe(name: str, fraction: float) -> None:
            if name not in tasks:
                tasks[name] = progress.add_task(f"Uploading {name}", total=1.0)
            progress.update(tasks[name], completed=fraction)

        pipeline.progress_observer = observe
        try:
            return await pipeline.submit()
        finally:
            pipeline.progress_observer = None


def _render(pipeline: AssetRecordPipeline, records: list[PersistedRecord]) -> None:
    descriptor = pipeline.descriptor
    table = Table(title=descriptor.name.upper())
    table.add_column("ID")
    for spec in descriptor.fields:
        table.add_column(spec.label)
    for record in records:
        cells = [str(record.id)]
        for spec in descriptor.fields:
            value = record.values.get(spec.name)
            cells.append("" if value is None else str(value))
        table.add_row(*cells)
    console.print(table)


@app.command()
def login() -> None:
    """Log in and store a fresh session token."""

    async def action(container: AppContainer) -> None:
        await container.session_gate.login()

    _run(action)


@app.command("list")
def list_records(entity: EntityArg) -> None:
    """List every record of a collection."""

    async def action(container: AppContainer) -> None:
        pipeline = _pipeline(container, entity)
        await container.session_gate.run()
        _render(pipeline, await pipeline.list_records())

    _run(action)


@app.command()
def create(
    entity: EntityArg,
    fields: SetOption = None,
    files: FileOption = None,
    urls: UrlOption = None,
) -> None:
    """Create a record, uploading any files first."""

    async def action(container: AppContainer) -> None:
        pipeline = _pipeline(container, entity)
        await container.session_gate.run()
        await pipeline.list_records()
        pipeline.open_new()
        _apply_inputs(pipeline, fields, files, urls)
        record = await _submit_with_progress(pipeline)
        if record is not None:
            console.print(f"Created {pipeline.descriptor.label} {record.id}")

    _run(action)


@app.command()
def edit(
    entity: EntityArg,
    record_id: Annotated[str, typer.Argument(help="Id of the record to edit.")],
    fields: SetOption = None,
    files: FileOption = None,
    urls: UrlOption = None,
) -> None:
    """Update a record, uploading any files first."""

    async def action(container: AppContainer) -> None:
        pipeline = _pipeline(container, entity)
        await container.session_gate.run()
        await pipeline.list_records()
        record = pipeline.find_record(record_id)
        if record is None:
            raise typer.BadParameter(
                f"no {pipeline.descriptor.label} with id {record_id!r}",
                param_hint="RECORD_ID",
            )
        pipeline.open_edit(record)
        _apply_inputs(pipeline, fields, files, urls)
        updated = await _submit_with_progress(pipeline)
        if updated is not None:
            console.print(f"Updated {pipeline.descriptor.label} {updated.id}")

    _run(action)


@app.command()
def delete(
    entity: EntityArg,
    record_id: Annotated[str, typer.Argument(help="Id of the record to delete.")],
) -> None:
    """Delete a record after confirmation."""

    async def action(container: AppContainer) -> None:
        pipeline = _pipeline(container, entity)
        await container.session_gate.run()
        if await pipeline.delete_record(record_id):
            console.print(f"Deleted {pipeline.descriptor.label} {record_id}")
        else:
            console.print("Cancelled")

    _run(action)


if __name__ == "__main__":
    app()
