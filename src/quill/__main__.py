"""Quill CLI."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from quill.composer.requests import PrepareRequest, SuggestRequest
from quill.composer.service import ComposerService
from quill.composer.types import ExecutionCallbacks
from quill.config import get_settings
from quill.errors import WorkspaceNotFoundError
from quill.workspace import StaticWorkspaceResolver

LOCAL_WORKSPACE_ID = "local"

app = typer.Typer(name="quill", help="Slash commands and @mentions for the assistant composer", add_completion=False)
console = Console()


def _build_service(workspace: Path | None) -> ComposerService:
    root = (workspace or Path.cwd()).expanduser().resolve()
    if not root.is_dir():
        raise WorkspaceNotFoundError(f"workspace directory not found: {root}")
    settings = get_settings(profile="cli")
    resolver = StaticWorkspaceResolver({LOCAL_WORKSPACE_ID: root})
    return ComposerService.from_settings(settings, resolver)


def _open_service(workspace: Path | None) -> ComposerService:
    try:
        return _build_service(workspace)
    except WorkspaceNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from None


def _print_json(payload: Any) -> None:
    console.print_json(json.dumps(asdict(payload), default=str))


@app.command()
def suggest(
    text: str = typer.Argument(..., help="Composer input"),
    cursor: int | None = typer.Option(None, "--cursor", "-c", help="Cursor offset, defaults to end of input"),
    workspace: Path | None = typer.Option(None, "--workspace", "-w", help="Workspace root"),  # noqa: B008
) -> None:
    """Show suggestions for the token under the cursor."""

    service = _open_service(workspace)
    request = SuggestRequest(
        raw_input=text, cursor=len(text) if cursor is None else cursor, workspace_id=LOCAL_WORKSPACE_ID
    )
    _print_json(asyncio.run(service.suggest(request)))


@app.command()
def prepare(
    text: str = typer.Argument(..., help="Composer input"),
    workspace: Path | None = typer.Option(None, "--workspace", "-w", help="Workspace root"),  # noqa: B008
) -> None:
    """Parse and resolve input without executing it."""

    service = _open_service(workspace)
    request = PrepareRequest(raw_input=text, cursor=len(text), workspace_id=LOCAL_WORKSPACE_ID)
    _print_json(asyncio.run(service.prepare(request)))


@app.command()
def run(
    text: str = typer.Argument(..., help="Composer input"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model override for the assistant"),
    workspace: Path | None = typer.Option(None, "--workspace", "-w", help="Workspace root"),  # noqa: B008
) -> None:
    """Prepare and execute input, streaming assistant output."""

    service = _open_service(workspace)
    request = PrepareRequest(
        raw_input=text, cursor=len(text), workspace_id=LOCAL_WORKSPACE_ID, model_override=model
    )
    callbacks = ExecutionCallbacks(on_stream_chunk=typer.echo)
    result = asyncio.run(service.execute(request, callbacks))
    if not result.ok:
        typer.echo(result.output, err=True)
        raise typer.Exit(1)
    if result.provider == "local" and result.output:
        typer.echo(result.output)


@app.command("commands")
def list_commands(
    workspace: Path | None = typer.Option(None, "--workspace", "-w", help="Workspace root"),  # noqa: B008
) -> None:
    """List built-in and workspace skill commands."""

    service = _open_service(workspace)
    for suggestion in asyncio.run(_command_listing(service)):
        typer.echo(f"{suggestion.syntax:<28} {suggestion.description}")


async def _command_listing(service: ComposerService) -> list[Any]:
    result = await service.suggest(SuggestRequest(raw_input="/", cursor=1, workspace_id=LOCAL_WORKSPACE_ID))
    return list(result.suggestions)


if __name__ == "__main__":
    app()
