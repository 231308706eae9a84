"""CLI entry point for ticketflow.

Every command prints the same JSON payload the HTTP API returns and exits
with status 1 on failure.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from ticketflow.api.models import (
    ErrorResponse,
    RepositoryListResponse,
    TicketDetailResponse,
    TicketListResponse,
    create_to_response,
    migrate_to_response,
    move_to_response,
    readiness_to_response,
    sweep_to_response,
    ticket_to_response,
    update_to_response,
)
from ticketflow.config import ConfigError, Settings, load_settings
from ticketflow.logging import setup_logging
from ticketflow.repos import RepositoryProbeError, create_probe
from ticketflow.store import StoreError, TicketStore
from ticketflow.tickets import PlaceholderError, TicketError, TicketLifecycle

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import BaseModel

logger = logging.getLogger("ticketflow.cli")


def _emit(model: BaseModel) -> None:
    click.echo(model.model_dump_json(by_alias=True, exclude_none=True, indent=2))


def _fail(message: str, placeholders: list[str] | None = None) -> None:
    _emit(ErrorResponse(error=message, detected_placeholders=placeholders))
    sys.exit(1)


class _Session:
    """Store, probe and lifecycle for one CLI invocation."""

    def __init__(self, settings: Settings) -> None:
        self.store = TicketStore(settings.database, timeout=settings.store_timeout)
        self.probe = create_probe(settings, self.store)
        self.lifecycle = TicketLifecycle.from_settings(self.store, settings, probe=self.probe)

    def close(self) -> None:
        self.probe.close()
        self.store.close()


def _run(ctx: click.Context, action: Callable[[TicketLifecycle], BaseModel]) -> None:
    """Run ``action`` against a fresh lifecycle and print its payload."""
    settings: Settings = ctx.obj["settings"]
    session = None
    try:
        session = _Session(settings)
        payload = action(session.lifecycle)
    except PlaceholderError as e:
        _fail(str(e), e.placeholders)
    except (TicketError, StoreError, RepositoryProbeError) as e:
        logger.info("Command failed: %s", e)
        _fail(str(e))
    else:
        _emit(payload)
    finally:
        if session is not None:
            session.close()


def _read_body(body: str | None, body_file: Any) -> str:
    if body is not None:
        return body
    if body_file is not None:
        return body_file.read()
    raise click.UsageError("Provide the ticket body with --body or --body-file")


def _body_options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--body-file",
        type=click.File("r"),
        default=None,
        help="Read the Markdown body from a file ('-' for stdin)",
    )(func)
    return click.option("--body", default=None, help="Markdown body")(func)


def _repo_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "-r",
        "--repo",
        "repository",
        default=None,
        help="Repository as owner/name (default: from configuration)",
    )(func)


@click.group()
@click.version_option(package_name="ticketflow")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to ticketflow.yaml (auto-detected if not specified)",
)
@click.option("-v", "--verbose", is_flag=True, help="Also log to stderr")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """ticketflow - ticket lifecycle and Kanban ordering engine."""
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    setup_logging(settings.log_dir, level=settings.log_level, console=verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@main.command()
@click.option("--host", default="127.0.0.1", help="Interface to bind")
@click.option("--port", default=8000, type=int, help="Port to listen on")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn  # noqa: PLC0415

    from ticketflow.api import create_app  # noqa: PLC0415

    uvicorn.run(create_app(ctx.obj["settings"]), host=host, port=port)


@main.command()
@click.argument("title")
@_body_options
@_repo_option
@click.pass_context
def create(
    ctx: click.Context, title: str, body: str | None, body_file: Any, repository: str | None
) -> None:
    """Create a ticket; it moves to To Do when it is ready."""
    text = _read_body(body, body_file)
    _run(ctx, lambda lc: create_to_response(lc.create(title, text, repository=repository)))


@main.command()
@click.argument("ref")
@_body_options
@_repo_option
@click.pass_context
def update(
    ctx: click.Context, ref: str, body: str | None, body_file: Any, repository: str | None
) -> None:
    """Replace the body of ticket REF."""
    text = _read_body(body, body_file)
    _run(ctx, lambda lc: update_to_response(lc.update(ref, text, repository=repository)))


@main.command()
@_body_options
@click.pass_context
def evaluate(ctx: click.Context, body: str | None, body_file: Any) -> None:
    """Check a body against the Definition of Ready."""
    text = _read_body(body, body_file)
    _run(ctx, lambda lc: readiness_to_response(lc.evaluate(text)))


@main.command()
@click.argument("ref")
@click.argument("column")
@click.option("-p", "--position", default=None, help="top, bottom or a 0-based index")
@_repo_option
@click.pass_context
def move(
    ctx: click.Context, ref: str, column: str, position: str | None, repository: str | None
) -> None:
    """Move ticket REF to COLUMN."""
    _run(
        ctx,
        lambda lc: move_to_response(
            lc.move(ref, column, position=position, repository=repository)
        ),
    )


@main.command("move-to-todo")
@click.argument("ref")
@click.option("-p", "--position", default=None, help="top, bottom or a 0-based index")
@_repo_option
@click.pass_context
def move_to_todo(
    ctx: click.Context, ref: str, position: str | None, repository: str | None
) -> None:
    """Move ticket REF from Unassigned to To Do."""
    _run(
        ctx,
        lambda lc: move_to_response(
            lc.move_unassigned_to_todo(ref, position=position, repository=repository)
        ),
    )


@main.command()
@click.argument("ref")
@click.argument("target")
@_repo_option
@click.pass_context
def migrate(ctx: click.Context, ref: str, target: str, repository: str | None) -> None:
    """Move ticket REF to repository TARGET."""
    _run(ctx, lambda lc: migrate_to_response(lc.migrate(ref, target, repository=repository)))


@main.command()
@click.argument("ref")
@_repo_option
@click.pass_context
def show(ctx: click.Context, ref: str, repository: str | None) -> None:
    """Show ticket REF."""
    _run(
        ctx,
        lambda lc: TicketDetailResponse(
            ticket=ticket_to_response(lc.get_ticket(ref, repository=repository))
        ),
    )


@main.command("list")
@click.argument("column")
@_repo_option
@click.pass_context
def list_column(ctx: click.Context, column: str, repository: str | None) -> None:
    """List the tickets of COLUMN in board order."""

    def action(lc: TicketLifecycle) -> TicketListResponse:
        target = lc.get_column(column)
        tickets = lc.list_column(target.id, repository=repository)
        return TicketListResponse(
            column_id=target.id, tickets=[ticket_to_response(t) for t in tickets]
        )

    _run(ctx, action)


@main.command()
@_repo_option
@click.pass_context
def sweep(ctx: click.Context, repository: str | None) -> None:
    """Move every ready Unassigned ticket to To Do."""
    _run(ctx, lambda lc: sweep_to_response(lc.sweep_unassigned(repository)))


@main.command()
@click.pass_context
def repos(ctx: click.Context) -> None:
    """List repositories that own tickets."""
    _run(ctx, lambda lc: RepositoryListResponse(repositories=lc.list_repositories()))


if __name__ == "__main__":
    main()
