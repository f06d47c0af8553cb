"""Cadence CLI: review sessions, card management and configuration."""

import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

from cadence.application.config import AppConfig, resolve_config
from cadence.domain.errors import (
    CadenceError,
    EmptyDueSetError,
    InvalidRatingError,
)
from cadence.domain.models import CatalogItem, Rating

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="cadence: spaced-repetition review from the terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage cadence configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

RATING_LABELS = {
    Rating.FAIL: "Fail",
    Rating.HARD: "Hard",
    Rating.GOOD: "Good",
    Rating.EASY: "Easy",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config(ctx: typer.Context) -> AppConfig:
    return resolve_config(ctx.obj.get("overrides") if ctx.obj else None)


def format_due(due_at: int | None) -> str:
    if due_at is None:
        return "new"
    return datetime.fromtimestamp(due_at / 1000).strftime("%Y-%m-%d %H:%M")


def humanize_error(error: Exception) -> str:
    """Turn a CadenceError into a one-line message for the terminal."""
    if isinstance(error, EmptyDueSetError):
        return "Nothing to review right now."
    if isinstance(error, CadenceError):
        return str(error)
    return f"Unexpected error: {error}"


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding records and the card catalog.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for cadence."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"data_dir": data_dir, "verbose": verbose or None}
    if verbose:
        logging.getLogger("cadence").setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def due(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show how many cards are due for review."""
    from cadence.application.factory import get_session_controller

    try:
        summary = get_session_controller(_config(ctx)).due_summary()
    except CadenceError as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(1) from e

    if json_output:
        typer.echo(json.dumps(asdict(summary), indent=2))
        return

    typer.echo(f"Cards: {summary.total}  Due: {summary.due}  New: {summary.new}")
    if summary.due == 0 and summary.next_due_at is not None:
        typer.echo(f"Next review: {format_due(summary.next_due_at)}")


@app.command()
def review(ctx: typer.Context):
    """[bold green]Review[/bold green] every due card, one at a time.

    After each answer is revealed, rate your recall:
    1 = Fail, 2 = Hard, 3 = Good, 4 = Easy. Enter q to stop early; the
    current card is then left unrated.
    """
    from cadence.application.factory import get_catalog, get_session_controller

    config = _config(ctx)
    controller = get_session_controller(config)
    catalog = get_catalog(config)

    try:
        queue = controller.start_session()
    except EmptyDueSetError:
        typer.secho(humanize_error(EmptyDueSetError()), fg="green")
        return
    except CadenceError as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(1) from e

    typer.echo(f"{len(queue)} card(s) due.\n")
    choices = "  ".join(f"{int(r)}={label}" for r, label in RATING_LABELS.items())

    while True:
        progress = controller.progress()
        item = catalog.get(controller.current_item())

        typer.secho(f"Card {progress.position} / {progress.total}", bold=True)
        typer.echo(item.question if item else controller.current_item())
        typer.prompt("Press Enter to show the answer", default="", show_default=False)
        typer.echo(item.answer if item else "(no answer on file)")

        while True:
            raw = typer.prompt(f"Rate ({choices}, q=quit)").strip().lower()
            if raw == "q":
                controller.abort()
                typer.secho("Session stopped.", fg="yellow")
                return
            try:
                result = controller.rate(int(raw) if raw.isascii() and raw.isdigit() else raw)
                break
            except InvalidRatingError:
                typer.secho("Please enter 1, 2, 3 or 4.", fg="yellow")
            except CadenceError as e:
                typer.secho(humanize_error(e), fg="red", err=True)
                raise typer.Exit(1) from e

        typer.echo(f"Next review in {result.record.interval} day(s).\n")
        if not result.advanced:
            break

    typer.secho("Session complete.", fg="green")


@app.command()
def add(
    ctx: typer.Context,
    question: Annotated[str, typer.Argument(help="Front of the card.")],
    answer: Annotated[str, typer.Argument(help="Back of the card.")],
    topic: Annotated[str | None, typer.Option(help="Optional topic label.")] = None,
):
    """Add a single card to the catalog."""
    from cadence.application.factory import get_catalog

    catalog = get_catalog(_config(ctx))
    try:
        item = CatalogItem(id="", question=question, answer=answer, topic=topic)
        added = catalog.add_items([item])
    except CadenceError as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(1) from e

    if added:
        typer.secho(f"Added {added[0].id}", fg="green")
    else:
        typer.secho("A card with this question already exists.", fg="yellow")


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="YAML file with a list of cards.")],
):
    """Import cards from a YAML file, skipping questions already in the catalog."""
    from cadence.application.factory import get_catalog
    from cadence.infrastructure.adapters.yaml_catalog import load_items_file

    catalog = get_catalog(_config(ctx))
    try:
        items = load_items_file(path)
        added = catalog.add_items(items)
    except CadenceError as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(1) from e

    skipped = len(items) - len(added)
    typer.secho(f"Imported {len(added)} card(s), skipped {skipped} duplicate(s).", fg="green")


@app.command()
def cards(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List cards in the catalog with their schedule."""
    from cadence.application.factory import get_catalog, get_record_store

    config = _config(ctx)
    try:
        items = get_catalog(config).items()
        records = get_record_store(config).load_all_records()
    except CadenceError as e:
        typer.secho(humanize_error(e), fg="red", err=True)
        raise typer.Exit(1) from e

    rows = []
    for item in items:
        record = records.get(item.id)
        rows.append(
            {
                "id": item.id,
                "question": item.question,
                "topic": item.topic,
                "interval": record.interval if record else 0,
                "repetitions": record.repetitions if record else 0,
                "ease_factor": round(record.ease_factor, 2) if record else None,
                "due_at": record.due_at if record else None,
            }
        )

    if json_output:
        typer.echo(json.dumps(rows, indent=2))
        return

    if not rows:
        typer.secho("No cards yet. Use 'cadence add' or 'cadence import'.", fg="yellow")
        return
    for row in rows:
        typer.echo(f"{format_due(row['due_at']):<16}  {row['question'][:70]}")


@app.command()
def serve(
    ctx: typer.Context,
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP review server."""
    import uvicorn

    config = _config(ctx)
    uvicorn.run(
        "cadence.server:app",
        host=host or config.host,
        port=port or config.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _config(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    d["records_path"] = str(config.records_path)
    d["catalog_path"] = str(config.catalog_path)
    typer.echo(json.dumps(d, indent=2))
