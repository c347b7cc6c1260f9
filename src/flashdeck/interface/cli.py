"""flashdeck CLI: root commands and subgroup registration."""

import json
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

from flashdeck.application.config import AppConfig, resolve_config
from flashdeck.application.factory import get_study_service
from flashdeck.application.scheduler import card_status
from flashdeck.application.study_service import StudyService
from flashdeck.domain.exceptions import FlashdeckError
from flashdeck.domain.models import Card, Difficulty

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="flashdeck: spaced-repetition flashcards from the terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

deck_app = typer.Typer(help="Create, list and remove decks.", no_args_is_help=True)
app.add_typer(deck_app, name="deck")

card_app = typer.Typer(help="Add, edit and remove cards.", no_args_is_help=True)
app.add_typer(card_app, name="card")

config_app = typer.Typer(help="Manage flashdeck configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

LOG_FILE_NAME = "flashdeck.log"
_file_handler: logging.Handler | None = None


def _configure_logging(config: AppConfig, verbose: int) -> None:
    """
    Set the log level and attach the file log under ``config.log_dir``.

    ``-v`` flags win over ``config.verbose``: 0 is warnings only, 1 adds
    info, 2 or more adds debug.
    """
    global _file_handler

    level = verbose or config.verbose
    if level >= 2:
        logging.getLogger().setLevel(logging.DEBUG)
    elif level == 1:
        logging.getLogger().setLevel(logging.INFO)
    else:
        logging.getLogger().setLevel(logging.WARNING)

    pkg_logger = logging.getLogger("flashdeck")
    if _file_handler is not None:
        pkg_logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    try:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(config.log_dir / LOG_FILE_NAME, encoding="utf-8")
    except OSError as e:
        logger.warning(f"File logging disabled, cannot open {config.log_dir}: {e}")
        return

    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    pkg_logger.addHandler(handler)
    _file_handler = handler


_ANSWER_KEYS = {
    "h": Difficulty.HARD,
    "m": Difficulty.MEDIUM,
    "e": Difficulty.EASY,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config(ctx: typer.Context) -> AppConfig:
    return resolve_config({"data_file": (ctx.obj or {}).get("data_file")})


def _service(ctx: typer.Context) -> StudyService:
    return get_study_service(_config(ctx))


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Turn domain errors into a red message and exit code 1."""
    try:
        yield
    except FlashdeckError as e:
        logger.debug("Command failed", exc_info=True)
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1)


def _fmt_ts(ms: int | None) -> str:
    if not ms:
        return "never"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def _card_json(card: Card) -> dict:
    data = card.to_dict()
    data["status"] = card_status(card).value
    return data


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity. Repeat for more detail. Defaults to the config value.",
        ),
    ] = 0,
    data_file: Annotated[
        Path | None,
        typer.Option("--data-file", help="Deck store to use instead of the configured one."),
    ] = None,
):
    """Global settings for flashdeck."""
    ctx.ensure_object(dict)
    ctx.obj["data_file"] = data_file
    _configure_logging(_config(ctx), verbose)


# ---------------------------------------------------------------------------
# Deck subgroup
# ---------------------------------------------------------------------------


@deck_app.command("create")
def deck_create(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Deck title.")],
    description: Annotated[str, typer.Option(help="Short description.")] = "",
    source_lang: Annotated[str, typer.Option("--source", help="Language of the fronts.")] = "",
    target_lang: Annotated[str, typer.Option("--target", help="Language of the backs.")] = "",
    tag: Annotated[list[str] | None, typer.Option("--tag", help="Tag (repeatable).")] = None,
):
    """Create an empty deck and print its ID."""
    with _handle_errors():
        deck = _service(ctx).create_deck(
            title,
            description=description,
            source_lang=source_lang,
            target_lang=target_lang,
            tags=tag or [],
        )
    typer.secho(f"Created deck '{deck.title}'", fg="green")
    typer.echo(deck.id)


@deck_app.command("list")
def deck_list(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List decks with card and due counts."""
    with _handle_errors():
        rows = _service(ctx).decks_with_due_cards()

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": deck.id,
                        "title": deck.title,
                        "cards": len(deck.cards),
                        "due": due,
                        "lastStudied": deck.last_studied,
                    }
                    for deck, due in rows
                ],
                indent=2,
            )
        )
        return

    if not rows:
        typer.secho("No decks yet. Create one with 'flashdeck deck create'.", fg="yellow")
        return

    for deck, due in rows:
        typer.echo(
            f"{deck.id}  {deck.title}  cards={len(deck.cards)}  due={due}"
            f"  last studied: {_fmt_ts(deck.last_studied)}"
        )


@deck_app.command("show")
def deck_show(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck ID.")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show a deck and the scheduling state of each card."""
    with _handle_errors():
        deck = _service(ctx).get_deck(deck_id)

    if json_output:
        data = deck.to_dict()
        data["cards"] = [_card_json(c) for c in deck.cards]
        typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    langs = f" ({deck.source_lang} -> {deck.target_lang})" if deck.source_lang else ""
    typer.secho(f"{deck.title}{langs}", bold=True)
    if deck.description:
        typer.echo(deck.description)
    for card in deck.cards:
        typer.echo(
            f"  {card.id}  [{card_status(card).value}]  {card.front} -> {card.back}"
            f"  due {_fmt_ts(card.due_date)}  ease {card.e_factor:.2f}"
        )


@deck_app.command("delete")
def deck_delete(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck ID.")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation.")] = False,
):
    """Delete a deck and all of its cards."""
    if not force:
        typer.confirm(f"Delete deck {deck_id}?", abort=True)
    with _handle_errors():
        _service(ctx).delete_deck(deck_id)
    typer.secho(f"Deleted deck {deck_id}", fg="green")


# ---------------------------------------------------------------------------
# Card subgroup
# ---------------------------------------------------------------------------


@card_app.command("add")
def card_add(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck ID.")],
    front: Annotated[str, typer.Argument(help="Front (prompt) text.")],
    back: Annotated[str, typer.Argument(help="Back (answer) text.")],
    image: Annotated[str | None, typer.Option(help="Image reference.")] = None,
    audio: Annotated[str | None, typer.Option(help="Audio reference.")] = None,
):
    """Add a new card; it is due immediately."""
    with _handle_errors():
        card = _service(ctx).add_card(deck_id, front, back, image=image, audio=audio)
    typer.echo(card.id)


@card_app.command("edit")
def card_edit(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck ID.")],
    card_id: Annotated[str, typer.Argument(help="Card ID.")],
    front: Annotated[str | None, typer.Option(help="New front text.")] = None,
    back: Annotated[str | None, typer.Option(help="New back text.")] = None,
    image: Annotated[str | None, typer.Option(help="New image reference.")] = None,
    audio: Annotated[str | None, typer.Option(help="New audio reference.")] = None,
    no_image: Annotated[bool, typer.Option("--no-image", help="Remove the image.")] = False,
    no_audio: Annotated[bool, typer.Option("--no-audio", help="Remove the audio.")] = False,
):
    """Edit card content. Scheduling state is kept."""
    with _handle_errors():
        card = _service(ctx).edit_card(
            deck_id,
            card_id,
            front=front,
            back=back,
            image=image,
            audio=audio,
            clear_image=no_image,
            clear_audio=no_audio,
        )
    typer.secho(f"Updated {card.id}: {card.front} -> {card.back}", fg="green")


@card_app.command("delete")
def card_delete(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck ID.")],
    card_id: Annotated[str, typer.Argument(help="Card ID.")],
):
    """Remove a card from a deck."""
    with _handle_errors():
        _service(ctx).delete_card(deck_id, card_id)
    typer.secho(f"Deleted card {card_id}", fg="green")


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="YAML file with cards.", exists=True)],
    deck_id: Annotated[
        str | None,
        typer.Option("--deck", help="Append to this deck instead of creating a new one."),
    ] = None,
):
    """Import cards from a YAML file."""
    from flashdeck.application.deck_import import import_cards

    with _handle_errors():
        deck, added = import_cards(_service(ctx), path, deck_id=deck_id)
    typer.secho(f"Imported {len(added)} card(s) into '{deck.title}' ({deck.id})", fg="green")


@app.command()
def due(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck ID.")],
    limit: Annotated[
        int | None, typer.Option(min=1, help="Show at most this many cards.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List the cards due for review now."""
    config = _config(ctx)
    with _handle_errors():
        limit = limit if limit is not None else config.due_limit
        cards = get_study_service(config).due_cards(deck_id, limit=limit)

    if json_output:
        typer.echo(json.dumps([_card_json(c) for c in cards], indent=2, ensure_ascii=False))
        return

    if not cards:
        typer.secho("No cards due for review.", fg="green")
        return
    for card in cards:
        typer.echo(f"{card.id}  {card.front}")


@app.command()
def review(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck ID.")],
    card_id: Annotated[str, typer.Argument(help="Card ID.")],
    difficulty: Annotated[Difficulty, typer.Argument(help="How hard recall was.")],
):
    """Record one review outcome for a card."""
    with _handle_errors():
        card = _service(ctx).review(deck_id, card_id, difficulty)
    typer.echo(
        f"Next review in {card.interval} day(s) ({_fmt_ts(card.due_date)}), "
        f"ease {card.e_factor:.2f}"
    )


@app.command()
def study(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck ID.")],
    limit: Annotated[
        int | None, typer.Option(min=1, help="Stop after this many cards.")
    ] = None,
):
    """Run an interactive study session over the due cards."""
    config = _config(ctx)
    service = get_study_service(config)

    with _handle_errors():
        deck = service.get_deck(deck_id)
        limit = limit if limit is not None else config.due_limit
        cards = service.due_cards(deck_id, limit=limit)

    if not cards:
        typer.secho("No cards due for review.", fg="green")
        return

    typer.secho(f"Studying '{deck.title}': {len(cards)} card(s) due", bold=True)
    tally = {d: 0 for d in Difficulty}

    for i, card in enumerate(cards, start=1):
        typer.echo(f"\n[{i}/{len(cards)}] {card.front}")
        typer.prompt("Press Enter to reveal", default="", show_default=False)
        typer.echo(f"  {card.back}")

        answer = None
        while answer is None:
            raw = typer.prompt("(h)ard / (m)edium / (e)asy / (q)uit").strip().lower()
            if raw in ("q", "quit"):
                break
            answer = _ANSWER_KEYS.get(raw[:1]) if raw else None
        if answer is None:
            break

        with _handle_errors():
            updated = service.review(deck_id, card.id, answer)
        tally[answer] += 1
        typer.echo(f"  next review in {updated.interval} day(s)")

    reviewed = sum(tally.values())
    typer.secho(
        f"\nReviewed {reviewed} card(s): "
        + ", ".join(f"{d.value}={n}" for d, n in tally.items()),
        fg="green",
    )


@app.command()
def stats(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck ID.")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show due, new, learning and mastered counts plus a 7-day forecast."""
    with _handle_errors():
        result = _service(ctx).stats(deck_id)

    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
        return

    typer.echo(f"Total: {result.total_count}  Due now: {result.due_count}")
    typer.echo(
        f"New: {result.new_count}  Learning: {result.learning_count}"
        f"  Mastered: {result.mastered_count}"
    )
    typer.echo("Due within:")
    for day, count in enumerate(result.next_7_days, start=1):
        typer.echo(f"  {day} day(s): {count}")


@app.command()
def logs(
    ctx: typer.Context,
    open_dir: Annotated[
        bool, typer.Option("--open", help="Open the directory in the file browser.")
    ] = False,
):
    """Print (or open) the log directory."""
    config = _config(ctx)
    config.log_dir.mkdir(parents=True, exist_ok=True)
    typer.echo(str(config.log_dir / LOG_FILE_NAME))
    if open_dir:
        typer.launch(str(config.log_dir))


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Start the HTTP API."""
    import uvicorn

    config = _config(ctx)
    # The server process resolves its own config; hand the deck store over.
    os.environ["FLASHDECK_DATA_FILE"] = str(config.data_file)
    uvicorn.run(
        "flashdeck.server:app",
        host=host or config.server_host,
        port=port or config.server_port,
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
    typer.echo(json.dumps(d, indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
