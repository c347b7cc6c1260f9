"""
Bulk card import from YAML files.

Accepted layouts:

    # plain list
    - front: Hello
      back: Hola

    # mapping with deck metadata
    title: Spanish basics
    source_lang: en
    target_lang: es
    cards:
      - {front: Hello, back: Hola}
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
import yaml.error

from flashdeck.application.study_service import StudyService
from flashdeck.domain.exceptions import ImportFormatError
from flashdeck.domain.models import Card, Deck

logger = logging.getLogger(__name__)


@dataclass
class CardSpec:
    front: str
    back: str
    image: str | None = None
    audio: str | None = None


@dataclass
class ImportFile:
    """Parsed contents of an import file."""

    cards: list[CardSpec]
    title: str | None = None
    description: str = ""
    source_lang: str = ""
    target_lang: str = ""
    tags: list[str] = field(default_factory=list)


def parse_import_text(text: str) -> ImportFile:
    try:
        data = yaml.safe_load(text)
    except yaml.error.YAMLError as e:
        raise ImportFormatError(f"Invalid YAML: {e}") from e

    if data is None:
        return ImportFile(cards=[])

    meta: dict[str, Any] = {}
    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict):
        entries = data.get("cards") or []
        meta = data
        if not isinstance(entries, list):
            raise ImportFormatError("'cards' must be a list")
    else:
        raise ImportFormatError("Import file must be a list of cards or a mapping with 'cards'")

    cards = [_parse_entry(entry, i) for i, entry in enumerate(entries)]

    tags = meta.get("tags") or []
    if isinstance(tags, str):
        tags = [tags]

    return ImportFile(
        cards=cards,
        title=_opt_str(meta.get("title")),
        description=str(meta.get("description") or ""),
        source_lang=str(meta.get("source_lang") or ""),
        target_lang=str(meta.get("target_lang") or ""),
        tags=[str(t) for t in tags],
    )


def load_import_file(path: Path) -> ImportFile:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ImportFormatError(f"Cannot read {path}: {e}") from e
    return parse_import_text(text)


def import_cards(
    service: StudyService,
    path: Path,
    deck_id: str | None = None,
) -> tuple[Deck, list[Card]]:
    """
    Import a YAML file into an existing deck, or into a new deck built from
    the file's metadata when ``deck_id`` is not given.
    """
    parsed = load_import_file(path)

    if deck_id is None:
        title = parsed.title or Path(path).stem
        deck = service.create_deck(
            title,
            description=parsed.description,
            source_lang=parsed.source_lang,
            target_lang=parsed.target_lang,
            tags=parsed.tags,
        )
        deck_id = deck.id
    else:
        service.get_deck(deck_id)

    added = service.add_cards(
        deck_id, [(c.front, c.back, c.image, c.audio) for c in parsed.cards]
    )
    logger.info(f"Imported {len(added)} card(s) from {path} into {deck_id}")
    return service.get_deck(deck_id), added


def _parse_entry(entry: Any, index: int) -> CardSpec:
    if not isinstance(entry, dict):
        raise ImportFormatError(f"Card {index + 1}: expected a mapping, got {type(entry).__name__}")

    front = _opt_str(entry.get("front"))
    back = _opt_str(entry.get("back"))
    if not front or not back:
        raise ImportFormatError(f"Card {index + 1}: 'front' and 'back' are required")

    return CardSpec(
        front=front,
        back=back,
        image=_opt_str(entry.get("image")),
        audio=_opt_str(entry.get("audio")),
    )


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
