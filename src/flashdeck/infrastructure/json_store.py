"""
JSON Deck Repository: Infrastructure adapter for a single-file deck store.

Implements DeckRepository by keeping every deck in one JSON array on disk.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from flashdeck.domain.exceptions import StorageError
from flashdeck.domain.models import Deck
from flashdeck.domain.ports import DeckRepository

logger = logging.getLogger(__name__)


class JsonDeckRepository(DeckRepository):
    """
    Stores decks as a JSON list in ``path``.

    A missing file reads as an empty collection. Writes replace the file
    atomically so a crash never leaves a half-written store behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load_decks(self) -> list[Deck]:
        if not self.path.exists():
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading decks from {self.path}: {e}")
            raise StorageError(f"Could not read deck store {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise StorageError(f"Deck store {self.path} must contain a JSON list")

        try:
            return [Deck.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed deck record in {self.path}: {e}") from e

    def save_decks(self, decks: list[Deck]) -> None:
        payload = json.dumps([d.to_dict() for d in decks], ensure_ascii=False, indent=2)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                Path(tmp_name).replace(self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Error saving decks to {self.path}: {e}")
            raise StorageError(f"Could not write deck store {self.path}: {e}") from e

        logger.debug(f"Saved {len(decks)} deck(s) to {self.path}")
