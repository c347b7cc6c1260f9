"""
Study Service: Application layer orchestrator.

Plays the study-session controller: loads decks from the repository, asks the
scheduler which cards are due, applies review outcomes and persists the
updated cards. The scheduler never touches storage; this service does.
"""

import logging
from collections.abc import Callable
from dataclasses import replace

from flashdeck.application import scheduler
from flashdeck.application.id_service import generate_card_id, generate_deck_id
from flashdeck.domain.exceptions import (
    CardNotFoundError,
    DeckNotFoundError,
    InvalidCardError,
    InvalidDeckError,
)
from flashdeck.domain.models import Card, Deck, Difficulty, StudyStats
from flashdeck.domain.ports import DeckRepository

logger = logging.getLogger(__name__)


class StudyService:
    """
    Application service for authoring decks and running study sessions.

    Follows Dependency Inversion: depends on the DeckRepository abstraction,
    not a concrete storage adapter.
    """

    def __init__(
        self,
        repo: DeckRepository,
        clock: Callable[[], int] | None = None,
    ):
        """
        Args:
            repo: The repository (port) holding decks.
            clock: Optional epoch-millisecond clock; wall clock if not provided.
        """
        self._repo = repo
        self._clock = clock or scheduler.now_ms

    # --- decks ---

    def create_deck(
        self,
        title: str,
        description: str = "",
        source_lang: str = "",
        target_lang: str = "",
        tags: list[str] | None = None,
    ) -> Deck:
        if not title.strip():
            raise InvalidDeckError("Deck title must not be empty")

        deck = Deck(
            id=generate_deck_id(),
            title=title.strip(),
            description=description,
            source_lang=source_lang,
            target_lang=target_lang,
            created_at=self._clock(),
            tags=list(tags or []),
        )
        self._repo.save_deck(deck)
        logger.info(f"Created deck {deck.id} ({deck.title!r})")
        return deck

    def list_decks(self) -> list[Deck]:
        return self._repo.load_decks()

    def get_deck(self, deck_id: str) -> Deck:
        deck = self._repo.load_deck(deck_id)
        if deck is None:
            raise DeckNotFoundError(deck_id)
        return deck

    def delete_deck(self, deck_id: str) -> None:
        if not self._repo.delete_deck(deck_id):
            raise DeckNotFoundError(deck_id)
        logger.info(f"Deleted deck {deck_id}")

    # --- cards ---

    def add_card(
        self,
        deck_id: str,
        front: str,
        back: str,
        image: str | None = None,
        audio: str | None = None,
    ) -> Card:
        return self.add_cards(deck_id, [(front, back, image, audio)])[0]

    def add_cards(
        self,
        deck_id: str,
        entries: list[tuple[str, str, str | None, str | None]],
    ) -> list[Card]:
        """
        Append several new cards to a deck in one write.

        Each entry is ``(front, back, image, audio)``. Nothing is saved if any
        entry is rejected.
        """
        deck = self.get_deck(deck_id)
        now = self._clock()

        created: list[Card] = []
        for index, (front, back, image, audio) in enumerate(entries):
            _check_content(front, back, index)
            created.append(
                scheduler.create_card(generate_card_id(), front, back, image, audio, now=now)
            )

        deck.cards.extend(created)
        self._repo.save_deck(deck)
        logger.info(f"Added {len(created)} card(s) to deck {deck_id}")
        return created

    def edit_card(
        self,
        deck_id: str,
        card_id: str,
        front: str | None = None,
        back: str | None = None,
        image: str | None = None,
        audio: str | None = None,
        clear_image: bool = False,
        clear_audio: bool = False,
    ) -> Card:
        """
        Change a card's content while keeping its scheduling state.

        ``None`` leaves a field as it is. ``clear_image`` / ``clear_audio``
        drop the media reference instead.
        """
        if (clear_image and image is not None) or (clear_audio and audio is not None):
            raise InvalidCardError("Cannot set and clear the same media field")

        deck = self.get_deck(deck_id)
        card = self._require_card(deck, card_id)

        changes: dict[str, str | None] = {
            k: v
            for k, v in {"front": front, "back": back, "image": image, "audio": audio}.items()
            if v is not None
        }
        if clear_image:
            changes["image"] = None
        if clear_audio:
            changes["audio"] = None
        updated = replace(card, **changes)
        _check_content(updated.front, updated.back)

        self._replace_card(deck, updated)
        self._repo.save_deck(deck)
        return updated

    def delete_card(self, deck_id: str, card_id: str) -> None:
        deck = self.get_deck(deck_id)
        self._require_card(deck, card_id)
        deck.cards = [c for c in deck.cards if c.id != card_id]
        self._repo.save_deck(deck)
        logger.info(f"Deleted card {card_id} from deck {deck_id}")

    # --- studying ---

    def due_cards(self, deck_id: str, limit: int | None = None) -> list[Card]:
        if limit is not None and limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        deck = self.get_deck(deck_id)
        due = scheduler.get_due_cards(deck.cards, now=self._clock())
        if limit is not None:
            due = due[:limit]
        return due

    def review(self, deck_id: str, card_id: str, difficulty: Difficulty | str) -> Card:
        """
        Record one review outcome and persist the rescheduled card.

        The card keeps its position in the deck and the deck's last-studied
        stamp moves to the review time.
        """
        deck = self.get_deck(deck_id)
        card = self._require_card(deck, card_id)
        now = self._clock()

        updated = scheduler.process_review(card, difficulty, now=now)
        self._replace_card(deck, updated)
        deck.last_studied = now
        self._repo.save_deck(deck)

        logger.info(
            f"Reviewed {card_id} in {deck_id}: next in {updated.interval} day(s), "
            f"ease {updated.e_factor:.2f}"
        )
        return updated

    def stats(self, deck_id: str) -> StudyStats:
        deck = self.get_deck(deck_id)
        return scheduler.get_study_stats(deck.cards, now=self._clock())

    def decks_with_due_cards(self) -> list[tuple[Deck, int]]:
        """Every deck paired with how many of its cards are due right now."""
        now = self._clock()
        return [
            (deck, len(scheduler.get_due_cards(deck.cards, now=now)))
            for deck in self._repo.load_decks()
        ]

    # --- helpers ---

    @staticmethod
    def _require_card(deck: Deck, card_id: str) -> Card:
        card = deck.find_card(card_id)
        if card is None:
            raise CardNotFoundError(deck.id, card_id)
        return card

    @staticmethod
    def _replace_card(deck: Deck, updated: Card) -> None:
        deck.cards = [updated if c.id == updated.id else c for c in deck.cards]


def _check_content(front: str, back: str, index: int | None = None) -> None:
    where = f"Card {index + 1}" if index is not None else "Card"
    if not front or not front.strip():
        raise InvalidCardError(f"{where} has an empty front")
    if not back or not back.strip():
        raise InvalidCardError(f"{where} has an empty back")
