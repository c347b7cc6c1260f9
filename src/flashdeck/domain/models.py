"""
Domain models for decks, cards and study statistics.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import DEFAULT_EASE_FACTOR, NEVER_REVIEWED


class Difficulty(str, Enum):
    """The three review buttons offered to the learner."""

    HARD = "hard"
    MEDIUM = "medium"
    EASY = "easy"


class CardStatus(str, Enum):
    """Learning stage derived from a card's repetition count."""

    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"


@dataclass(frozen=True)
class Card:
    """
    A single flashcard together with its SM-2 scheduling state.

    Attributes:
        id: Opaque identifier, assigned by the caller.
        front: Prompt side.
        back: Answer side.
        e_factor: Easiness factor (never below 1.3).
        interval: Days until the next review (0 until first scheduled).
        repetitions: Consecutive successful reviews since the last lapse.
        due_date: Epoch milliseconds at which the card becomes due.
        last_reviewed: Epoch milliseconds of the last review, 0 if never.
        image: Optional media reference.
        audio: Optional media reference.
    """

    id: str
    front: str
    back: str
    e_factor: float = DEFAULT_EASE_FACTOR
    interval: int = 0
    repetitions: int = 0
    due_date: int = 0
    last_reviewed: int = NEVER_REVIEWED
    image: str | None = None
    audio: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "front": self.front,
            "back": self.back,
            "eFactor": self.e_factor,
            "interval": self.interval,
            "repetitions": self.repetitions,
            "dueDate": self.due_date,
            "lastReviewed": self.last_reviewed,
        }
        if self.image is not None:
            data["image"] = self.image
        if self.audio is not None:
            data["audio"] = self.audio
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Card":
        return cls(
            id=str(data["id"]),
            front=data.get("front", ""),
            back=data.get("back", ""),
            e_factor=float(data.get("eFactor", DEFAULT_EASE_FACTOR)),
            interval=int(data.get("interval", 0)),
            repetitions=int(data.get("repetitions", 0)),
            due_date=int(data.get("dueDate", 0)),
            last_reviewed=int(data.get("lastReviewed", NEVER_REVIEWED)),
            image=data.get("image"),
            audio=data.get("audio"),
        )


@dataclass(frozen=True)
class StudyStats:
    """Aggregate view over a collection of cards at one instant."""

    due_count: int
    new_count: int
    learning_count: int
    mastered_count: int
    total_count: int
    next_7_days: list[int] = field(default_factory=list)


@dataclass
class Deck:
    """
    A named collection of cards as persisted by the deck store.

    Timestamps are epoch milliseconds.
    """

    id: str
    title: str
    description: str = ""
    source_lang: str = ""
    target_lang: str = ""
    cards: list[Card] = field(default_factory=list)
    created_at: int = 0
    last_studied: int | None = None
    tags: list[str] = field(default_factory=list)

    def find_card(self, card_id: str) -> Card | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "sourceLang": self.source_lang,
            "targetLang": self.target_lang,
            "cards": [c.to_dict() for c in self.cards],
            "createdAt": self.created_at,
        }
        if self.last_studied is not None:
            data["lastStudied"] = self.last_studied
        if self.tags:
            data["tags"] = list(self.tags)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Deck":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            description=data.get("description", ""),
            source_lang=data.get("sourceLang", ""),
            target_lang=data.get("targetLang", ""),
            cards=[Card.from_dict(c) for c in data.get("cards", [])],
            created_at=int(data.get("createdAt", 0)),
            last_studied=data.get("lastStudied"),
            tags=list(data.get("tags") or []),
        )
