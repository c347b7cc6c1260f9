"""
Ports (interfaces) for deck persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import Deck


class DeckRepository(ABC):
    """
    Port for the key-value deck store, keyed by deck id.

    Implementations:
        - JsonDeckRepository: Keeps every deck in a single JSON file.
    """

    @abstractmethod
    def load_decks(self) -> list[Deck]:
        """Return every stored deck, in stored order."""
        pass

    @abstractmethod
    def save_decks(self, decks: list[Deck]) -> None:
        """Replace the stored collection with ``decks``."""
        pass

    def load_deck(self, deck_id: str) -> Deck | None:
        for deck in self.load_decks():
            if deck.id == deck_id:
                return deck
        return None

    def save_deck(self, deck: Deck) -> None:
        """
        Insert or update a single deck.

        An existing deck keeps its position; a new one is appended.
        """
        decks = self.load_decks()
        for i, existing in enumerate(decks):
            if existing.id == deck.id:
                decks[i] = deck
                break
        else:
            decks.append(deck)
        self.save_decks(decks)

    def delete_deck(self, deck_id: str) -> bool:
        decks = self.load_decks()
        remaining = [d for d in decks if d.id != deck_id]
        if len(remaining) == len(decks):
            return False
        self.save_decks(remaining)
        return True
