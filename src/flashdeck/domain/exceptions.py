"""Errors raised outside the scheduler. The scheduler itself never raises."""


class FlashdeckError(Exception):
    """Base class for all flashdeck errors."""


class DeckNotFoundError(FlashdeckError):
    def __init__(self, deck_id: str):
        super().__init__(f"Deck not found: {deck_id}")
        self.deck_id = deck_id


class CardNotFoundError(FlashdeckError):
    def __init__(self, deck_id: str, card_id: str):
        super().__init__(f"Card {card_id} not found in deck {deck_id}")
        self.deck_id = deck_id
        self.card_id = card_id


class InvalidCardError(FlashdeckError):
    """Card content rejected at authoring time (e.g. blank front or back)."""


class StorageError(FlashdeckError):
    """The deck store could not be read or written."""


class ImportFormatError(FlashdeckError):
    """An import file is not valid YAML or has malformed card entries."""


class InvalidDeckError(FlashdeckError):
    """Deck metadata rejected at authoring time (e.g. blank title)."""
