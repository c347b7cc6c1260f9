"""Identifier generation for decks and cards."""

from ulid import ULID


def generate_deck_id() -> str:
    """Generate a sortable, unique deck ID using ULID."""
    return f"deck_{ULID()}"


def generate_card_id() -> str:
    """Generate a sortable, unique card ID using ULID."""
    return f"card_{ULID()}"
