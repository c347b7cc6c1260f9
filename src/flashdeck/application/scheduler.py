"""
SM-2 scheduler.

Pure functions over Card values: card creation, review processing, due
filtering and study statistics. No I/O and no module-level state; the only
external input is the wall clock, which every function lets the caller pin
via the ``now`` keyword (epoch milliseconds).
"""

import logging
import math
import time
from collections.abc import Iterable
from dataclasses import replace

from flashdeck.domain.constants import (
    DEFAULT_EASE_FACTOR,
    FIRST_INTERVAL_DAYS,
    FORECAST_DAYS,
    LAPSE_INTERVAL_DAYS,
    MASTERED_REPETITIONS,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    MS_PER_DAY,
    NEVER_REVIEWED,
    PASSING_QUALITY,
    QUALITY_EASY,
    QUALITY_HARD,
    QUALITY_MEDIUM,
    SECOND_INTERVAL_DAYS,
)
from flashdeck.domain.models import Card, CardStatus, Difficulty, StudyStats

logger = logging.getLogger(__name__)

_QUALITY_BY_DIFFICULTY = {
    Difficulty.HARD: QUALITY_HARD,
    Difficulty.MEDIUM: QUALITY_MEDIUM,
    Difficulty.EASY: QUALITY_EASY,
}


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _round_half_up(value: float) -> int:
    # Halves go up (2.5 -> 3), unlike Python's round().
    return int(math.floor(value + 0.5))


def difficulty_to_quality(difficulty: Difficulty | str | None) -> int:
    """
    Map a review button to an SM-2 quality.

    hard -> 2, medium -> 3, easy -> 5. Values must match exactly; anything
    else ("EASY", " easy", None) is treated as medium so that review
    processing never fails.
    """
    try:
        return _QUALITY_BY_DIFFICULTY[Difficulty(difficulty)]
    except ValueError:
        logger.warning(f"Unknown difficulty {difficulty!r}; treating as medium")
        return QUALITY_MEDIUM


def next_ease_factor(e_factor: float, quality: int) -> float:
    """Standard SM-2 ease update, floored at 1.3."""
    miss = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, e_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def create_card(
    id: str,
    front: str,
    back: str,
    image: str | None = None,
    audio: str | None = None,
    *,
    now: int | None = None,
) -> Card:
    """Build a never-reviewed card that is due immediately."""
    return Card(
        id=id,
        front=front,
        back=back,
        e_factor=DEFAULT_EASE_FACTOR,
        interval=0,
        repetitions=0,
        due_date=now_ms() if now is None else now,
        last_reviewed=NEVER_REVIEWED,
        image=image,
        audio=audio,
    )


def process_review(
    card: Card,
    difficulty: Difficulty | str,
    *,
    now: int | None = None,
) -> Card:
    """
    Apply one review outcome and return the rescheduled card.

    A "hard" answer is a lapse: repetitions step back by one (never below
    zero) and the card comes back tomorrow. Otherwise repetitions grow and
    the interval follows 1, 3, then interval * new ease factor.

    The input card is left untouched.
    """
    if now is None:
        now = now_ms()

    quality = difficulty_to_quality(difficulty)
    e_factor = next_ease_factor(card.e_factor, quality)

    if quality < PASSING_QUALITY:
        repetitions = max(0, card.repetitions - 1)
        interval = LAPSE_INTERVAL_DAYS
    else:
        repetitions = card.repetitions + 1
        if repetitions == 1:
            interval = FIRST_INTERVAL_DAYS
        elif repetitions == 2:
            interval = SECOND_INTERVAL_DAYS
        else:
            interval = _round_half_up(card.interval * e_factor)

    logger.debug(
        f"Reviewed {card.id} as {difficulty}: q={quality} ef={e_factor:.2f} "
        f"reps={repetitions} interval={interval}d"
    )

    return replace(
        card,
        e_factor=e_factor,
        repetitions=repetitions,
        interval=interval,
        last_reviewed=now,
        due_date=now + interval * MS_PER_DAY,
    )


def is_due(card: Card, now: int) -> bool:
    return card.due_date <= now


def get_due_cards(cards: Iterable[Card], *, now: int | None = None) -> list[Card]:
    """Cards due at ``now``, in input order."""
    if now is None:
        now = now_ms()
    return [card for card in cards if is_due(card, now)]


def card_status(card: Card) -> CardStatus:
    if card.repetitions == 0:
        return CardStatus.NEW
    if card.repetitions < MASTERED_REPETITIONS:
        return CardStatus.LEARNING
    return CardStatus.MASTERED


def get_study_stats(cards: Iterable[Card], *, now: int | None = None) -> StudyStats:
    """
    Summarise a card collection at a single instant.

    ``next_7_days[i]`` counts cards due after ``now`` and no later than
    ``i + 1`` days out. Buckets are cumulative: a card due in two days is
    counted in buckets 1 through 6.
    """
    if now is None:
        now = now_ms()
    cards = list(cards)

    statuses = [card_status(c) for c in cards]
    next_7_days = [
        sum(1 for c in cards if now < c.due_date <= now + (i + 1) * MS_PER_DAY)
        for i in range(FORECAST_DAYS)
    ]

    return StudyStats(
        due_count=sum(1 for c in cards if is_due(c, now)),
        new_count=statuses.count(CardStatus.NEW),
        learning_count=statuses.count(CardStatus.LEARNING),
        mastered_count=statuses.count(CardStatus.MASTERED),
        total_count=len(cards),
        next_7_days=next_7_days,
    )
