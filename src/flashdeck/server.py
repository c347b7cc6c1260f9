"""
flashdeck HTTP API.

A thin FastAPI layer over StudyService: deck listing, due cards, stats and
review submission. Started by `flashdeck serve`.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel

from flashdeck.application.config import resolve_config
from flashdeck.application.factory import get_study_service
from flashdeck.application.scheduler import card_status
from flashdeck.application.study_service import StudyService
from flashdeck.consts import VERSION
from flashdeck.domain.exceptions import (
    CardNotFoundError,
    DeckNotFoundError,
    FlashdeckError,
    InvalidCardError,
    InvalidDeckError,
)
from flashdeck.domain.models import Card, Difficulty

logger = logging.getLogger("flashdeck.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logging.basicConfig(level=logging.INFO)
    logger.info(f"flashdeck server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("flashdeck server shutting down...")


app = FastAPI(
    title="flashdeck",
    description="Study-session API over the flashdeck scheduler.",
    version=VERSION,
    lifespan=lifespan,
)


def get_service() -> StudyService:
    return get_study_service(resolve_config())


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class CardResponse(BaseModel):
    id: str
    front: str
    back: str
    e_factor: float
    interval: int
    repetitions: int
    due_date: int
    last_reviewed: int
    status: str
    image: str | None = None
    audio: str | None = None

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            front=card.front,
            back=card.back,
            e_factor=card.e_factor,
            interval=card.interval,
            repetitions=card.repetitions,
            due_date=card.due_date,
            last_reviewed=card.last_reviewed,
            status=card_status(card).value,
            image=card.image,
            audio=card.audio,
        )


class DeckSummary(BaseModel):
    id: str
    title: str
    card_count: int
    due_count: int
    last_studied: int | None = None


class StatsResponse(BaseModel):
    due_count: int
    new_count: int
    learning_count: int
    mastered_count: int
    total_count: int
    next_7_days: list[int]


class ReviewRequest(BaseModel):
    difficulty: Difficulty


start_time = time.time()


def _http_error(e: FlashdeckError) -> HTTPException:
    if isinstance(e, (DeckNotFoundError, CardNotFoundError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (InvalidCardError, InvalidDeckError)):
        return HTTPException(status_code=422, detail=str(e))
    logger.error(f"Request failed: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=str(e))


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/decks", response_model=list[DeckSummary])
def list_decks(service: StudyService = Depends(get_service)):
    try:
        rows = service.decks_with_due_cards()
    except FlashdeckError as e:
        raise _http_error(e) from e
    return [
        DeckSummary(
            id=deck.id,
            title=deck.title,
            card_count=len(deck.cards),
            due_count=due,
            last_studied=deck.last_studied,
        )
        for deck, due in rows
    ]


@app.get("/decks/{deck_id}/due", response_model=list[CardResponse])
def due_cards(
    deck_id: str,
    limit: int | None = Query(None, ge=1),
    service: StudyService = Depends(get_service),
):
    try:
        cards = service.due_cards(deck_id, limit=limit)
    except FlashdeckError as e:
        raise _http_error(e) from e
    return [CardResponse.from_card(c) for c in cards]


@app.get("/decks/{deck_id}/stats", response_model=StatsResponse)
def deck_stats(deck_id: str, service: StudyService = Depends(get_service)):
    try:
        result = service.stats(deck_id)
    except FlashdeckError as e:
        raise _http_error(e) from e
    return StatsResponse(
        due_count=result.due_count,
        new_count=result.new_count,
        learning_count=result.learning_count,
        mastered_count=result.mastered_count,
        total_count=result.total_count,
        next_7_days=result.next_7_days,
    )


@app.post("/decks/{deck_id}/cards/{card_id}/review", response_model=CardResponse)
def review_card(
    deck_id: str,
    card_id: str,
    req: ReviewRequest,
    service: StudyService = Depends(get_service),
):
    """
    Record a review outcome and return the rescheduled card.
    """
    logger.info(f"Review requested via API: {deck_id}/{card_id} {req.difficulty.value}")
    try:
        card = service.review(deck_id, card_id, req.difficulty)
    except FlashdeckError as e:
        raise _http_error(e) from e
    return CardResponse.from_card(card)
