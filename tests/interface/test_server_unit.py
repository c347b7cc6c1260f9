import logging
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from flashdeck.consts import VERSION
from flashdeck.server import app, get_service


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def deck(service):
    deck = service.create_deck("Spanish")
    service.add_card(deck.id, "Hello", "Hola")
    return service.get_deck(deck.id)


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_get_version(client):
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


def test_list_decks(client, deck):
    response = client.get("/decks")
    assert response.status_code == 200
    assert response.json() == [
        {"id": deck.id, "title": "Spanish", "card_count": 1, "due_count": 1, "last_studied": None}
    ]


def test_due_cards(client, deck):
    response = client.get(f"/decks/{deck.id}/due")
    assert response.status_code == 200
    cards = response.json()
    assert len(cards) == 1
    assert cards[0]["front"] == "Hello"
    assert cards[0]["status"] == "new"


def test_review_then_stats(client, deck, clock):
    card_id = deck.cards[0].id

    response = client.post(f"/decks/{deck.id}/cards/{card_id}/review", json={"difficulty": "easy"})

    assert response.status_code == 200
    card = response.json()
    assert card["repetitions"] == 1
    assert card["interval"] == 1
    assert card["last_reviewed"] == clock.now
    assert card["status"] == "learning"

    stats = client.get(f"/decks/{deck.id}/stats").json()
    assert stats["due_count"] == 0
    assert stats["total_count"] == 1
    assert stats["next_7_days"] == [1, 1, 1, 1, 1, 1, 1]


def test_review_invalid_difficulty(client, deck):
    card_id = deck.cards[0].id
    response = client.post(f"/decks/{deck.id}/cards/{card_id}/review", json={"difficulty": "meh"})
    assert response.status_code == 422


def test_missing_deck_is_404(client):
    assert client.get("/decks/nope/stats").status_code == 404
    assert client.get("/decks/nope/due").status_code == 404


def test_missing_card_is_404(client, deck):
    response = client.post(f"/decks/{deck.id}/cards/nope/review", json={"difficulty": "hard"})
    assert response.status_code == 404
    assert "nope" in response.json()["detail"]


def test_due_cards_limit(client, service, deck):
    service.add_card(deck.id, "Bye", "Adiós")

    response = client.get(f"/decks/{deck.id}/due", params={"limit": 1})
    assert response.status_code == 200
    assert [c["front"] for c in response.json()] == ["Hello"]

    assert client.get(f"/decks/{deck.id}/due", params={"limit": 0}).status_code == 422
    assert client.get(f"/decks/{deck.id}/due", params={"limit": -1}).status_code == 422


def test_logging_is_configured_at_startup_not_import(service):
    app.dependency_overrides[get_service] = lambda: service
    with patch("flashdeck.server.logging.basicConfig") as basic_config:
        assert not basic_config.called
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
        basic_config.assert_called_once_with(level=logging.INFO)
    app.dependency_overrides.clear()
