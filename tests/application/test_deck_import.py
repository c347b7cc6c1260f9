import textwrap

import pytest

from flashdeck.application.deck_import import import_cards, parse_import_text
from flashdeck.domain.exceptions import DeckNotFoundError, ImportFormatError


def test_parse_plain_list():
    parsed = parse_import_text(
        textwrap.dedent(
            """\
            - front: Hello
              back: Hola
            - front: Cat
              back: Gato
              image: cat.png
            """
        )
    )

    assert [(c.front, c.back) for c in parsed.cards] == [("Hello", "Hola"), ("Cat", "Gato")]
    assert parsed.cards[1].image == "cat.png"
    assert parsed.title is None


def test_parse_mapping_with_metadata():
    parsed = parse_import_text(
        textwrap.dedent(
            """\
            title: Spanish basics
            description: Greetings
            source_lang: en
            target_lang: es
            tags: greetings
            cards:
              - {front: Hello, back: Hola}
            """
        )
    )

    assert parsed.title == "Spanish basics"
    assert parsed.description == "Greetings"
    assert parsed.source_lang == "en"
    assert parsed.target_lang == "es"
    assert parsed.tags == ["greetings"]
    assert len(parsed.cards) == 1


def test_parse_empty_file():
    assert parse_import_text("").cards == []


def test_parse_numbers_become_text():
    parsed = parse_import_text("- {front: 7, back: siete}")
    assert parsed.cards[0].front == "7"


@pytest.mark.parametrize(
    "text,message",
    [
        ("- front: [unclosed", "Invalid YAML"),
        ("just a string", "list of cards"),
        ("cards: nope", "'cards' must be a list"),
        ("- {front: Hello}", "Card 1"),
        ("- {front: a, back: b}\n- plain", "Card 2"),
    ],
)
def test_parse_errors(text, message):
    with pytest.raises(ImportFormatError, match=message):
        parse_import_text(text)


def test_import_creates_deck_from_metadata(service, tmp_path):
    path = tmp_path / "spanish.yaml"
    path.write_text(
        "title: Spanish\ntarget_lang: es\ncards:\n  - {front: Hello, back: Hola}\n",
        encoding="utf-8",
    )

    deck, added = import_cards(service, path)

    assert deck.title == "Spanish"
    assert deck.target_lang == "es"
    assert [c.front for c in deck.cards] == ["Hello"]
    assert added == deck.cards


def test_import_uses_file_name_as_title(service, tmp_path):
    path = tmp_path / "verbs.yml"
    path.write_text("- {front: run, back: correr}\n", encoding="utf-8")

    deck, _ = import_cards(service, path)

    assert deck.title == "verbs"


def test_import_into_existing_deck(service, tmp_path):
    existing = service.create_deck("Mine")
    service.add_card(existing.id, "one", "uno")
    path = tmp_path / "more.yaml"
    path.write_text("- {front: two, back: dos}\n", encoding="utf-8")

    deck, added = import_cards(service, path, deck_id=existing.id)

    assert deck.id == existing.id
    assert [c.front for c in deck.cards] == ["one", "two"]
    assert len(added) == 1
    assert len(service.list_decks()) == 1


def test_import_into_missing_deck(service, tmp_path):
    path = tmp_path / "more.yaml"
    path.write_text("- {front: two, back: dos}\n", encoding="utf-8")
    with pytest.raises(DeckNotFoundError):
        import_cards(service, path, deck_id="nope")


def test_unparseable_yaml_creates_no_deck(service, tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("title: Broken\ncards:\n  - front: [unclosed\n", encoding="utf-8")

    with pytest.raises(ImportFormatError, match="Invalid YAML"):
        import_cards(service, path)
    assert service.list_decks() == []


def test_bad_file_creates_no_deck(service, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- {front: only}\n", encoding="utf-8")

    with pytest.raises(ImportFormatError):
        import_cards(service, path)
    assert service.list_decks() == []


def test_missing_file(service, tmp_path):
    with pytest.raises(ImportFormatError, match="Cannot read"):
        import_cards(service, tmp_path / "absent.yaml")
