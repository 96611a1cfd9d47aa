"""Tests for the flip-card review deck."""

import datetime

import pytest

from flashlingo.errors import EmptyDeck, PreconditionViolation
from flashlingo.models import VocabEntry
from flashlingo.review import ReviewDeck


def make_entries(count: int, topic: str = "Fruits") -> list[VocabEntry]:
    created = datetime.datetime(2024, 1, 1, tzinfo=datetime.UTC)
    return [
        VocabEntry(id=str(i), source_text=f"en{i}", target_text=f"vi{i}", topic=topic, created_at=created)
        for i in range(count)
    ]


@pytest.mark.parametrize("size", [1, 2, 5])
def test_next_then_prev_round_trip(size):
    deck = ReviewDeck.from_entries(make_entries(size))
    for start in range(size):
        deck.cursor = start
        deck.next()
        deck.prev()
        assert deck.cursor == start
        deck.prev()
        deck.next()
        assert deck.cursor == start


def test_navigation_wraps_around():
    deck = ReviewDeck.from_entries(make_entries(3))
    assert deck.prev().id == "2"
    assert deck.cursor == 2
    assert deck.next().id == "0"
    assert deck.position == (1, 3)


def test_single_card_navigation_resets_flip():
    deck = ReviewDeck.from_entries(make_entries(1))
    deck.toggle_flip()
    assert deck.flipped is True
    deck.next()
    assert deck.cursor == 0
    assert deck.flipped is False
    deck.toggle_flip()
    deck.prev()
    assert deck.cursor == 0
    assert deck.flipped is False


def test_toggle_flip():
    deck = ReviewDeck.from_entries(make_entries(2))
    assert deck.toggle_flip() is True
    assert deck.toggle_flip() is False


def test_filter_by_topic_and_empty_deck():
    entries = make_entries(2, topic="Fruits") + make_entries(1, topic="Animals")
    assert len(ReviewDeck.from_entries(entries, "Animals")) == 1
    assert len(ReviewDeck.from_entries(entries, "all")) == 3

    empty = ReviewDeck.from_entries(entries, "Jobs")
    assert empty.is_empty
    assert empty.state == "Empty"
    with pytest.raises(PreconditionViolation):
        empty.next()
    with pytest.raises(PreconditionViolation):
        empty.prev()
    with pytest.raises(PreconditionViolation):
        empty.toggle_flip()
    with pytest.raises(PreconditionViolation):
        _ = empty.current


def test_require_cards_raises_empty_deck():
    with pytest.raises(EmptyDeck) as exc:
        ReviewDeck.require_cards(make_entries(2), "Jobs")
    assert exc.value.topic == "Jobs"
    assert ReviewDeck.require_cards(make_entries(2)).state == "Browsing"
