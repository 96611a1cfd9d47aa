"""Flip-card review deck."""

from typing import Sequence, Tuple

from .errors import EmptyDeck, PreconditionViolation
from .models import ALL_TOPICS, VocabEntry
from .topics import filter_by_topic


class ReviewDeck:
    """
    Cyclic flip-card browser over a filtered snapshot.

    An empty deck is a valid object (the caller shows a hint instead of a
    card), but navigating or flipping it is a precondition violation.
    """

    def __init__(self, cards: Sequence[VocabEntry], topic: str = ALL_TOPICS) -> None:
        self.cards: Tuple[VocabEntry, ...] = tuple(cards)
        self.topic = topic
        self.cursor = 0
        self.flipped = False

    @classmethod
    def from_entries(cls, entries: Sequence[VocabEntry], topic: str = ALL_TOPICS) -> "ReviewDeck":
        return cls(filter_by_topic(entries, topic), topic=topic)

    @classmethod
    def require_cards(cls, entries: Sequence[VocabEntry], topic: str = ALL_TOPICS) -> "ReviewDeck":
        """Like `from_entries`, but raise EmptyDeck when nothing matches."""
        deck = cls.from_entries(entries, topic)
        if deck.is_empty:
            raise EmptyDeck(topic)
        return deck

    @property
    def is_empty(self) -> bool:
        return not self.cards

    @property
    def state(self) -> str:
        return "Empty" if self.is_empty else "Browsing"

    def __len__(self) -> int:
        return len(self.cards)

    def _require_cards(self) -> None:
        if self.is_empty:
            raise PreconditionViolation("Cannot navigate an empty deck.")

    @property
    def current(self) -> VocabEntry:
        self._require_cards()
        return self.cards[self.cursor]

    @property
    def position(self) -> Tuple[int, int]:
        """1-based (card number, deck size)."""
        self._require_cards()
        return self.cursor + 1, len(self.cards)

    def next(self) -> VocabEntry:
        self._require_cards()
        self.cursor = (self.cursor + 1) % len(self.cards)
        self.flipped = False
        return self.cards[self.cursor]

    def prev(self) -> VocabEntry:
        self._require_cards()
        self.cursor = (self.cursor - 1) % len(self.cards)
        self.flipped = False
        return self.cards[self.cursor]

    def toggle_flip(self) -> bool:
        self._require_cards()
        self.flipped = not self.flipped
        return self.flipped
