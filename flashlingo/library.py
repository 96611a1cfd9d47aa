"""Dashboard/manage view derived from the latest repository snapshot."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Tuple

from .models import VocabEntry
from .topics import compute_topics, topic_counts


@dataclass(frozen=True)
class LibraryView:
    entries: Tuple[VocabEntry, ...]
    topics: Tuple[str, ...]
    topic_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def mastered(self) -> int:
        return sum(1 for entry in self.entries if entry.mastered)


def build_library_view(entries: Iterable[VocabEntry]) -> LibraryView:
    """Sort a snapshot newest first and derive its topics."""
    # sorted() is stable, so entries created at the same instant keep snapshot order
    ordered = tuple(sorted(entries, key=lambda entry: entry.created_at, reverse=True))
    return LibraryView(entries=ordered, topics=compute_topics(ordered), topic_counts=topic_counts(ordered))
