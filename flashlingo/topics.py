"""Topic derivation and filtering over a vocabulary snapshot."""

from collections import Counter
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .models import ALL_TOPICS, UNCLASSIFIED, VocabEntry


def normalize_topic(topic: Optional[str]) -> str:
    """Return the stored form of a topic; blank topics become the sentinel."""
    cleaned = (topic or "").strip()
    return cleaned or UNCLASSIFIED


def compute_topics(entries: Iterable[VocabEntry]) -> Tuple[str, ...]:
    """Distinct normalized topics in ascending order."""
    return tuple(sorted({normalize_topic(entry.topic) for entry in entries}))


def filter_by_topic(entries: Sequence[VocabEntry], topic: str = ALL_TOPICS) -> Tuple[VocabEntry, ...]:
    """Entries in their given order, restricted to `topic` unless it is "all"."""
    if topic == ALL_TOPICS:
        return tuple(entries)
    return tuple(entry for entry in entries if normalize_topic(entry.topic) == topic)


def topic_counts(entries: Iterable[VocabEntry]) -> Dict[str, int]:
    counts = Counter(normalize_topic(entry.topic) for entry in entries)
    return {topic: counts[topic] for topic in sorted(counts)}
