import datetime
import os
from dataclasses import dataclass
from enum import Enum

UNCLASSIFIED = "Unclassified"
ALL_TOPICS = "all"

SOURCE_LANGUAGE: str = os.environ.get("FLASHLINGO_SOURCE_LANG", "English")
TARGET_LANGUAGE: str = os.environ.get("FLASHLINGO_TARGET_LANG", "Vietnamese")


@dataclass(frozen=True)
class VocabEntry:
    """One stored word pair. Snapshots hand these out; they are never mutated."""
    id: str
    source_text: str
    target_text: str
    topic: str
    created_at: datetime.datetime
    mastered: bool = False


class Direction(str, Enum):
    SOURCE_TO_TARGET = "source_to_target"
    TARGET_TO_SOURCE = "target_to_source"

    @property
    def prompt_label(self) -> str:
        return SOURCE_LANGUAGE if self is Direction.SOURCE_TO_TARGET else TARGET_LANGUAGE

    @property
    def answer_label(self) -> str:
        return TARGET_LANGUAGE if self is Direction.SOURCE_TO_TARGET else SOURCE_LANGUAGE


class Outcome(str, Enum):
    NONE = "none"
    CORRECT = "correct"
    INCORRECT = "incorrect"
