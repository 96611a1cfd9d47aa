"""Typed-answer quiz sessions."""

import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .errors import EmptyDeck, PreconditionViolation
from .models import ALL_TOPICS, Direction, Outcome, VocabEntry
from .topics import filter_by_topic

ACTIVE = "Active"
FINISHED = "Finished"


@dataclass(frozen=True)
class Question:
    prompt: str
    expected: str
    prompt_label: str
    answer_label: str
    number: int
    total: int


@dataclass(frozen=True)
class QuizReport:
    score: int
    total: int

    @property
    def percent(self) -> float:
        return 100.0 * self.score / self.total if self.total else 0.0


def normalize_answer(text: str) -> str:
    return text.strip().lower()


class QuizSession:
    """
    One bounded quiz run over a shuffled snapshot of entries.

    The queue is fixed at construction, so repository changes made while the
    quiz is running are not seen. Each question is resolved exactly once by
    `submit_answer` and then left with `advance`; after the last question the
    session is finished and `report` holds the final tally.
    """

    def __init__(self, queue: Sequence[VocabEntry], direction: Direction = Direction.SOURCE_TO_TARGET,
                 topic: str = ALL_TOPICS) -> None:
        if not queue:
            raise EmptyDeck(topic)
        self.queue: Tuple[VocabEntry, ...] = tuple(queue)
        self.direction = Direction(direction)
        self.topic = topic
        self.cursor = 0
        self.score = 0
        self.pending_answer = ""
        self.last_outcome = Outcome.NONE
        self.state = ACTIVE
        self.report: Optional[QuizReport] = None

    @classmethod
    def start(cls, entries: Sequence[VocabEntry], topic: str = ALL_TOPICS,
              direction: Direction = Direction.SOURCE_TO_TARGET,
              rng: Optional[random.Random] = None) -> "QuizSession":
        """Filter `entries` by topic and build a session over a uniform shuffle of them."""
        filtered = list(filter_by_topic(entries, topic))
        if not filtered:
            raise EmptyDeck(topic)
        # random.shuffle is an in-place Fisher-Yates shuffle
        (rng or random.Random()).shuffle(filtered)
        return cls(filtered, direction=direction, topic=topic)

    @property
    def total(self) -> int:
        return len(self.queue)

    @property
    def is_finished(self) -> bool:
        return self.state == FINISHED

    def _require_active(self) -> None:
        if self.is_finished:
            raise PreconditionViolation("Quiz session is already finished.")

    @property
    def current_entry(self) -> VocabEntry:
        self._require_active()
        return self.queue[self.cursor]

    @property
    def current_question(self) -> Question:
        entry = self.current_entry
        if self.direction is Direction.SOURCE_TO_TARGET:
            prompt, expected = entry.source_text, entry.target_text
        else:
            prompt, expected = entry.target_text, entry.source_text
        return Question(
            prompt=prompt,
            expected=expected,
            prompt_label=self.direction.prompt_label,
            answer_label=self.direction.answer_label,
            number=self.cursor + 1,
            total=self.total,
        )

    @property
    def revealed_answer(self) -> Optional[str]:
        """The expected answer once the active question has been answered wrong."""
        if self.last_outcome is Outcome.INCORRECT:
            return self.current_question.expected
        return None

    def submit_answer(self, text: str) -> Outcome:
        self._require_active()
        if self.last_outcome is not Outcome.NONE:
            raise PreconditionViolation("Question already answered; call advance() first.")
        if not text.strip():
            return Outcome.NONE

        self.pending_answer = text
        if normalize_answer(text) == normalize_answer(self.current_question.expected):
            self.last_outcome = Outcome.CORRECT
            self.score += 1
        else:
            self.last_outcome = Outcome.INCORRECT
        return self.last_outcome

    def advance(self) -> Optional[QuizReport]:
        """Move past a resolved question. Returns the report when the quiz ends."""
        self._require_active()
        if self.last_outcome is Outcome.NONE:
            raise PreconditionViolation("Answer the current question before advancing.")

        self.last_outcome = Outcome.NONE
        self.pending_answer = ""
        if self.cursor + 1 < len(self.queue):
            self.cursor += 1
            return None

        self.cursor = len(self.queue)
        self.state = FINISHED
        self.report = QuizReport(score=self.score, total=self.total)
        return self.report
