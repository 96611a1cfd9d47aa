"""Exceptions raised by the review/quiz engine and the vocabulary repository."""

from typing import Optional


class FlashLingoError(Exception):
    """Base class for all FlashLingo errors."""


class EmptyDeck(FlashLingoError):
    """Raised when a topic filter leaves no entries to review or quiz on."""

    def __init__(self, topic: str) -> None:
        super().__init__(f"No vocabulary entries for topic '{topic}'.")
        self.topic = topic


class PreconditionViolation(FlashLingoError, RuntimeError):
    """Raised when a session or deck is driven in an invalid order."""


class RepositoryError(FlashLingoError):
    """Base class for errors surfaced by the vocabulary repository."""


class ValidationError(RepositoryError, ValueError):
    """Raised when an entry would be stored with blank text."""


class NotFound(RepositoryError, LookupError):
    """Raised when an entry id does not exist for the given user."""

    def __init__(self, entry_id: str, user_id: Optional[str] = None) -> None:
        super().__init__(f"Vocabulary entry '{entry_id}' not found.")
        self.entry_id = entry_id
        self.user_id = user_id


class StorageError(RepositoryError):
    """Raised when the underlying database operation fails."""
