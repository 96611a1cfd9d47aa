from __future__ import annotations
from sqlalchemy import create_engine, Boolean, DateTime, String, Text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session, Mapped, mapped_column
import datetime
import os
import threading
import uuid
from typing import Dict, Iterator, List, Optional, Protocol, Tuple

from .errors import NotFound, StorageError, ValidationError
from .models import VocabEntry
from .topics import normalize_topic

DEBUG_MODE = os.getenv("DEBUG", "0") == "1"


class Base(DeclarativeBase):
    pass
DB_PATH: str = os.environ.get("FLASHLINGO_DB", "flashlingo.db")
engine = create_engine(f"sqlite:///{DB_PATH}")
# Prevent attribute expiration on commit so returned objects remain accessible
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


class VocabWord(Base):
    __tablename__ = "vocab_words"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    user: Mapped[str] = mapped_column(String, nullable=False, index=True)
    source_text: Mapped[str] = mapped_column(Text, nullable=False)
    target_text: Mapped[str] = mapped_column(Text, nullable=False)
    topic: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, default=lambda: datetime.datetime.now(datetime.UTC))
    mastered: Mapped[bool] = mapped_column(Boolean, default=False)  # stored, never changed by the app


def is_db_initialized() -> bool:
    """Check if the database is already initialized by checking if tables exist."""
    from sqlalchemy import inspect
    inspector = inspect(engine)
    return VocabWord.__tablename__ in set(inspector.get_table_names())


def init_db() -> None:
    """Initialize the database by creating all tables."""
    Base.metadata.create_all(bind=engine)


def get_session() -> Session:
    return SessionLocal()


# ----------------------------------------------------------------------
# Change notification
# ----------------------------------------------------------------------
# Every committed write bumps the user's revision and wakes subscribers.
# Only writers in this process are observed.
_changed = threading.Condition()
_revisions: Dict[str, int] = {}


def _notify(user_id: str) -> None:
    with _changed:
        _revisions[user_id] = _revisions.get(user_id, 0) + 1
        _changed.notify_all()


def revision(user_id: str) -> int:
    """Number of committed writes seen for `user_id` since process start."""
    with _changed:
        return _revisions.get(user_id, 0)


# ----------------------------------------------------------------------
# Vocabulary CRUD
# ----------------------------------------------------------------------
def _to_entry(row: VocabWord) -> VocabEntry:
    created_at = row.created_at
    if created_at.tzinfo is None:
        # SQLite drops the offset; values are always written in UTC
        created_at = created_at.replace(tzinfo=datetime.UTC)
    return VocabEntry(
        id=row.id,
        source_text=row.source_text,
        target_text=row.target_text,
        topic=row.topic,
        created_at=created_at,
        mastered=bool(row.mastered),
    )


def _clean_texts(source_text: str, target_text: str) -> Tuple[str, str]:
    source = (source_text or "").strip()
    target = (target_text or "").strip()
    if not source or not target:
        raise ValidationError("Both the source and the target text are required.")
    return source, target


def _get_owned(session: Session, user_id: str, entry_id: str) -> VocabWord:
    row = session.get(VocabWord, entry_id)
    if row is None or row.user != user_id:
        raise NotFound(entry_id, user_id)
    return row


def list_entries(user_id: str) -> List[VocabEntry]:
    """Return the current snapshot of a user's vocabulary."""
    session: Session = get_session()
    try:
        rows = session.query(VocabWord).filter(VocabWord.user == user_id).all()
        return [_to_entry(row) for row in rows]
    except SQLAlchemyError as e:
        raise StorageError(f"Could not load vocabulary: {e}") from e
    finally:
        session.close()


def create_entry(user_id: str, source_text: str, target_text: str, topic: Optional[str] = None) -> VocabEntry:
    """Store a new word pair. Texts are trimmed and a blank topic becomes "Unclassified"."""
    source, target = _clean_texts(source_text, target_text)
    row = VocabWord(
        id=uuid.uuid4().hex,
        user=user_id,
        source_text=source,
        target_text=target,
        topic=normalize_topic(topic),
        created_at=datetime.datetime.now(datetime.UTC),
        mastered=False,
    )
    entry = _to_entry(row)
    session: Session = get_session()
    try:
        session.add(row)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f"Could not add '{source}': {e}") from e
    finally:
        session.close()

    if DEBUG_MODE:
        print(f"➕ Added '{source}' -> '{target}' [{entry.topic}] for {user_id}")
    _notify(user_id)
    return entry


def update_entry(user_id: str, entry_id: str, source_text: str, target_text: str,
                 topic: Optional[str] = None) -> None:
    """Replace the content of an existing entry. Identity, creation time and `mastered` are kept."""
    source, target = _clean_texts(source_text, target_text)
    session: Session = get_session()
    try:
        row = _get_owned(session, user_id, entry_id)
        row.source_text = source
        row.target_text = target
        row.topic = normalize_topic(topic)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f"Could not update '{entry_id}': {e}") from e
    finally:
        session.close()

    if DEBUG_MODE:
        print(f"✏️ Updated {entry_id} for {user_id}")
    _notify(user_id)


def delete_entry(user_id: str, entry_id: str) -> None:
    session: Session = get_session()
    try:
        row = _get_owned(session, user_id, entry_id)
        session.delete(row)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f"Could not delete '{entry_id}': {e}") from e
    finally:
        session.close()

    if DEBUG_MODE:
        print(f"🗑️ Deleted {entry_id} for {user_id}")
    _notify(user_id)


def subscribe(user_id: str, timeout: Optional[float] = None) -> Iterator[List[VocabEntry]]:
    """
    Yield full snapshots of a user's vocabulary, forever.

    The first snapshot is produced immediately; each later one after the
    collection changes. With a `timeout`, the current snapshot is re-emitted
    whenever that many seconds pass without a change. Call again to restart.
    """
    seen: Optional[int] = None
    while True:
        with _changed:
            if seen is not None:
                _changed.wait_for(lambda: _revisions.get(user_id, 0) != seen, timeout=timeout)
            seen = _revisions.get(user_id, 0)
        yield list_entries(user_id)


# ----------------------------------------------------------------------
# Repository contract
# ----------------------------------------------------------------------
class VocabRepository(Protocol):
    """What the presentation layer needs from a vocabulary store."""

    def subscribe(self, user_id: str) -> Iterator[List[VocabEntry]]: ...

    def list_entries(self, user_id: str) -> List[VocabEntry]: ...

    def create(self, user_id: str, source_text: str, target_text: str, topic: Optional[str] = None) -> VocabEntry: ...

    def update(self, user_id: str, entry_id: str, source_text: str, target_text: str,
               topic: Optional[str] = None) -> None: ...

    def delete(self, user_id: str, entry_id: str) -> None: ...


class SqlVocabRepository:
    """VocabRepository over this module's SQLAlchemy engine."""

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout

    def subscribe(self, user_id: str) -> Iterator[List[VocabEntry]]:
        return subscribe(user_id, timeout=self.timeout)

    def list_entries(self, user_id: str) -> List[VocabEntry]:
        return list_entries(user_id)

    def create(self, user_id: str, source_text: str, target_text: str, topic: Optional[str] = None) -> VocabEntry:
        return create_entry(user_id, source_text, target_text, topic)

    def update(self, user_id: str, entry_id: str, source_text: str, target_text: str,
               topic: Optional[str] = None) -> None:
        update_entry(user_id, entry_id, source_text, target_text, topic)

    def delete(self, user_id: str, entry_id: str) -> None:
        delete_entry(user_id, entry_id)


__all__ = [
    "Base", "VocabWord", "engine", "SessionLocal",
    "init_db", "is_db_initialized", "get_session",
    "list_entries", "create_entry", "update_entry", "delete_entry",
    "subscribe", "revision",
    "VocabRepository", "SqlVocabRepository",
]
