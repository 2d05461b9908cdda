"""Persistence of the study collection."""
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generator, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from enwords import monitoring
from enwords.exceptions import StorageError
from enwords.models.base import create_session_factory, get_engine, init_db
from enwords.models.models import StoredCustomWord, StoredWord
from enwords.models.records import CustomWord, Schedule, WordRecord

logger = logging.getLogger(__name__)


class WordRepository(ABC):
    """Storage for word records and custom words."""

    @abstractmethod
    def load_all(self) -> List[WordRecord]:
        """Load every stored word record."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def save_all(self, records: Iterable[WordRecord]) -> None:
        """Replace the stored word records with ``records``."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def load_custom_words(self) -> List[CustomWord]:
        """Load every stored custom word."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def save_custom_words(self, custom_words: Iterable[CustomWord]) -> None:
        """Replace the stored custom words with ``custom_words``."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def clear(self) -> None:
        """Delete everything."""
        raise NotImplementedError("Subclasses must implement this method")


def _to_row(record: WordRecord, position: int) -> StoredWord:
    schedule = record.schedule
    return StoredWord(
        id=record.id,
        word=record.word,
        translation=record.translation,
        level=record.level,
        date_added=record.date_added,
        is_learned=record.is_learned,
        date_learned=record.date_learned,
        ease_factor=schedule.ease_factor,
        interval=schedule.interval,
        repetitions=schedule.repetitions,
        next_review=schedule.next_review,
        last_review=schedule.last_review,
        correct_answers=schedule.correct_answers,
        total_answers=schedule.total_answers,
        difficulty=schedule.difficulty,
        position=position,
    )


def _from_row(row: StoredWord) -> WordRecord:
    return WordRecord(
        id=row.id,
        word=row.word,
        translation=row.translation,
        level=row.level,
        date_added=row.date_added,
        is_learned=row.is_learned,
        date_learned=row.date_learned,
        schedule=Schedule(
            next_review=row.next_review,
            ease_factor=row.ease_factor,
            interval=row.interval,
            repetitions=row.repetitions,
            last_review=row.last_review,
            correct_answers=row.correct_answers,
            total_answers=row.total_answers,
            difficulty=row.difficulty,
        ),
    )


class SqlWordRepository(WordRepository):
    """Repository backed by a SQLAlchemy database."""

    def __init__(self, session_factory: sessionmaker):
        """Initialize the repository with a session factory."""
        self.session_factory = session_factory

    @classmethod
    def from_url(cls, url: Optional[str] = None) -> "SqlWordRepository":
        """Create a repository for ``url`` and make sure its tables exist."""
        engine = get_engine(url)
        try:
            init_db(engine)
        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize database {engine.url}: {e}")
            monitoring.storage_errors.labels(operation="init").inc()
            raise StorageError(f"Cannot initialize database: {e}") from e
        logger.info(f"Database initialized at {engine.url}")
        return cls(create_session_factory(engine))

    @contextmanager
    def _session(self, operation: str) -> Generator[Session, None, None]:
        db = self.session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error during {operation}: {e}")
            monitoring.storage_errors.labels(operation=operation).inc()
            raise StorageError(f"Database error during {operation}: {e}") from e
        finally:
            db.close()

    def load_all(self) -> List[WordRecord]:
        with self._session("load_all") as db:
            rows = db.query(StoredWord).order_by(StoredWord.position).all()
            return [_from_row(row) for row in rows]

    def save_all(self, records: Iterable[WordRecord]) -> None:
        records = list(records)
        with self._session("save_all") as db:
            db.query(StoredWord).delete()
            db.add_all(_to_row(record, position) for position, record in enumerate(records))
            db.commit()
        logger.debug(f"Saved {len(records)} word records")

    def load_custom_words(self) -> List[CustomWord]:
        with self._session("load_custom_words") as db:
            rows = db.query(StoredCustomWord).order_by(StoredCustomWord.position).all()
            return [
                CustomWord(
                    id=row.id,
                    word=row.word,
                    translation=row.translation,
                    level=row.level,
                    date_added=row.date_added,
                )
                for row in rows
            ]

    def save_custom_words(self, custom_words: Iterable[CustomWord]) -> None:
        custom_words = list(custom_words)
        with self._session("save_custom_words") as db:
            db.query(StoredCustomWord).delete()
            db.add_all(
                StoredCustomWord(
                    id=custom.id,
                    word=custom.word,
                    translation=custom.translation,
                    level=custom.level,
                    date_added=custom.date_added,
                    position=position,
                )
                for position, custom in enumerate(custom_words)
            )
            db.commit()
        logger.debug(f"Saved {len(custom_words)} custom words")

    def clear(self) -> None:
        with self._session("clear") as db:
            db.query(StoredWord).delete()
            db.query(StoredCustomWord).delete()
            db.commit()
        logger.info("All stored data deleted")
