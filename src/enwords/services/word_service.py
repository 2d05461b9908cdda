"""Service for managing the learner's study collection."""
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, List, Optional

from enwords import monitoring
from enwords.exceptions import DuplicateWordError, InvalidStateError, WordNotFoundError
from enwords.models import records as model
from enwords.models.records import CustomWord, WordRecord, ensure_utc, new_id
from enwords.services import scheduler
from enwords.services.catalog import CatalogProvider
from enwords.services.session_service import ReviewSession, start_session

logger = logging.getLogger(__name__)


@dataclass
class LearningStatistics:
    """Summary counts of the study collection."""
    total_learned: int
    total_learning: int
    custom_words_added: int
    learned_today: int
    due_now: int


@dataclass
class ImportResult:
    """Number of entries added by a merge."""
    new_learning: int
    new_custom: int


class WordService:
    """The learner's word records and custom words.

    The service owns its lists; callers load them from a repository, pass
    them in, and save ``records`` and ``custom_words`` back afterwards.
    """

    def __init__(
        self,
        records: Optional[Iterable[WordRecord]] = None,
        custom_words: Optional[Iterable[CustomWord]] = None,
    ):
        """Initialize the service with existing records and custom words."""
        self.records: List[WordRecord] = list(records or [])
        self.custom_words: List[CustomWord] = list(custom_words or [])

    def get_record(self, word: str) -> Optional[WordRecord]:
        """Get a record by its word."""
        return next((record for record in self.records if record.word == word), None)

    def get_record_by_id(self, record_id: str) -> Optional[WordRecord]:
        """Get a record by its ID."""
        return next((record for record in self.records if record.id == record_id), None)

    def create_record(self, word: str, translation: str, level: str, now: datetime) -> WordRecord:
        """Start studying a word."""
        try:
            record = model.create_record(self.records, word, translation, level, now)
        except DuplicateWordError:
            logger.info(f"Word {word!r} is already being studied")
            raise
        self.records.append(record)
        monitoring.words_added.labels(source="manual").inc()
        logger.info(f"Added word {word!r} ({level}) to the study collection")
        return record

    def add_from_catalog(
        self, catalog: CatalogProvider, level: str, word: str, now: datetime
    ) -> WordRecord:
        """Start studying a catalog word."""
        entry = catalog.find(level, word)
        if entry is None:
            raise WordNotFoundError(word, f"Word not found in level {level}")
        record = model.create_record(self.records, entry.word, entry.translation, entry.level, now)
        self.records.append(record)
        monitoring.words_added.labels(source="catalog").inc()
        logger.info(f"Added catalog word {word!r} ({level}) to the study collection")
        return record

    def mark_learned(self, word: str, now: datetime) -> WordRecord:
        """Mark a word as learned."""
        record = self.get_record(word)
        if record is None:
            raise WordNotFoundError(word)
        if not record.is_learned:
            model.mark_learned(record, now)
            monitoring.words_learned.inc()
            logger.info(f"Word {word!r} marked as learned")
        return record

    def remove_word(self, word: str) -> bool:
        """Stop studying a word."""
        record = self.get_record(word)
        if record is None:
            return False
        self.records.remove(record)
        monitoring.words_removed.inc()
        logger.info(f"Removed word {word!r} from the study collection")
        return True

    def add_custom_word(self, word: str, translation: str, level: str, now: datetime) -> CustomWord:
        """Define a custom word."""
        word = word.strip()
        translation = translation.strip()
        if not word or not translation:
            raise ValueError("Word and translation are required")
        if any(custom.word == word for custom in self.custom_words):
            raise DuplicateWordError(word, "Custom word already exists")

        custom = CustomWord(
            id=new_id(),
            word=word,
            translation=translation,
            level=level,
            date_added=ensure_utc(now),
        )
        self.custom_words.append(custom)
        logger.info(f"Added custom word {word!r}")
        return custom

    def get_custom_word(self, custom_id: str) -> Optional[CustomWord]:
        """Get a custom word by its ID."""
        return next((custom for custom in self.custom_words if custom.id == custom_id), None)

    def remove_custom_word(self, custom_id: str) -> bool:
        """Delete a custom word."""
        custom = self.get_custom_word(custom_id)
        if custom is None:
            return False
        self.custom_words.remove(custom)
        logger.info(f"Removed custom word {custom.word!r}")
        return True

    def study_custom_word(self, custom_id: str, now: datetime) -> WordRecord:
        """Start studying a custom word."""
        custom = self.get_custom_word(custom_id)
        if custom is None:
            raise WordNotFoundError(custom_id, "Custom word not found")
        record = model.create_record(self.records, custom.word, custom.translation, custom.level, now)
        self.records.append(record)
        monitoring.words_added.labels(source="custom").inc()
        logger.info(f"Added custom word {custom.word!r} to the study collection")
        return record

    def due_words(self, now: datetime) -> List[WordRecord]:
        """Get the words due for review."""
        return scheduler.due_words(self.records, now)

    def start_session(self, now: datetime) -> ReviewSession:
        """Start a review session over the words due now."""
        return start_session(self.records, now)

    def review(self, record_id: str, grade: int, now: datetime) -> WordRecord:
        """Grade a single review outside of a session."""
        record = self.get_record_by_id(record_id)
        if record is None:
            raise InvalidStateError(f"No record with id {record_id!r}")
        scheduler.advance(record, grade, now)
        monitoring.reviews.labels(
            outcome="correct" if grade >= scheduler.PASSING_GRADE else "failed"
        ).inc()
        return record

    def statistics(self, now: datetime) -> LearningStatistics:
        """Get summary counts of the collection."""
        now = ensure_utc(now)
        today = now.date()
        learned_today = sum(
            1
            for record in self.records
            if record.date_learned is not None
            and record.date_learned.astimezone(now.tzinfo).date() == today
        )
        return LearningStatistics(
            total_learned=sum(1 for record in self.records if record.is_learned),
            total_learning=len(self.records),
            custom_words_added=len(self.custom_words),
            learned_today=learned_today,
            due_now=len(self.due_words(now)),
        )

    def merge(
        self, records: Iterable[WordRecord], custom_words: Iterable[CustomWord]
    ) -> ImportResult:
        """Add imported entries whose word is not present yet."""
        known_words = {record.word for record in self.records}
        known_custom = {custom.word for custom in self.custom_words}
        known_ids = {record.id for record in self.records}
        known_custom_ids = {custom.id for custom in self.custom_words}

        new_learning = 0
        for record in records:
            if record.word not in known_words:
                if record.id in known_ids:
                    record = replace(record, id=new_id())
                self.records.append(record)
                known_ids.add(record.id)
                known_words.add(record.word)
                new_learning += 1

        new_custom = 0
        for custom in custom_words:
            if custom.word not in known_custom:
                if custom.id in known_custom_ids:
                    custom = replace(custom, id=new_id())
                self.custom_words.append(custom)
                known_custom_ids.add(custom.id)
                known_custom.add(custom.word)
                new_custom += 1

        logger.info(f"Imported {new_learning} learning words and {new_custom} custom words")
        return ImportResult(new_learning=new_learning, new_custom=new_custom)

    def clear(self) -> None:
        """Forget every record and custom word."""
        self.records.clear()
        self.custom_words.clear()
        logger.info("Study collection cleared")
