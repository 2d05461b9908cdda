"""Review state model: the per-word scheduling record and its invariants.

A ``WordRecord`` is one word the learner is actively studying. Its embedded
``Schedule`` holds the spaced-repetition state that only the scheduler
mutates. Records serialize to the camelCase layout used by backup files.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Dict, Iterable, Optional

from enwords.exceptions import DuplicateWordError

logger = logging.getLogger(__name__)

INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
INITIAL_INTERVAL = 1
MAX_DIFFICULTY = 2


def ensure_utc(value: datetime) -> datetime:
    """Return a timezone-aware datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"Expected an ISO timestamp, got {value!r}")
    # Backups written by browsers end in "Z"
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(value))


def new_id() -> str:
    """Generate an opaque record identifier."""
    return uuid.uuid4().hex


@dataclass
class Schedule:
    """Spaced-repetition state of one word."""
    next_review: datetime
    ease_factor: float = INITIAL_EASE_FACTOR
    interval: int = INITIAL_INTERVAL
    repetitions: int = 0
    last_review: Optional[datetime] = None
    correct_answers: int = 0
    total_answers: int = 0
    difficulty: int = 0  # 0 = easy, 1 = medium, 2 = hard

    def __post_init__(self):
        if self.next_review is None:
            raise ValueError("Schedule needs a next review time")
        if self.ease_factor < MIN_EASE_FACTOR:
            raise ValueError(f"Ease factor {self.ease_factor} is below {MIN_EASE_FACTOR}")
        if self.interval < 1:
            raise ValueError(f"Interval must be at least one day, got {self.interval}")
        if not 0 <= self.difficulty <= MAX_DIFFICULTY:
            raise ValueError(f"Difficulty must be between 0 and {MAX_DIFFICULTY}, got {self.difficulty}")
        if min(self.repetitions, self.correct_answers, self.total_answers) < 0:
            raise ValueError("Review counters cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the schedule."""
        return {
            "easeFactor": self.ease_factor,
            "interval": self.interval,
            "repetitions": self.repetitions,
            "nextReview": _to_iso(self.next_review),
            "lastReview": _to_iso(self.last_review),
            "correctAnswers": self.correct_answers,
            "totalAnswers": self.total_answers,
            "difficulty": self.difficulty,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schedule":
        """Deserialize a schedule."""
        return cls(
            next_review=_from_iso(data["nextReview"]),
            ease_factor=float(data.get("easeFactor", INITIAL_EASE_FACTOR)),
            interval=int(data.get("interval", INITIAL_INTERVAL)),
            repetitions=int(data.get("repetitions", 0)),
            last_review=_from_iso(data.get("lastReview")),
            correct_answers=int(data.get("correctAnswers", 0)),
            total_answers=int(data.get("totalAnswers", 0)),
            difficulty=int(data.get("difficulty", 0)),
        )


@dataclass
class WordRecord:
    """A word the learner is actively studying."""
    id: str
    word: str
    translation: str
    level: str
    date_added: datetime
    schedule: Schedule
    is_learned: bool = False
    date_learned: Optional[datetime] = None

    def __post_init__(self):
        if not self.word:
            raise ValueError("Word cannot be empty")
        if self.date_added is None:
            raise ValueError(f"Record for {self.word!r} needs a date added")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the record, including its schedule."""
        return {
            "id": self.id,
            "word": self.word,
            "translation": self.translation,
            "level": self.level,
            "dateAdded": _to_iso(self.date_added),
            "isLearned": self.is_learned,
            "dateLearned": _to_iso(self.date_learned),
            "repetitionData": self.schedule.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordRecord":
        """Deserialize a record produced by ``to_dict``."""
        return cls(
            id=str(data["id"]),
            word=data["word"],
            translation=data.get("translation", ""),
            level=data.get("level", ""),
            date_added=_from_iso(data["dateAdded"]),
            schedule=Schedule.from_dict(data["repetitionData"]),
            is_learned=bool(data.get("isLearned", False)),
            date_learned=_from_iso(data.get("dateLearned")),
        )


@dataclass
class CustomWord:
    """A learner-defined catalog entry."""
    id: str
    word: str
    translation: str
    level: str
    date_added: datetime

    def __post_init__(self):
        if self.date_added is None:
            raise ValueError(f"Custom word {self.word!r} needs a date added")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "word": self.word,
            "translation": self.translation,
            "level": self.level,
            "dateAdded": _to_iso(self.date_added),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomWord":
        return cls(
            id=str(data["id"]),
            word=data["word"],
            translation=data.get("translation", ""),
            level=data.get("level", ""),
            date_added=_from_iso(data["dateAdded"]),
        )


def create_record(
    existing: Iterable[WordRecord],
    word: str,
    translation: str,
    level: str,
    now: datetime,
) -> WordRecord:
    """Create a new record that is due immediately.

    Raises:
        DuplicateWordError: If ``word`` is already in ``existing``.
        ValueError: If ``word`` is empty.
    """
    if not word:
        raise ValueError("Word cannot be empty")
    if any(record.word == word for record in existing):
        raise DuplicateWordError(word)

    now = ensure_utc(now)
    record = WordRecord(
        id=new_id(),
        word=word,
        translation=translation,
        level=level,
        date_added=now,
        schedule=Schedule(next_review=now),
    )
    logger.debug(f"Created record {record.id} for word {word!r}")
    return record


def mark_learned(record: WordRecord, now: datetime) -> None:
    """Mark a record as learned. Repeated calls keep the first date."""
    if record.is_learned:
        return
    record.is_learned = True
    record.date_learned = ensure_utc(now)
    logger.debug(f"Word {record.word!r} marked as learned")
