"""Due-set selection and grade-driven advancement (adapted SM-2)."""
import logging
import math
from datetime import datetime, timedelta
from typing import Iterable, List

from enwords.exceptions import InvalidGradeError, InvalidStateError
from enwords.models.records import (
    MAX_DIFFICULTY,
    MIN_EASE_FACTOR,
    Schedule,
    WordRecord,
    ensure_utc,
)

logger = logging.getLogger(__name__)

MIN_GRADE = 0
MAX_GRADE = 5
PASSING_GRADE = 3
SECOND_INTERVAL = 6


def is_due(record: WordRecord, now: datetime) -> bool:
    """Check whether a record should be reviewed at ``now``."""
    return not record.is_learned and record.schedule.next_review <= ensure_utc(now)


def due_words(records: Iterable[WordRecord], now: datetime) -> List[WordRecord]:
    """Get the records due at ``now``, hardest first, then most overdue first."""
    due = [record for record in records if is_due(record, now)]
    # Two stable passes: secondary key first, primary key last
    due.sort(key=lambda record: record.schedule.next_review)
    due.sort(key=lambda record: record.schedule.difficulty, reverse=True)
    return due


def validate_grade(grade) -> int:
    """Return ``grade`` if it is an integer in 0..5."""
    if isinstance(grade, bool) or not isinstance(grade, int):
        raise InvalidGradeError(grade)
    if grade < MIN_GRADE or grade > MAX_GRADE:
        raise InvalidGradeError(grade)
    return grade


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def next_ease_factor(ease_factor: float, grade: int) -> float:
    """Apply the SM-2 quality curve and clamp to the ease floor."""
    lapse = MAX_GRADE - grade
    ease_factor = ease_factor + (0.1 - lapse * (0.08 + lapse * 0.02))
    return max(MIN_EASE_FACTOR, ease_factor)


def compute_schedule(schedule: Schedule, grade: int, now: datetime) -> Schedule:
    """Compute the schedule that follows ``schedule`` after a review graded ``grade``."""
    grade = validate_grade(grade)
    now = ensure_utc(now)

    repetitions = schedule.repetitions
    correct_answers = schedule.correct_answers
    if grade >= PASSING_GRADE:
        if repetitions == 0:
            interval = 1
        elif repetitions == 1:
            interval = SECOND_INTERVAL
        else:
            # Uses the ease factor from before this review
            interval = _round_half_up(schedule.interval * schedule.ease_factor)
        repetitions += 1
        correct_answers += 1
        difficulty = 0
    else:
        repetitions = 0
        interval = 1
        difficulty = min(MAX_DIFFICULTY, schedule.difficulty + 1)

    interval = max(1, interval)
    return Schedule(
        next_review=now + timedelta(days=interval),
        ease_factor=next_ease_factor(schedule.ease_factor, grade),
        interval=interval,
        repetitions=repetitions,
        last_review=now,
        correct_answers=correct_answers,
        total_answers=schedule.total_answers + 1,
        difficulty=difficulty,
    )


def advance(record: WordRecord, grade: int, now: datetime) -> None:
    """Grade one review of ``record`` and reschedule it.

    Raises:
        InvalidStateError: If the record is already learned.
        InvalidGradeError: If ``grade`` is not an integer in 0..5.
    """
    if record.is_learned:
        raise InvalidStateError(f"Cannot review learned word {record.word!r}")

    record.schedule = compute_schedule(record.schedule, grade, now)
    logger.debug(
        f"Reviewed {record.word!r} with grade {grade}: interval={record.schedule.interval}, "
        f"ease={record.schedule.ease_factor:.2f}, difficulty={record.schedule.difficulty}"
    )
