"""Review sessions: one traversal of a snapshot of the due set."""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from enwords import monitoring
from enwords.exceptions import InvalidStateError
from enwords.models.records import WordRecord
from enwords.services.scheduler import PASSING_GRADE, advance, due_words, validate_grade

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a review session."""
    IDLE = "idle"
    IN_SESSION = "in_session"


@dataclass
class ReviewStep:
    """Result of grading one word in a session."""
    reviewed: WordRecord
    next_word: Optional[WordRecord]
    session_complete: bool


class ReviewSession:
    """A snapshot of due words presented one at a time.

    The snapshot is taken once when the session starts and is never
    re-filtered, so a word graded mid-session neither reappears nor
    disappears from the remaining words.
    """

    def __init__(self, words: List[WordRecord]):
        """Initialize the session over an ordered snapshot."""
        self.words = list(words)
        self.index = 0
        self.cancelled = False
        self.state = SessionState.IN_SESSION if self.words else SessionState.IDLE

    @property
    def current_word(self) -> Optional[WordRecord]:
        """Get the word awaiting a grade, if any."""
        if self.state is not SessionState.IN_SESSION:
            return None
        return self.words[self.index]

    @property
    def remaining(self) -> int:
        """Number of words not yet graded."""
        if self.state is not SessionState.IN_SESSION:
            return 0
        return len(self.words) - self.index

    @property
    def is_complete(self) -> bool:
        """Whether every word in the snapshot has been graded."""
        return self.index == len(self.words)

    def __len__(self) -> int:
        return len(self.words)

    def submit_grade(self, grade: int, now: datetime) -> ReviewStep:
        """Grade the current word and move to the next one."""
        if self.state is not SessionState.IN_SESSION:
            raise InvalidStateError("Review session is not active")
        validate_grade(grade)

        record = self.words[self.index]
        advance(record, grade, now)
        self.index += 1
        monitoring.reviews.labels(outcome="correct" if grade >= PASSING_GRADE else "failed").inc()

        if self.index == len(self.words):
            self.state = SessionState.IDLE
            monitoring.review_sessions.labels(event="completed").inc()
            logger.info(f"Review session complete: {len(self.words)} words reviewed")
            return ReviewStep(reviewed=record, next_word=None, session_complete=True)

        return ReviewStep(reviewed=record, next_word=self.words[self.index], session_complete=False)

    def cancel(self) -> None:
        """Abandon the session. Graded words keep their new state."""
        if self.state is not SessionState.IN_SESSION:
            return
        self.state = SessionState.IDLE
        self.cancelled = True
        monitoring.review_sessions.labels(event="cancelled").inc()
        logger.info(f"Review session cancelled after {self.index} of {len(self.words)} words")


def start_session(records: Iterable[WordRecord], now: datetime) -> ReviewSession:
    """Start a review session over the words due at ``now``."""
    session = ReviewSession(due_words(records, now))
    monitoring.review_sessions.labels(event="started").inc()
    logger.info(f"Review session started with {len(session)} due words")
    return session


def submit_grade(session: ReviewSession, grade: int, now: datetime) -> ReviewStep:
    """Grade the current word of ``session``."""
    return session.submit_grade(grade, now)
