"""Tests for review sessions."""
from datetime import datetime, timedelta
from typing import List

import pytest

from enwords.exceptions import InvalidGradeError, InvalidStateError
from enwords.models.records import WordRecord, create_record, mark_learned
from enwords.services.session_service import SessionState, start_session, submit_grade


@pytest.fixture
def records(now: datetime, fake) -> List[WordRecord]:
    """Five due records and one learned one."""
    records: List[WordRecord] = []
    for word in fake.words(nb=6, unique=True):
        records.append(create_record(records, word, fake.word(), "A2", now - timedelta(days=1)))
    mark_learned(records[-1], now)
    return records


def test_session_visits_every_due_word_once(records: List[WordRecord], now: datetime) -> None:
    """Test N grades complete a session over N words exactly once."""
    session = start_session(records, now)
    assert session.state is SessionState.IN_SESSION
    assert len(session) == 5

    visited = []
    completions = 0
    for _ in range(len(session)):
        visited.append(session.current_word.id)
        step = submit_grade(session, 4, now)
        completions += step.session_complete

    assert completions == 1
    assert len(set(visited)) == len(visited) == 5
    assert records[-1].id not in visited
    assert session.state is SessionState.IDLE
    assert session.is_complete
    assert session.current_word is None
    assert session.remaining == 0


def test_steps_report_next_word(records: List[WordRecord], now: datetime) -> None:
    """Test every step names the word that follows it."""
    session = start_session(records, now)
    expected = list(session.words)

    for position, record in enumerate(expected):
        step = session.submit_grade(5, now)
        assert step.reviewed is record
        if position + 1 < len(expected):
            assert step.next_word is expected[position + 1]
            assert step.session_complete is False
        else:
            assert step.next_word is None
            assert step.session_complete is True


def test_snapshot_is_not_refiltered(now: datetime) -> None:
    """Test a failed word does not come back and graded words do not vanish."""
    first = create_record([], "first", "первый", "A1", now)
    second = create_record([first], "second", "второй", "A1", now)
    second.schedule.next_review = now - timedelta(days=1)

    session = start_session([first, second], now)
    snapshot = list(session.words)

    # Failing keeps the word's difficulty high but it is not queued again
    session.submit_grade(0, now)
    assert session.words == snapshot
    assert session.remaining == 1

    step = session.submit_grade(0, now)
    assert step.session_complete
    assert len(session.words) == 2


def test_empty_session_is_already_complete(now: datetime) -> None:
    """Test a session with nothing due starts complete."""
    session = start_session([], now)

    assert session.is_complete
    assert session.state is SessionState.IDLE
    assert session.current_word is None
    with pytest.raises(InvalidStateError):
        session.submit_grade(5, now)


def test_submit_after_completion_is_invalid(records: List[WordRecord], now: datetime) -> None:
    """Test a finished session accepts no more grades."""
    session = start_session(records, now)
    for _ in range(len(session)):
        session.submit_grade(3, now)

    with pytest.raises(InvalidStateError):
        session.submit_grade(3, now)


def test_cancel_keeps_graded_words(records: List[WordRecord], now: datetime) -> None:
    """Test cancelling keeps finished reviews and leaves the rest untouched."""
    session = start_session(records, now)
    graded = session.current_word
    session.submit_grade(5, now)
    untouched = {record.id: record.to_dict() for record in session.words[1:]}

    session.cancel()

    assert session.state is SessionState.IDLE
    assert session.cancelled
    assert not session.is_complete
    assert graded.schedule.total_answers == 1
    for record in session.words[1:]:
        assert record.to_dict() == untouched[record.id]
    with pytest.raises(InvalidStateError):
        session.submit_grade(5, now)

    # Cancelling twice is harmless
    session.cancel()


def test_invalid_grade_does_not_move_session(records: List[WordRecord], now: datetime) -> None:
    """Test a rejected grade leaves the session on the same word."""
    session = start_session(records, now)
    current = session.current_word

    with pytest.raises(InvalidGradeError):
        session.submit_grade(9, now)

    assert session.index == 0
    assert session.current_word is current


def test_word_learned_mid_session_is_invalid(records: List[WordRecord], now: datetime) -> None:
    """Test grading a word learned after the snapshot was taken fails."""
    session = start_session(records, now)
    mark_learned(session.current_word, now)

    with pytest.raises(InvalidStateError):
        session.submit_grade(4, now)
    assert session.index == 0
