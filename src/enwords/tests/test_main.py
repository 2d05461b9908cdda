"""Tests for the command line interface."""
import logging
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
from typing import Iterator, List

import pytest

from enwords.__main__ import Cli, main, parse_grade
from enwords.config import DEFAULT_CATALOG_PATH
from enwords.services.catalog import JsonCatalog
from enwords.services.storage import SqlWordRepository


@pytest.fixture(autouse=True)
def drop_cli_log_handlers():
    """Remove the handlers main() installs on the root logger."""
    root_logger = logging.getLogger()
    before = set(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if handler not in before and type(handler) is logging.StreamHandler:
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """URL of a file database that outlives one command."""
    return f"sqlite:///{tmp_path / 'cli.db'}"


def run(database_url: str, *argv: str) -> int:
    """Run one CLI command against ``database_url``."""
    return main(["--database", database_url, "--log-level", "WARNING", *argv])


def scripted_input(answers: List[str]):
    """Return an input function that replays ``answers``."""
    replies: Iterator[str] = iter(answers)
    return lambda prompt="": next(replies)


@pytest.mark.parametrize(
    "answer,grade",
    [("5", 5), ("0", 0), (" easy ", 5), ("Good", 3), ("hard", 1), ("6", None), ("-1", None), ("x", None)],
)
def test_parse_grade(answer: str, grade) -> None:
    """Test typed grades and aliases."""
    assert parse_grade(answer) == grade


def test_add_and_list(database_url: str, capsys: pytest.CaptureFixture) -> None:
    """Test adding words and listing them."""
    assert run(database_url, "add", "apple", "яблоко", "--level", "A1") == 0
    assert run(database_url, "study", "A1", "about") == 0
    capsys.readouterr()

    assert run(database_url, "list") == 0

    out = capsys.readouterr().out
    assert "apple - яблоко [A1] due" in out
    assert "about - о, около [A1] due" in out


def test_duplicate_add_fails(database_url: str, capsys: pytest.CaptureFixture) -> None:
    """Test adding a word twice exits with an error."""
    assert run(database_url, "add", "apple", "яблоко") == 0

    assert run(database_url, "add", "apple", "яблоко") == 1
    assert "already being studied" in capsys.readouterr().err


def test_learned_and_stats(database_url: str, capsys: pytest.CaptureFixture) -> None:
    """Test marking learned shows up in the statistics."""
    run(database_url, "add", "apple", "яблоко")
    run(database_url, "add", "pear", "груша")
    run(database_url, "learned", "apple")
    run(database_url, "custom", "add", "quince", "айва")
    capsys.readouterr()

    assert run(database_url, "stats") == 0

    out = capsys.readouterr().out
    assert "Learning: 2" in out
    assert "Learned: 1" in out
    assert "Learned today: 1" in out
    assert "Due now: 1" in out
    assert "Custom words: 1" in out


def test_remove_unknown_word_fails(database_url: str) -> None:
    """Test removing a word that is not studied."""
    assert run(database_url, "remove", "ghost") == 1


def test_unknown_level_fails(database_url: str, capsys: pytest.CaptureFixture) -> None:
    """Test browsing an unknown level."""
    assert run(database_url, "browse", "Z9") == 1
    assert "Unknown level" in capsys.readouterr().err


def test_invalid_log_level_is_a_usage_error(database_url: str, capsys: pytest.CaptureFixture) -> None:
    """Test an unknown --log-level is rejected before anything runs."""
    with pytest.raises(SystemExit) as exc_info:
        main(["--database", database_url, "--log-level", "bogus", "levels"])

    assert exc_info.value.code == 2
    assert "--log-level" in capsys.readouterr().err


def test_log_level_is_case_insensitive(database_url: str) -> None:
    """Test lower case log levels are accepted."""
    assert main(["--database", database_url, "--log-level", "warning", "levels"]) == 0
    assert logging.getLogger().level == logging.WARNING


def test_export_import(database_url: str, tmp_path: Path) -> None:
    """Test a backup can be imported into another database."""
    run(database_url, "add", "apple", "яблоко")
    backup = tmp_path / "backup.json"
    assert run(database_url, "export", str(backup)) == 0

    other_url = f"sqlite:///{tmp_path / 'other.db'}"
    assert run(other_url, "import", str(backup)) == 0

    (record,) = SqlWordRepository.from_url(other_url).load_all()
    assert record.word == "apple"


def test_clear_requires_confirmation(database_url: str) -> None:
    """Test clear only deletes with --yes."""
    run(database_url, "add", "apple", "яблоко")

    assert run(database_url, "clear") == 1
    assert len(SqlWordRepository.from_url(database_url).load_all()) == 1

    assert run(database_url, "clear", "--yes") == 0
    assert SqlWordRepository.from_url(database_url).load_all() == []


def test_review_session(repository: SqlWordRepository, now: datetime, capsys: pytest.CaptureFixture) -> None:
    """Test an interactive review grades every due word and saves."""
    setup = Cli(repository, JsonCatalog(DEFAULT_CATALOG_PATH), now=lambda: now)
    setup.service.create_record("apple", "яблоко", "A1", now)
    setup.service.create_record("pear", "груша", "A1", now)
    setup.save()

    cli = Cli(
        repository,
        JsonCatalog(DEFAULT_CATALOG_PATH),
        now=lambda: now,
        input_func=scripted_input(["", "what", "easy", "", "1"]),
    )
    cli.review(SimpleNamespace())

    out = capsys.readouterr().out
    assert "2 words to review" in out
    assert "Review session complete!" in out
    stored = {record.word: record for record in repository.load_all()}
    assert stored["apple"].schedule.total_answers == 1
    assert stored["apple"].schedule.difficulty == 0
    assert stored["pear"].schedule.difficulty == 1
    assert stored["pear"].schedule.next_review == now + timedelta(days=1)


def test_review_can_be_stopped(repository: SqlWordRepository, now: datetime, capsys: pytest.CaptureFixture) -> None:
    """Test quitting leaves unvisited words untouched."""
    setup = Cli(repository, JsonCatalog(DEFAULT_CATALOG_PATH), now=lambda: now)
    setup.service.create_record("apple", "яблоко", "A1", now)
    setup.service.create_record("pear", "груша", "A1", now)
    setup.save()

    cli = Cli(
        repository,
        JsonCatalog(DEFAULT_CATALOG_PATH),
        now=lambda: now,
        input_func=scripted_input(["", "good", "", "q"]),
    )
    cli.review(SimpleNamespace())

    assert "Review stopped, 1 of 2 words reviewed" in capsys.readouterr().out
    answers = sorted(record.schedule.total_answers for record in repository.load_all())
    assert answers == [0, 1]


def test_review_with_nothing_due(database_url: str, capsys: pytest.CaptureFixture) -> None:
    """Test review with an empty collection."""
    assert run(database_url, "review") == 0
    assert "Nothing to review" in capsys.readouterr().out
