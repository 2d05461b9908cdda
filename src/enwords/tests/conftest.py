"""Test configuration."""
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Generator

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from faker import Faker

from enwords.models.base import create_session_factory, get_engine, init_db
from enwords.services.storage import SqlWordRepository
from enwords.services.word_service import WordService


@pytest.fixture
def fake() -> Faker:
    """Seeded faker instance."""
    faker = Faker()
    faker.seed_instance(1234)
    return faker


@pytest.fixture
def now() -> datetime:
    """Fixed wall-clock time used by the tests."""
    return datetime(2024, 3, 10, 9, 30, tzinfo=UTC)


@pytest.fixture
def word_service() -> WordService:
    """Create an empty word service."""
    return WordService()


@pytest.fixture
def repository() -> Generator[SqlWordRepository, None, None]:
    """Create a repository on a fresh in-memory database."""
    engine = get_engine("sqlite:///:memory:")
    init_db(engine)
    yield SqlWordRepository(create_session_factory(engine))
    engine.dispose()
