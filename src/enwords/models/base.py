"""Base model configuration."""
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import DateTime, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from enwords.config import settings

# Create declarative base class
Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """DateTime stored as naive UTC and loaded back as timezone-aware UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


def get_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create an engine for ``url``, defaulting to the configured database."""
    url = url or settings.database.url
    echo = settings.database.echo if echo is None else echo
    if url in ("sqlite://", "sqlite:///:memory:"):
        # Every session must see the same in-memory database
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Initialize database."""
    # Import models so their tables are registered on Base.metadata
    from enwords.models import models  # noqa: F401

    Base.metadata.create_all(bind=engine)  # Create tables if they don't exist
