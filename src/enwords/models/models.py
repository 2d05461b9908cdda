"""Database models for stored study state."""
from sqlalchemy import Boolean, Column, Float, Integer, String

from enwords.models.base import Base, UTCDateTime


class StoredWord(Base):
    """A word record with its schedule flattened into columns."""

    __tablename__ = "word_records"

    id = Column(String, primary_key=True)
    word = Column(String, unique=True, nullable=False, index=True)
    translation = Column(String, nullable=False, default="")
    level = Column(String, nullable=False, default="")
    date_added = Column(UTCDateTime, nullable=False)
    is_learned = Column(Boolean, default=False, nullable=False)
    date_learned = Column(UTCDateTime, nullable=True)

    # Spaced repetition state
    ease_factor = Column(Float, nullable=False)
    interval = Column(Integer, nullable=False)
    repetitions = Column(Integer, nullable=False)
    next_review = Column(UTCDateTime, nullable=False)
    last_review = Column(UTCDateTime, nullable=True)
    correct_answers = Column(Integer, default=0, nullable=False)
    total_answers = Column(Integer, default=0, nullable=False)
    difficulty = Column(Integer, default=0, nullable=False)  # 0 = easy, 1 = medium, 2 = hard
    position = Column(Integer, default=0, nullable=False)  # order within the collection


class StoredCustomWord(Base):
    """A learner-defined catalog entry."""

    __tablename__ = "custom_words"

    id = Column(String, primary_key=True)
    word = Column(String, unique=True, nullable=False)
    translation = Column(String, nullable=False)
    level = Column(String, nullable=False, default="")
    date_added = Column(UTCDateTime, nullable=False)
    position = Column(Integer, default=0, nullable=False)
