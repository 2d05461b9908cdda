"""Exceptions raised by the review scheduler and its collaborators."""


class EnWordsError(Exception):
    """Base exception for the application."""
    pass


class DuplicateWordError(EnWordsError):
    """Raised when a word is already present in the collection."""

    def __init__(self, word: str, message: str = "Word is already being studied"):
        self.word = word
        self.message = message
        super().__init__(f"{message}: {word!r}")


class InvalidStateError(EnWordsError):
    """Raised when the review protocol is used out of order."""
    pass


class InvalidGradeError(EnWordsError, ValueError):
    """Raised when a review grade is outside 0..5."""

    def __init__(self, grade):
        self.grade = grade
        super().__init__(f"Grade must be an integer between 0 and 5, got {grade!r}")


class WordNotFoundError(EnWordsError, LookupError):
    """Raised when a word cannot be found."""

    def __init__(self, word: str, message: str = "Word not found"):
        self.word = word
        self.message = message
        super().__init__(f"{message}: {word!r}")


class UnknownLevelError(EnWordsError, LookupError):
    """Raised when a catalog has no such proficiency level."""

    def __init__(self, level: str):
        self.level = level
        super().__init__(f"Unknown level: {level!r}")


class StorageError(EnWordsError, OSError):
    """Raised by persistence collaborators when reading or writing fails."""
    pass


class CatalogFormatError(EnWordsError, ValueError):
    """Raised when a catalog file has an unexpected structure."""
    pass


class BackupFormatError(EnWordsError, ValueError):
    """Raised when a backup file cannot be imported."""
    pass
