"""Catalogs of candidate words keyed by proficiency level."""
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from enwords.exceptions import CatalogFormatError, StorageError, UnknownLevelError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """A candidate word offered by a catalog."""
    word: str
    translation: str
    level: str
    category: str = ""
    pos: str = ""


class CatalogProvider(ABC):
    """Read-only source of candidate words."""

    @abstractmethod
    def levels(self) -> List[str]:
        """Get the levels this catalog knows about."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def words_for_level(self, level: str) -> List[CatalogEntry]:
        """Get the words of ``level``.

        An empty list means the level exists but has no words.

        Raises:
            UnknownLevelError: If the catalog has no such level.
        """
        raise NotImplementedError("Subclasses must implement this method")

    def find(self, level: str, word: str) -> Optional[CatalogEntry]:
        """Find ``word`` within ``level``."""
        for entry in self.words_for_level(level):
            if entry.word == word:
                return entry
        return None


def _parse_entries(level: str, items: Any) -> List[CatalogEntry]:
    if not isinstance(items, (list, tuple)):
        raise CatalogFormatError(f"Level {level!r} must map to a list of words")
    entries = []
    for item in items:
        if isinstance(item, CatalogEntry):
            entries.append(item)
            continue
        try:
            entries.append(
                CatalogEntry(
                    word=item["word"],
                    translation=item["translation"],
                    level=level,
                    category=item.get("category", ""),
                    pos=item.get("pos", ""),
                )
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise CatalogFormatError(f"Invalid entry in level {level!r}: {item!r}") from e
    return entries


class InMemoryCatalog(CatalogProvider):
    """Catalog held in a mapping of level to entries."""

    def __init__(self, words: Mapping[str, Sequence[Union[CatalogEntry, Dict[str, Any]]]]):
        self._words: Dict[str, List[CatalogEntry]] = {}
        for level, items in words.items():
            self._words[level] = _parse_entries(level, items)

    def levels(self) -> List[str]:
        return list(self._words)

    def words_for_level(self, level: str) -> List[CatalogEntry]:
        if level not in self._words:
            raise UnknownLevelError(level)
        return list(self._words[level])


class JsonCatalog(CatalogProvider):
    """Catalog read lazily from a JSON file of ``{level: [entries]}``."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._catalog: Optional[InMemoryCatalog] = None

    def _load(self) -> InMemoryCatalog:
        if self._catalog is not None:
            return self._catalog

        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            logger.error(f"Failed to read catalog {self.path}: {e}")
            raise StorageError(f"Cannot read catalog {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise CatalogFormatError(f"Catalog {self.path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise CatalogFormatError(f"Catalog {self.path} must be an object keyed by level")

        self._catalog = InMemoryCatalog(data)
        logger.info(f"Loaded catalog {self.path} with levels {self._catalog.levels()}")
        return self._catalog

    def levels(self) -> List[str]:
        return self._load().levels()

    def words_for_level(self, level: str) -> List[CatalogEntry]:
        return self._load().words_for_level(level)
