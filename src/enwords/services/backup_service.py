"""Export and import of the study collection as JSON backups."""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

from enwords.exceptions import BackupFormatError, StorageError
from enwords.models.records import CustomWord, WordRecord, ensure_utc

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"


def backup_filename(now: datetime) -> str:
    """Get the default file name of a backup taken at ``now``."""
    return f"english-words-backup-{ensure_utc(now).date().isoformat()}.json"


def export_data(
    records: Iterable[WordRecord],
    custom_words: Iterable[CustomWord],
    now: datetime,
) -> Dict[str, Any]:
    """Build the backup document."""
    return {
        "learningWords": [record.to_dict() for record in records],
        "customWords": [custom.to_dict() for custom in custom_words],
        "exportDate": ensure_utc(now).isoformat(),
        "appVersion": BACKUP_VERSION,
    }


def write_backup(
    target: Union[str, Path],
    records: Iterable[WordRecord],
    custom_words: Iterable[CustomWord],
    now: datetime,
) -> Path:
    """Write a backup to ``target`` and return the file path.

    When ``target`` is an existing directory the file is created inside it
    with the default backup name.
    """
    path = Path(target)
    if path.is_dir():
        path = path / backup_filename(now)

    data = export_data(records, custom_words, now)
    try:
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
    except OSError as e:
        logger.error(f"Failed to write backup {path}: {e}")
        raise StorageError(f"Cannot write backup {path}: {e}") from e

    logger.info(
        f"Exported {len(data['learningWords'])} learning words and "
        f"{len(data['customWords'])} custom words to {path}"
    )
    return path


def parse_backup(data: Any) -> Tuple[List[WordRecord], List[CustomWord]]:
    """Turn a backup document into records and custom words."""
    if not isinstance(data, dict) or "learningWords" not in data or "customWords" not in data:
        raise BackupFormatError("Backup must contain learningWords and customWords")

    try:
        records = [WordRecord.from_dict(item) for item in data["learningWords"]]
        custom_words = [CustomWord.from_dict(item) for item in data["customWords"]]
    except (KeyError, TypeError, ValueError) as e:
        raise BackupFormatError(f"Invalid backup entry: {e}") from e
    return records, custom_words


def read_backup(path: Union[str, Path]) -> Tuple[List[WordRecord], List[CustomWord]]:
    """Read a backup written by ``write_backup``."""
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        logger.error(f"Failed to read backup {path}: {e}")
        raise StorageError(f"Cannot read backup {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise BackupFormatError(f"Backup {path} is not valid JSON: {e}") from e

    return parse_backup(data)
