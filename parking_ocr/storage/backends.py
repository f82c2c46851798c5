"""
Persistence slots for the record store.

A slot holds one JSON-serialized list of records under a single key.
It is read once at startup, rewritten in full on every change and
removed on clear.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

from parking_ocr.errors import DeserializationError

logger = logging.getLogger(__name__)


class PersistencePort(Protocol):
    """Durable storage for the serialized record list."""

    def load(self) -> Optional[list[dict]]:
        """Return the stored list, or None when nothing is stored."""
        ...

    def save(self, records: list[dict]) -> None:
        """Overwrite the stored list."""
        ...

    def delete(self) -> None:
        """Remove the stored list entirely."""
        ...


def _decode(raw: str, source: str) -> list[dict]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DeserializationError(f"Corrupt record data in {source}: {e}") from e

    if not isinstance(data, list):
        raise DeserializationError(
            f"Expected a list of records in {source}, got {type(data).__name__}"
        )
    return data


class JsonFileStorage:
    """Stores the slot as ``<directory>/<key>.json``."""

    def __init__(self, directory: Union[str, Path], key: str = "parkingData"):
        self.directory = Path(directory)
        self.key = key

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def load(self) -> Optional[list[dict]]:
        """
        Read the slot.

        Raises:
            DeserializationError: If the file is not a JSON list
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise DeserializationError(f"Could not read {self.path}: {e}") from e

        return _decode(raw, str(self.path))

    def save(self, records: list[dict]) -> None:
        """Write the slot atomically via a temp file in the same directory."""
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.directory, prefix=f".{self.key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        logger.debug(f"Saved {len(records)} records to {self.path}")

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)


class MemoryStorage:
    """In-process slot keeping the serialized JSON string."""

    def __init__(self, initial: Optional[str] = None):
        self.raw = initial

    def load(self) -> Optional[list[dict]]:
        if self.raw is None:
            return None
        return _decode(self.raw, "memory storage")

    def save(self, records: list[dict]) -> None:
        self.raw = json.dumps(records)

    def delete(self) -> None:
        self.raw = None
