"""
In-memory record store mirrored to a persistence slot.

The store owns the authoritative list. The slot only seeds it at
startup and is overwritten in full on every change.
"""

import logging
import threading
from typing import Iterable, Iterator, Optional

from parking_ocr.errors import DeserializationError
from parking_ocr.models.record import ParsedRecord
from parking_ocr.storage.backends import PersistencePort

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Ordered collection of parsed receipts.

    A corrupt slot does not stop startup: the store starts empty and
    keeps the reason in ``load_warning``.
    """

    def __init__(self, storage: PersistencePort):
        self._storage = storage
        self._lock = threading.Lock()
        self.load_warning: Optional[str] = None
        self._records: list[ParsedRecord] = self._load()

    def _load(self) -> list[ParsedRecord]:
        try:
            raw = self._storage.load()
            if raw is None:
                return []
            records = [ParsedRecord.from_dict(item) for item in raw]
        except DeserializationError as e:
            self.load_warning = f"Stored receipts could not be loaded and were ignored: {e}"
            logger.warning(self.load_warning)
            return []

        logger.info(f"Loaded {len(records)} stored records")
        return records

    def current(self) -> list[ParsedRecord]:
        """Return a copy of the records in display order."""
        return list(self._records)

    def replace(self, records: Iterable[ParsedRecord]) -> None:
        """Set the collection and persist it."""
        records = list(records)
        with self._lock:
            self._storage.save([record.to_dict() for record in records])
            self._records = records
        logger.info(f"Stored {len(records)} records")

    def clear(self) -> None:
        """Empty the collection and remove the persisted copy."""
        with self._lock:
            self._storage.delete()
            self._records = []
        logger.info("Cleared all stored records")

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ParsedRecord]:
        return iter(self.current())
