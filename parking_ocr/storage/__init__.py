"""Record storage with a pluggable persistence slot."""

from .backends import JsonFileStorage, MemoryStorage, PersistencePort
from .store import RecordStore

__all__ = ["JsonFileStorage", "MemoryStorage", "PersistencePort", "RecordStore"]
