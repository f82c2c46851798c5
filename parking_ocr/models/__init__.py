"""Data models for scanned parking receipts."""

from .record import NOT_FOUND, ParsedRecord

__all__ = ["NOT_FOUND", "ParsedRecord"]
