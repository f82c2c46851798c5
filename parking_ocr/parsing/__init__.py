"""Field extraction and chronological ordering of recognized receipts."""

from .dates import DATE_PATTERN_VERSION, parse_record_date, sort_records
from .fields import ParsedFields, clean_text, parse

__all__ = [
    "DATE_PATTERN_VERSION",
    "ParsedFields",
    "clean_text",
    "parse",
    "parse_record_date",
    "sort_records",
]
