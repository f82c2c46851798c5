"""
Date and cost extraction from raw OCR text.

The cost pattern only accepts amounts preceded by a hyphen: parking
receipts print the charged amount as a deduction (``-$3.50``).
"""

import re
from typing import NamedTuple, Optional

from parking_ocr.models.record import NOT_FOUND

_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E]")
_WHITESPACE_RE = re.compile(r"\s+")

DATE_RE = re.compile(r"(\d{2}[/\-.]\d{2}[/\-.]\d{2,4})\s*(\d{2}:\d{2})?")
COST_RE = re.compile(r"-\s*\$?(\d+\.\d{2})")


class ParsedFields(NamedTuple):
    """Fields extracted from one receipt."""
    date: str
    cost: str


def clean_text(raw_text: Optional[str]) -> str:
    """Strip non-printable ASCII and collapse whitespace runs."""
    text = _NON_PRINTABLE_RE.sub("", raw_text or "")
    return _WHITESPACE_RE.sub(" ", text)


def extract_date(text: str) -> str:
    match = DATE_RE.search(text)
    if not match:
        return NOT_FOUND
    return f"{match.group(1)} {match.group(2) or ''}".strip()


def extract_cost(text: str) -> str:
    match = COST_RE.search(text)
    if not match:
        return NOT_FOUND
    return f"${match.group(1)}"


def parse(raw_text: Optional[str]) -> ParsedFields:
    """
    Extract the date and cost from recognized receipt text.

    Missing fields are reported as ``"Not found"``; this never raises.
    """
    text = clean_text(raw_text)
    return ParsedFields(date=extract_date(text), cost=extract_cost(text))
