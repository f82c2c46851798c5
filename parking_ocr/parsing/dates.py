"""
Receipt date parsing and chronological sorting.

Dates are read day-first with an explicit list of accepted layouts.
Bump DATE_PATTERN_VERSION whenever DATE_FORMATS changes.
"""

import logging
import re
from datetime import datetime
from typing import Iterable, Optional

from parking_ocr.models.record import ParsedRecord

logger = logging.getLogger(__name__)

DATE_PATTERN_VERSION = 1

DATE_FORMATS = (
    "%d/%m/%Y %H:%M",
    "%d/%m/%y %H:%M",
    "%d/%m/%Y",
    "%d/%m/%y",
)

# One separator kind per date: 12/05/24 or 12-05-24, not 12/05-24
_SHAPE_RE = re.compile(r"^\d{2}([/\-.])\d{2}\1(\d{2}|\d{4})( \d{2}:\d{2})?$")


def parse_record_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a record date such as ``12/05/24 14:30`` or ``12.05.2024``.

    Returns:
        The parsed datetime, or None for ``"Not found"`` and anything else
        outside DATE_FORMATS
    """
    if not value:
        return None

    match = _SHAPE_RE.match(value.strip())
    if not match:
        return None

    normalized = value.strip().replace(match.group(1), "/", 2)
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(normalized, fmt)
        except ValueError:
            continue
    return None


def sort_records(records: Iterable[ParsedRecord]) -> list[ParsedRecord]:
    """
    Sort records oldest first.

    Records whose date cannot be parsed go last, in their original order.
    """
    records = list(records)
    keyed = [(parse_record_date(record.date), record) for record in records]

    unparsed = sum(1 for when, _ in keyed if when is None)
    if unparsed:
        logger.debug(f"{unparsed} of {len(records)} records have no usable date")

    keyed.sort(key=lambda item: (item[0] is None, item[0] or datetime.min))
    return [record for _, record in keyed]
