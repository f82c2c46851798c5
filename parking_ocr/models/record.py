"""
Parsed receipt record model.

A record is produced once per uploaded image and never mutated afterwards.
The JSON form is the one persisted to the local storage slot.
"""

from dataclasses import dataclass
from typing import Any

from parking_ocr.errors import DeserializationError

# Placeholder for a field the parser could not find
NOT_FOUND = "Not found"


@dataclass(frozen=True)
class ParsedRecord:
    """One recognized parking receipt."""
    image: str  # data URL of the original upload
    date: str = NOT_FOUND
    cost: str = NOT_FOUND

    @property
    def has_date(self) -> bool:
        return self.date != NOT_FOUND

    @property
    def has_cost(self) -> bool:
        return self.cost != NOT_FOUND

    def to_dict(self) -> dict[str, str]:
        """Convert to the persisted JSON shape."""
        return {"date": self.date, "cost": self.cost, "image": self.image}

    @classmethod
    def from_dict(cls, data: Any) -> "ParsedRecord":
        """
        Build a record from its persisted JSON shape.

        Missing date/cost fall back to the sentinel; a missing or
        non-string image is rejected.

        Raises:
            DeserializationError: If the entry is not a usable record
        """
        if not isinstance(data, dict):
            raise DeserializationError(f"Expected a record object, got {type(data).__name__}")

        image = data.get("image")
        if not isinstance(image, str) or not image:
            raise DeserializationError("Record is missing its image")

        date = data.get("date")
        cost = data.get("cost")
        return cls(
            image=image,
            date=date if isinstance(date, str) else NOT_FOUND,
            cost=cost if isinstance(cost, str) else NOT_FOUND,
        )
