"""Shared helpers for planner modules."""

from __future__ import annotations

from datetime import date, timedelta
from typing import List

from mealwise.errors import InvalidInputError
from mealwise.models.suggestion import ConstraintSpec


def parse_iso_date(value: str | date, *, field: str = "date") -> date:
    """Parse a YYYY-MM-DD string, raising InvalidInputError when malformed."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise InvalidInputError(f"Valid {field} (YYYY-MM-DD) is required, got {value!r}") from exc


def validate_skip_slots(spec: ConstraintSpec) -> None:
    """Reject skip indices that do not name a slot in the requested span."""
    unknown = [index for index in spec.days_to_skip if not 0 <= index < spec.days]
    if unknown:
        raise InvalidInputError(
            f"Unknown slot index(es) {unknown}; expected values between 0 and {spec.days - 1}"
        )


def span_dates(start: date, days: int) -> List[date]:
    """Return ``days`` consecutive dates beginning at ``start``."""
    if days < 1:
        raise InvalidInputError("A planning span must cover at least one day")
    return [start + timedelta(days=offset) for offset in range(days)]
