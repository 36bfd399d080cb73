"""
Conflict detection between time intervals of the same doctor.

Intervals are half-open: [start, end). Touching endpoints do not overlap,
so back-to-back bookings are legal.
"""
from datetime import datetime
from typing import Iterable, Iterator, Optional


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Return True when [a_start, a_end) and [b_start, b_end) share any instant."""
    return a_start < b_end and a_end > b_start


def appointment_overlaps(first, second) -> bool:
    """Compare two appointments by their effective [start, end) intervals."""
    return overlaps(first.starts_at, first.ends_at, second.starts_at, second.ends_at)


def find_conflicts(start: datetime, end: datetime, items: Iterable, exclude_id: Optional[int] = None) -> Iterator:
    """
    Yield the items whose interval overlaps [start, end).

    Items expose ``id``, ``starts_at`` and ``ends_at`` (appointments and time
    slots both do).
    """
    for item in items:
        if exclude_id is not None and item.id == exclude_id:
            continue
        if overlaps(start, end, item.starts_at, item.ends_at):
            yield item


def has_conflict(start: datetime, end: datetime, items: Iterable, exclude_id: Optional[int] = None) -> bool:
    return next(find_conflicts(start, end, items, exclude_id), None) is not None
