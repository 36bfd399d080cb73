"""
Slot Generator

Produces the canonical grid of bookable intervals for a doctor on one day,
given a working-hours window and a fixed granularity.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

from .clock import as_date
from .errors import InvalidArgument

DEFAULT_START_HOUR = 9
DEFAULT_END_HOUR = 17
DEFAULT_SLOT_MINUTES = 30


@dataclass(frozen=True)
class CandidateSlot:
    doctor_id: int
    start_time: datetime
    end_time: datetime

    @property
    def starts_at(self):
        return self.start_time

    @property
    def ends_at(self):
        return self.end_time


class SlotGrid:
    """
    Restartable grid of [start, start + slot_minutes) intervals.

    Every iteration walks the window again, so the same arguments always
    produce the same sequence. When ``now`` is set, intervals starting at or
    before it are skipped.
    """

    def __init__(self, doctor_id: int, day: date, start_hour: int, end_hour: int,
                 slot_minutes: int, now: Optional[datetime] = None):
        if not 0 <= start_hour < end_hour <= 24:
            raise InvalidArgument("Working hours must satisfy 0 <= start hour < end hour <= 24")
        if slot_minutes is None or slot_minutes <= 0:
            raise InvalidArgument("Slot duration must be greater than 0 minutes")

        self.doctor_id = doctor_id
        self.day = as_date(day)
        self.start_hour = start_hour
        self.end_hour = end_hour
        self.slot_minutes = slot_minutes
        self.now = now

    @property
    def window(self):
        midnight = datetime.combine(self.day, time.min)
        return (midnight + timedelta(hours=self.start_hour),
                midnight + timedelta(hours=self.end_hour))

    def __iter__(self) -> Iterator[CandidateSlot]:
        window_start, window_end = self.window
        step = timedelta(minutes=self.slot_minutes)
        cursor = window_start
        while cursor + step <= window_end:
            if self.now is None or cursor > self.now:
                yield CandidateSlot(self.doctor_id, cursor, cursor + step)
            cursor += step

    def __repr__(self):
        return (f"<SlotGrid doctor={self.doctor_id} {self.day.isoformat()} "
                f"{self.start_hour:02d}:00-{self.end_hour:02d}:00 every {self.slot_minutes}m>")


def generate_grid(doctor_id, day, start_hour=DEFAULT_START_HOUR, end_hour=DEFAULT_END_HOUR,
                  slot_minutes=DEFAULT_SLOT_MINUTES, now=None) -> SlotGrid:
    """Build the slot grid for ``doctor_id`` on ``day``."""
    return SlotGrid(doctor_id, day, start_hour, end_hour, slot_minutes, now=now)
