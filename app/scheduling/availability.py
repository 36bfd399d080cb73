"""
Availability Resolver

Turns a doctor's persisted slots (or, on days without any, the generated
working-hours grid) into the list of intervals that can actually be booked,
by removing blocked slots, past slots and slots taken by appointments.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterator, List, Optional

from .clock import as_date, day_bounds, iter_days, utcnow
from .conflicts import has_conflict
from .errors import InvalidArgument, NotFound
from .slots import DEFAULT_END_HOUR, DEFAULT_SLOT_MINUTES, DEFAULT_START_HOUR, SlotGrid
from .validation import require_id, validate_date_range, validate_not_past

logger = logging.getLogger(__name__)

SOURCE_PERSISTED = 'persisted'
SOURCE_GENERATED = 'generated'


@dataclass(frozen=True)
class AvailableSlot:
    doctor_id: int
    start_time: datetime
    end_time: datetime
    slot_id: Optional[int] = None
    source: str = SOURCE_GENERATED

    @property
    def starts_at(self):
        return self.start_time

    @property
    def ends_at(self):
        return self.end_time

    @property
    def duration_minutes(self):
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def to_dict(self):
        return {
            'doctor_id': self.doctor_id,
            'slot_id': self.slot_id,
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat(),
            'duration_minutes': self.duration_minutes,
            'source': self.source,
        }


class AvailabilityResolver:
    """
    Resolve bookable intervals for a doctor over a date or a date range.

    Args:
        doctors: DoctorRepository
        appointments: AppointmentRepository
        time_slots: TimeSlotRepository
        clock: Callable returning the current naive UTC datetime
        start_hour, end_hour, slot_minutes: Working-day grid used on days
            without persisted slots
        exact_start_match: Exclude a candidate only when a booking starts at
            exactly the same instant, instead of on any interval overlap
    """

    def __init__(self, doctors, appointments, time_slots, clock=utcnow,
                 start_hour: int = DEFAULT_START_HOUR, end_hour: int = DEFAULT_END_HOUR,
                 slot_minutes: int = DEFAULT_SLOT_MINUTES, exact_start_match: bool = False):
        self.doctors = doctors
        self.appointments = appointments
        self.time_slots = time_slots
        self.clock = clock
        self.start_hour = start_hour
        self.end_hour = end_hour
        self.slot_minutes = slot_minutes
        self.exact_start_match = exact_start_match

    def resolve(self, doctor_id: int, start_date, end_date=None) -> List[AvailableSlot]:
        """
        Return the bookable slots of ``doctor_id``, ascending by start time.

        With only ``start_date`` a single day is resolved. With ``end_date``
        the inclusive range [start_date, end_date] is resolved.

        Raises:
            InvalidArgument: bad doctor id, past date, or start_date >= end_date
            NotFound: the doctor does not exist
        """
        require_id(doctor_id, 'Doctor')
        now = self.clock()
        today = now.date()
        if end_date is None:
            validate_not_past(start_date, today)
            end_date = start_date
        else:
            validate_date_range(start_date, end_date, today)

        doctor = self.doctors.get(doctor_id)
        if doctor is None:
            raise NotFound(f"Doctor with ID {doctor_id} not found")
        if not doctor.is_available:
            logger.info("Doctor %s is not accepting appointments, no availability returned", doctor_id)
            return []

        first, last = as_date(start_date), as_date(end_date)
        # Bookings from the evening before can run past midnight
        booked = self.appointments.list_active_for_doctor_between(
            doctor_id, first - timedelta(days=1), last
        )
        persisted = self._persisted_by_day(doctor_id, first, last)

        seen = set()
        available = []
        for day in iter_days(first, last):
            for candidate in self._candidates(doctor_id, day, persisted.get(day), now):
                key = (candidate.start_time, candidate.end_time)
                if key in seen or self._is_booked(candidate, booked):
                    continue
                seen.add(key)
                available.append(candidate)

        available.sort(key=lambda slot: (slot.start_time, slot.end_time))
        logger.debug("Resolved %d available slots for doctor %s between %s and %s",
                     len(available), doctor_id, first, last)
        return available

    def is_slot_available(self, doctor_id: int, start: datetime, end: datetime) -> bool:
        """
        True when [start, end) is in the future, fits inside a usable slot of
        the doctor (or inside the working-day window on days without persisted
        slots) and no booking overlaps it.
        """
        require_id(doctor_id, 'Doctor')
        if start is None or end is None or start >= end:
            raise InvalidArgument("Start time must be before end time")

        doctor = self.doctors.get(doctor_id)
        if doctor is None:
            raise NotFound(f"Doctor with ID {doctor_id} not found")

        now = self.clock()
        if start <= now or not doctor.is_available:
            return False

        day = start.date()
        day_start, day_end = day_bounds(day)
        rows = self.time_slots.list_starting_between(day_start, day_end, doctor_id=doctor_id)
        if rows:
            fits = any(
                slot.is_usable(now) and slot.start_time <= start and end <= slot.end_time
                for slot in rows
            )
        else:
            window_start, window_end = self._grid(doctor_id, day, None).window
            fits = window_start <= start and end <= window_end
        if not fits:
            return False

        booked = self.appointments.list_active_for_doctor_between(
            doctor_id, day - timedelta(days=1), end.date()
        )
        return not has_conflict(start, end, booked)

    def _grid(self, doctor_id, day, now) -> SlotGrid:
        return SlotGrid(doctor_id, day, self.start_hour, self.end_hour, self.slot_minutes, now=now)

    def _persisted_by_day(self, doctor_id, first, last) -> Dict:
        range_start, _ = day_bounds(first)
        _, range_end = day_bounds(last)
        by_day = defaultdict(list)
        for slot in self.time_slots.list_starting_between(range_start, range_end, doctor_id=doctor_id):
            by_day[slot.start_time.date()].append(slot)
        return by_day

    def _candidates(self, doctor_id, day, rows, now) -> Iterator[AvailableSlot]:
        if rows:
            for slot in rows:
                if slot.is_usable(now):
                    yield AvailableSlot(doctor_id, slot.start_time, slot.end_time,
                                        slot_id=slot.id, source=SOURCE_PERSISTED)
            return

        for candidate in self._grid(doctor_id, day, now):
            yield AvailableSlot(doctor_id, candidate.start_time, candidate.end_time)

    def _is_booked(self, candidate: AvailableSlot, booked) -> bool:
        if self.exact_start_match:
            return any(appointment.starts_at == candidate.start_time for appointment in booked)
        return has_conflict(candidate.start_time, candidate.end_time, booked)
