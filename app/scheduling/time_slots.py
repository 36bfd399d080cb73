"""
Time slot lifecycle: single and bulk creation, blocking, deletion and the
date-scoped reads used by the API.
"""
import logging
from datetime import timedelta
from typing import List, Optional

from .availability import AvailabilityResolver
from .clock import as_date, as_time, combine, day_bounds, utcnow
from .conflicts import has_conflict
from .errors import Conflict, InvalidArgument, NotFound
from .validation import (
    MAX_APPOINTMENT_MINUTES,
    MAX_SLOT_DURATION,
    MIN_SLOT_DURATION,
    clean_text,
    require_id,
    validate_date_range,
    validate_not_past,
    validate_slot_interval,
)

logger = logging.getLogger(__name__)


class TimeSlotManager:
    """
    Create, change and query a doctor's time slots.

    Args:
        doctors: DoctorRepository
        time_slots: TimeSlotRepository
        resolver: AvailabilityResolver used for the available-slot reads
        clock: Callable returning the current naive UTC datetime
    """

    def __init__(self, doctors, time_slots, resolver: Optional[AvailabilityResolver] = None, clock=utcnow):
        self.doctors = doctors
        self.time_slots = time_slots
        self.resolver = resolver
        self.clock = clock

    def get(self, slot_id: int):
        require_id(slot_id, 'TimeSlot')
        slot = self.time_slots.get(slot_id)
        if slot is None:
            raise NotFound(f"TimeSlot with ID {slot_id} not found")
        return slot

    def list_all(self) -> List:
        return self.time_slots.list_all()

    def list_for_doctor(self, doctor_id: int) -> List:
        self._require_doctor(doctor_id)
        return self.time_slots.list_for_doctor(doctor_id)

    def list_available_for_doctor(self, doctor_id: int) -> List:
        """Persisted slots of the doctor that are currently usable."""
        self._require_doctor(doctor_id)
        now = self.clock()
        return [slot for slot in self.time_slots.list_for_doctor(doctor_id) if slot.is_usable(now)]

    def list_on(self, day) -> List:
        self._require_day(day)
        start, end = day_bounds(day)
        return self.time_slots.list_starting_between(start, end)

    def list_for_doctor_on(self, doctor_id: int, day) -> List:
        require_id(doctor_id, 'Doctor')
        self._require_day(day)
        self._require_doctor(doctor_id)
        start, end = day_bounds(day)
        return self.time_slots.list_starting_between(start, end, doctor_id=doctor_id)

    def list_between(self, start_date, end_date) -> List:
        self._require_range(start_date, end_date)
        return self.time_slots.list_starting_between(day_bounds(start_date)[0], day_bounds(end_date)[1])

    def list_for_doctor_between(self, doctor_id: int, start_date, end_date) -> List:
        require_id(doctor_id, 'Doctor')
        self._require_range(start_date, end_date)
        self._require_doctor(doctor_id)
        return self.time_slots.list_starting_between(
            day_bounds(start_date)[0], day_bounds(end_date)[1], doctor_id=doctor_id
        )

    def available_on(self, doctor_id: int, day) -> List:
        return self._resolver().resolve(doctor_id, day)

    def available_between(self, doctor_id: int, start_date, end_date) -> List:
        return self._resolver().resolve(doctor_id, start_date, end_date)

    def create(self, doctor_id: int, start_time, end_time):
        """
        Persist one available slot.

        Raises:
            InvalidArgument: bad id, past start, or a length outside 15 minutes to 8 hours
            NotFound: the doctor does not exist
            Conflict: the interval overlaps another slot of the doctor
        """
        require_id(doctor_id, 'Doctor')
        now = self.clock()
        validate_slot_interval(start_time, end_time, now=now)

        if self.doctors.lock(doctor_id) is None:
            raise NotFound(f"Doctor with ID {doctor_id} not found")
        if self._overlaps_existing(doctor_id, start_time, end_time):
            logger.warning("Rejected slot %s - %s for doctor %s: overlaps an existing slot",
                           start_time, end_time, doctor_id)
            raise Conflict("This time slot conflicts with an existing slot for the doctor")

        slot = self.time_slots.create(
            doctor_id=doctor_id,
            start_time=start_time,
            end_time=end_time,
            is_available=True,
            is_blocked=False,
            created_at=now,
        )
        logger.info("Time slot %s created for doctor %s: %s - %s", slot.id, doctor_id, start_time, end_time)
        return slot

    def bulk_create(self, doctor_id: int, day, start_time_of_day, end_time_of_day,
                    slot_minutes: int) -> List:
        """
        Fill [start_time_of_day, end_time_of_day) on ``day`` with back-to-back slots.

        Candidates that overlap an existing slot, or that already started,
        are skipped. The survivors are written in one commit.

        Raises:
            InvalidArgument: bad id, past day, empty window, or bad slot length
            NotFound: the doctor does not exist
            Conflict: no candidate survived
        """
        require_id(doctor_id, 'Doctor')
        if day is None or start_time_of_day is None or end_time_of_day is None:
            raise InvalidArgument("Date, start time and end time are required")
        now = self.clock()
        validate_not_past(day, now.date())
        start_tod, end_tod = as_time(start_time_of_day), as_time(end_time_of_day)
        if start_tod >= end_tod:
            raise InvalidArgument("Start time must be before end time")
        if slot_minutes is None or slot_minutes <= 0 or slot_minutes > MAX_APPOINTMENT_MINUTES:
            raise InvalidArgument(f"Slot duration must be between 1 and {MAX_APPOINTMENT_MINUTES} minutes")
        step = timedelta(minutes=slot_minutes)
        if step < MIN_SLOT_DURATION:
            raise InvalidArgument("Time slot must be at least 15 minutes")

        if self.doctors.lock(doctor_id) is None:
            raise NotFound(f"Doctor with ID {doctor_id} not found")

        window_start = combine(as_date(day), start_tod)
        window_end = combine(as_date(day), end_tod)
        existing = self.time_slots.list_starting_between(
            window_start - MAX_SLOT_DURATION, window_end, doctor_id=doctor_id
        )

        rows = []
        skipped = 0
        cursor = window_start
        while cursor + step <= window_end:
            slot_end = cursor + step
            if cursor < now or has_conflict(cursor, slot_end, existing):
                skipped += 1
            else:
                rows.append({
                    'doctor_id': doctor_id,
                    'start_time': cursor,
                    'end_time': slot_end,
                    'is_available': True,
                    'is_blocked': False,
                    'created_at': now,
                })
            cursor = slot_end

        if not rows:
            raise Conflict("No valid time slots could be created for the specified date and time range")

        slots = self.time_slots.create_many(rows)
        logger.info("Bulk created %d slots for doctor %s on %s (%d skipped)",
                    len(slots), doctor_id, as_date(day), skipped)
        return slots

    def update(self, slot_id: int, start_time, end_time, is_available: bool = True,
               is_blocked: bool = False, block_reason: Optional[str] = None):
        """Rewrite a slot. Past starts are allowed here; blocking forces the slot unavailable."""
        require_id(slot_id, 'TimeSlot')
        validate_slot_interval(start_time, end_time)
        block_reason = clean_text(block_reason, 'Block reason')

        slot = self.get(slot_id)
        self.doctors.lock(slot.doctor_id)
        if self._overlaps_existing(slot.doctor_id, start_time, end_time, exclude_id=slot.id):
            raise Conflict("This time slot conflicts with another existing slot")

        slot.start_time = start_time
        slot.end_time = end_time
        slot.is_blocked = bool(is_blocked)
        slot.is_available = bool(is_available) and not slot.is_blocked
        slot.block_reason = block_reason
        slot.updated_at = self.clock()
        self.time_slots.save(slot)
        logger.info("Time slot %s updated: %s - %s", slot.id, start_time, end_time)
        return slot

    def block(self, slot_id: int, reason: Optional[str] = None):
        reason = clean_text(reason, 'Block reason')
        slot = self.get(slot_id)
        slot.is_blocked = True
        slot.is_available = False
        slot.block_reason = reason
        slot.updated_at = self.clock()
        self.time_slots.save(slot)
        logger.info("Time slot %s blocked", slot.id)
        return slot

    def unblock(self, slot_id: int):
        slot = self.get(slot_id)
        slot.is_blocked = False
        slot.is_available = True
        slot.block_reason = None
        slot.updated_at = self.clock()
        self.time_slots.save(slot)
        logger.info("Time slot %s unblocked", slot.id)
        return slot

    def delete(self, slot_id: int) -> bool:
        require_id(slot_id, 'TimeSlot')
        slot = self.time_slots.get(slot_id)
        if slot is None:
            return False
        self.time_slots.delete(slot)
        logger.info("Time slot %s deleted", slot_id)
        return True

    def delete_for_doctor_on(self, doctor_id: int, day) -> int:
        """Delete every slot of the doctor starting on ``day``; returns the number removed."""
        require_id(doctor_id, 'Doctor')
        if day is None:
            raise InvalidArgument("Date is required")
        self._require_doctor(doctor_id)
        start, end = day_bounds(day)
        count = self.time_slots.delete_for_doctor_between(doctor_id, start, end)
        logger.info("Deleted %d slots of doctor %s on %s", count, doctor_id, as_date(day))
        return count

    def purge_expired(self, before=None) -> int:
        """Delete slots that ended before ``before`` (default: now)."""
        before = before or self.clock()
        count = self.time_slots.delete_ended_before(before)
        logger.info("Purged %d time slots that ended before %s", count, before)
        return count

    def _overlaps_existing(self, doctor_id, start, end, exclude_id=None) -> bool:
        # Slots are at most MAX_SLOT_DURATION long, so nothing starting earlier can reach `start`
        nearby = self.time_slots.list_starting_between(start - MAX_SLOT_DURATION, end, doctor_id=doctor_id)
        return any(slot.id != exclude_id and slot.overlaps_with(start, end) for slot in nearby)

    def _require_doctor(self, doctor_id):
        require_id(doctor_id, 'Doctor')
        if not self.doctors.exists(doctor_id):
            raise NotFound(f"Doctor with ID {doctor_id} not found")

    def _require_day(self, day):
        if day is None:
            raise InvalidArgument("Date is required")
        validate_not_past(day, self.clock().date())

    def _require_range(self, start_date, end_date):
        if start_date is None or end_date is None:
            raise InvalidArgument("Start date and end date are required")
        validate_date_range(start_date, end_date, self.clock().date())

    def _resolver(self) -> AvailabilityResolver:
        if self.resolver is None:
            raise RuntimeError("TimeSlotManager was built without an AvailabilityResolver")
        return self.resolver
