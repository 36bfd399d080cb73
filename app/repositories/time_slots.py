from datetime import datetime
from typing import Iterable, List, Optional

from app.models import TimeSlot


class SqlAlchemyTimeSlotRepository:
    """Time slot store backed by the Flask-SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def _ordered(self, query):
        return query.order_by(TimeSlot.start_time, TimeSlot.doctor_id, TimeSlot.id)

    def get(self, slot_id: int) -> Optional[TimeSlot]:
        return self.session.get(TimeSlot, slot_id)

    def create(self, **fields) -> TimeSlot:
        slot = TimeSlot(**fields)
        self.session.add(slot)
        self.session.commit()
        return slot

    def create_many(self, rows: Iterable[dict]) -> List[TimeSlot]:
        """Insert every row in a single commit."""
        slots = [TimeSlot(**row) for row in rows]
        self.session.add_all(slots)
        self.session.commit()
        return slots

    def save(self, slot: TimeSlot) -> TimeSlot:
        self.session.commit()
        return slot

    def delete(self, slot: TimeSlot) -> None:
        self.session.delete(slot)
        self.session.commit()

    def list_all(self) -> List[TimeSlot]:
        return self._ordered(self.session.query(TimeSlot)).all()

    def list_for_doctor(self, doctor_id: int) -> List[TimeSlot]:
        return self._ordered(
            self.session.query(TimeSlot).filter(TimeSlot.doctor_id == doctor_id)
        ).all()

    def list_starting_between(self, start: datetime, end: datetime,
                              doctor_id: Optional[int] = None) -> List[TimeSlot]:
        query = self.session.query(TimeSlot).filter(
            TimeSlot.start_time >= start,
            TimeSlot.start_time < end,
        )
        if doctor_id is not None:
            query = query.filter(TimeSlot.doctor_id == doctor_id)
        return self._ordered(query).all()

    def delete_for_doctor_between(self, doctor_id: int, start: datetime, end: datetime) -> int:
        count = (
            self.session.query(TimeSlot)
            .filter(
                TimeSlot.doctor_id == doctor_id,
                TimeSlot.start_time >= start,
                TimeSlot.start_time < end,
            )
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return count

    def delete_ended_before(self, before: datetime) -> int:
        count = (
            self.session.query(TimeSlot)
            .filter(TimeSlot.end_time < before)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return count
