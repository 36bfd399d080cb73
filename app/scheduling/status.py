import enum


class AppointmentStatus(str, enum.Enum):
    """Appointment lifecycle states."""

    SCHEDULED = 'scheduled'
    CONFIRMED = 'confirmed'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    NO_SHOW = 'no_show'

    @property
    def display(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def values(cls):
        return [member.value for member in cls]


_DISPLAY_NAMES = {
    AppointmentStatus.SCHEDULED: 'Scheduled',
    AppointmentStatus.CONFIRMED: 'Confirmed',
    AppointmentStatus.IN_PROGRESS: 'In Progress',
    AppointmentStatus.COMPLETED: 'Completed',
    AppointmentStatus.CANCELLED: 'Cancelled',
    AppointmentStatus.NO_SHOW: 'No Show',
}
