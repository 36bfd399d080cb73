"""
Scheduling error taxonomy.

InvalidArgument  - malformed input, raised before any store access
NotFound         - referenced patient / doctor / appointment / slot does not exist
Conflict         - business rule violation (double booking, unavailable doctor, ...)
IllegalTransition - appointment state machine violation (a Conflict)
"""


class SchedulingError(Exception):
    """Base class for all scheduling errors."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidArgument(SchedulingError):
    pass


class NotFound(SchedulingError):
    pass


class Conflict(SchedulingError):
    pass


class IllegalTransition(Conflict):
    pass
