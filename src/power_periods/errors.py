"""Exception types raised by power-periods."""


class PowerPeriodsError(Exception):
    """Base class for all power-periods errors."""


class ValidationError(PowerPeriodsError, ValueError):
    """Raised when caller-supplied input (dates, event records) is invalid."""


class EventSourceError(PowerPeriodsError):
    """Raised when an event source cannot produce a snapshot."""
