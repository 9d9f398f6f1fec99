"""Calendar-date query windows resolved with a fixed UTC offset."""

import datetime
import re
from typing import Optional, Union

import numpy as np

from power_periods.errors import ValidationError
from power_periods.event import BaseRecord

__all__ = [
    "DEFAULT_UTC_OFFSET_HOURS",
    "Window",
    "local_date",
    "local_midnight",
    "offset_delta",
    "parse_date",
]

DEFAULT_UTC_OFFSET_HOURS = 2.0

ONE_DAY = np.timedelta64(1, "D")
ONE_MS = np.timedelta64(1, "ms")

# Whole local days whose bounds fit datetime64[ns] for any UTC offset.
MIN_DATE = datetime.date(1678, 1, 1)
MAX_DATE = datetime.date(2261, 12, 31)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = Union[str, datetime.date]


def parse_date(value: Optional[DateLike], name: str = "date") -> datetime.date:
    """Parse a ``YYYY-MM-DD`` calendar date.

    Args:
        value: The date string (or an already-parsed date).
        name: Field name used in error messages.

    Raises:
        ValidationError: If the value is missing or is not a valid date.
    """
    if value is None or value == "":
        raise ValidationError(f"{name} is required")
    if isinstance(value, datetime.datetime):
        raise ValidationError(f"{name} must be a calendar date, got {value!r}")
    if isinstance(value, datetime.date):
        date = value
    elif not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        raise ValidationError(f"invalid {name}: {value!r} (expected YYYY-MM-DD)")
    else:
        try:
            date = datetime.date.fromisoformat(value.strip())
        except ValueError as e:
            raise ValidationError(f"invalid {name}: {value!r} - {e}") from e
    if not MIN_DATE <= date <= MAX_DATE:
        raise ValidationError(
            f"invalid {name}: {value!r} (supported range {MIN_DATE} to {MAX_DATE})"
        )
    return date


def offset_delta(hours: float) -> np.timedelta64:
    """Fixed UTC offset as a nanosecond timedelta64 (minute resolution)."""
    return np.timedelta64(round(hours * 60), "m").astype("timedelta64[ns]")


def local_midnight(instant: np.datetime64, utc_offset: np.timedelta64) -> np.datetime64:
    """UTC instant of the local midnight that starts ``instant``'s local day."""
    local_day = (instant + utc_offset).astype("datetime64[D]")
    return local_day.astype("datetime64[ns]") - utc_offset


def local_date(instant: np.datetime64, utc_offset: np.timedelta64) -> datetime.date:
    """Local calendar date of a UTC instant."""
    return (instant + utc_offset).astype("datetime64[D]").item()


class Window(BaseRecord):
    """A whole number of local calendar days, ``start`` to ``end`` inclusive.

    The window covers local ``start 00:00:00.000`` through local
    ``end 23:59:59.999``. Its exclusive upper bound, ``stop_instant``, is the
    local midnight that follows ``end``, so a full day spans exactly 24 hours.

    Attributes:
        start: First local calendar date.
        end: Last local calendar date.
        utc_offset_hours: Fixed offset of local time from UTC. No daylight
            saving rules are applied.
    """

    start: datetime.date
    end: datetime.date
    utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS

    @classmethod
    def from_strings(
        cls,
        start_date: Optional[DateLike],
        end_date: Optional[DateLike],
        utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS,
    ) -> "Window":
        """Build a window from ``YYYY-MM-DD`` bounds.

        A start date later than the end date is accepted and yields an
        empty window.

        Raises:
            ValidationError: If either bound is missing or unparsable.
        """
        return cls(
            start=parse_date(start_date, "startDate"),
            end=parse_date(end_date, "endDate"),
            utc_offset_hours=utc_offset_hours,
        )

    @classmethod
    def last_days(
        cls,
        count: int,
        now: np.datetime64,
        utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS,
    ) -> "Window":
        """The ``count`` local days ending with the local day containing ``now``."""
        if count < 1:
            raise ValueError("count must be at least 1")
        today = local_date(now, offset_delta(utc_offset_hours))
        return cls(
            start=today - datetime.timedelta(days=count - 1),
            end=today,
            utc_offset_hours=utc_offset_hours,
        )

    @property
    def utc_offset(self) -> np.timedelta64:
        return offset_delta(self.utc_offset_hours)

    @property
    def start_instant(self) -> np.datetime64:
        """UTC instant of local midnight at the start of ``start``."""
        return np.datetime64(self.start, "D").astype("datetime64[ns]") - self.utc_offset

    @property
    def stop_instant(self) -> np.datetime64:
        """UTC instant of the local midnight after ``end`` (exclusive bound)."""
        day_after = np.datetime64(self.end, "D") + ONE_DAY
        return day_after.astype("datetime64[ns]") - self.utc_offset

    @property
    def end_instant(self) -> np.datetime64:
        """UTC instant of local ``23:59:59.999`` on ``end`` (inclusive bound)."""
        return self.stop_instant - ONE_MS

    @property
    def is_empty(self) -> bool:
        return self.start > self.end

    def days(self) -> list[datetime.date]:
        """Every local calendar date in the window, ascending."""
        count = (self.end - self.start).days + 1
        return [self.start + datetime.timedelta(days=i) for i in range(max(count, 0))]
