"""Power events and the status periods reconstructed from them."""

import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Optional, Union

import numpy as np
from dateutil.parser import parse as parse_datetime
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
    model_serializer,
    model_validator,
)
from pydantic.alias_generators import to_camel

__all__ = [
    "BaseRecord",
    "DateTime",
    "DateTimeLike",
    "Duration",
    "DurationUnits",
    "Period",
    "PowerEvent",
    "Status",
    "StatusField",
    "to_milliseconds",
    "validate_datetime",
    "validate_duration",
]


# Type alias for inputs that can be converted to datetime
DateTimeLike = Union[str, np.datetime64, datetime.datetime]

DurationUnits = Literal["D", "h", "m", "s", "ms", "us", "ns"]

ZERO = np.timedelta64(0, "ns")


def validate_datetime(value: DateTimeLike) -> np.datetime64:
    """Validate and convert various datetime formats to a UTC numpy datetime64.

    Timezone-aware values are converted to UTC; naive values are taken to
    already be in UTC.

    Args:
        value: A datetime value as string, np.datetime64, or datetime.datetime.

    Returns:
        A numpy datetime64 object with nanosecond precision.

    Raises:
        ValueError: If the value cannot be converted to a datetime or lies
            outside the nanosecond datetime64 range.
    """
    if isinstance(value, str):
        value = parse_datetime(value)
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
        value = np.datetime64(value, "us")
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            raise ValueError("invalid datetime: NaT")
        msg = f"datetime out of range: {value}"
        try:
            converted = value.astype("datetime64[ns]")
        except OverflowError as exc:
            raise ValueError(msg) from exc
        # the ns cast wraps silently outside roughly 1678..2262
        if converted.astype(value.dtype) != value:
            raise ValueError(msg)
        return converted
    msg = f"invalid datetime: {value!r}"
    raise ValueError(msg)


def validate_duration(value: Any) -> np.timedelta64:
    """Convert a duration to numpy timedelta64 with nanosecond precision.

    Plain integers are read as milliseconds, the unit durations are
    serialized in.
    """
    if isinstance(value, np.timedelta64):
        return value.astype("timedelta64[ns]")
    if isinstance(value, datetime.timedelta):
        return np.timedelta64(value).astype("timedelta64[ns]")
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        return np.timedelta64(int(value), "ms").astype("timedelta64[ns]")
    msg = f"invalid duration: {value!r}"
    raise ValueError(msg)


def to_milliseconds(value: np.timedelta64) -> int:
    """Whole milliseconds in a timedelta64."""
    return int(value // np.timedelta64(1, "ms"))


def _format_datetime(value: np.datetime64) -> str:
    return str(np.datetime_as_string(value, unit="ms", timezone="UTC"))


DateTime = Annotated[
    np.datetime64,
    BeforeValidator(validate_datetime),
    PlainSerializer(_format_datetime, return_type=str),
]

Duration = Annotated[
    np.timedelta64,
    BeforeValidator(validate_duration),
    PlainSerializer(to_milliseconds, return_type=int),
]


class Status(str, Enum):
    """Power status carried by an event or a period."""

    ON = "on"
    OFF = "off"

    @classmethod
    def parse(cls, value: Any) -> "Status":
        """Parse a status tag.

        Accepts Status members, booleans, and the case-insensitive tags
        ``on``/``off`` and ``up``/``down``.

        Raises:
            ValueError: If the value is not a recognised status.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, (bool, np.bool_)):
            return cls.ON if value else cls.OFF
        if isinstance(value, str):
            tag = value.strip().lower()
            if tag in ("on", "up"):
                return cls.ON
            if tag in ("off", "down"):
                return cls.OFF
        raise ValueError(f"invalid status: {value!r}")


StatusField = Annotated[Status, BeforeValidator(Status.parse)]


class BaseRecord(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PowerEvent(BaseRecord):
    """A timestamped change of power status.

    Attributes:
        instant: When the status changed (UTC). Accepts string,
            np.datetime64, or datetime.datetime.
        status: The status from this instant on.
        id: Optional identifier of the upstream message.
        text: Optional raw message text.
    """

    instant: DateTime
    status: StatusField
    id: Optional[int] = None
    text: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "PowerEvent":
        """Create an event from a persisted ``{id, date, timestamp, status, text}`` record.

        ``timestamp`` (epoch milliseconds) takes precedence over ``date``
        (an ISO-8601 string) when both are present.

        Raises:
            ValueError: If the record has neither timestamp nor date, or a
                field fails validation.
        """
        timestamp = record.get("timestamp")
        if timestamp is not None:
            instant: DateTimeLike = np.datetime64(int(timestamp), "ms")
        elif record.get("date"):
            instant = record["date"]
        else:
            raise ValueError("event record needs a 'timestamp' or a 'date'")
        return cls(
            instant=instant,
            status=record.get("status"),
            id=record.get("id"),
            text=record.get("text"),
        )

    @property
    def timestamp(self) -> int:
        """The instant as epoch milliseconds."""
        return int(self.instant.astype("datetime64[ms]").astype(np.int64))

    def __lt__(self, other: "PowerEvent") -> bool:
        return bool(self.instant < other.instant)


class Period(BaseRecord):
    """A contiguous time range ``[start, end)`` with a single status.

    Attributes:
        start: Inclusive start of the period (UTC).
        end: Exclusive end of the period (UTC).
        status: Status that held for the whole period.
    """

    start: DateTime
    end: DateTime
    status: StatusField

    @model_validator(mode="after")
    def check_order(self) -> "Period":
        """Reject periods that end before they start."""
        if self.end < self.start:
            raise ValueError("Period end must not precede its start")
        return self

    @model_serializer(mode="wrap")
    def _serialize_with_duration(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        data["duration"] = to_milliseconds(self.duration)
        return data

    @property
    def duration(self) -> np.timedelta64:
        """Exact length of the period."""
        return self.end - self.start

    def get_duration(self, units: DurationUnits = "s") -> float:
        """Get the period duration in specified units.

        Args:
            units: Time unit ('D', 'h', 'm', 's', 'ms', 'us', 'ns').

        Returns:
            The duration in the requested units.
        """
        return float(self.duration / np.timedelta64(1, units))

    def overlap(self, start: np.datetime64, end: np.datetime64) -> np.timedelta64:
        """Length of the intersection of this period with ``[start, end)``."""
        lo = max(self.start, start)
        hi = min(self.end, end)
        return hi - lo if hi > lo else ZERO

    def contains(self, timestamp: np.datetime64) -> bool:
        """Check whether a timestamp falls within ``[start, end)``."""
        return bool(self.start <= timestamp < self.end)

    def __contains__(self, timestamp: np.datetime64) -> bool:
        return self.contains(timestamp)

    def __lt__(self, other: "Period") -> bool:
        return bool(self.start < other.start)
