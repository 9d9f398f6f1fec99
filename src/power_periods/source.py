"""Event sources: where snapshots of power events come from."""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol, Union

from power_periods.errors import EventSourceError, ValidationError
from power_periods.event import PowerEvent

logger = logging.getLogger(__name__)

__all__ = [
    "CachedEventSource",
    "EventSource",
    "FileEventSource",
    "StaticEventSource",
    "load_events",
    "parse_event_line",
    "parse_event_lines",
]

Snapshot = tuple[PowerEvent, ...]


class EventSource(Protocol):
    """Anything that can hand out an immutable snapshot of events."""

    def fetch(self) -> Snapshot: ...


def parse_event_line(lineno: int, line: str) -> Optional[PowerEvent]:
    """Parse a ``<timestamp> ON|OFF`` line. Returns None for blank/comment lines.

    Columns after the status are ignored.

    Raises:
        ValidationError: If the timestamp or status is invalid.
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    parts = line.split()
    if len(parts) < 2 or parts[1].upper() not in ("ON", "OFF"):
        raise ValidationError(f"line {lineno}: expected '<timestamp> ON|OFF'")

    try:
        return PowerEvent(instant=parts[0], status=parts[1])
    except (ValueError, OverflowError) as exc:
        raise ValidationError(f"line {lineno}: {exc}") from exc


def parse_event_lines(lines: Iterable[str]) -> list[PowerEvent]:
    """Parse every event line of a text stream."""
    events = []
    for lineno, raw in enumerate(lines, 1):
        event = parse_event_line(lineno, raw)
        if event is not None:
            events.append(event)
    return events


def _parse_records(records: object) -> list[PowerEvent]:
    if not isinstance(records, list):
        raise ValidationError("event file must contain a JSON array of records")
    events = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValidationError(f"record {index}: expected an object")
        try:
            events.append(PowerEvent.from_record(record))
        except (ValueError, TypeError, OverflowError) as exc:
            raise ValidationError(f"record {index}: {exc}") from exc
    return events


def load_events(path: Union[str, Path]) -> list[PowerEvent]:
    """Load events from a JSON record file or a ``<timestamp> ON|OFF`` text file.

    Files ending in ``.json`` are read as an array of
    ``{id, date, timestamp, status, text}`` records; anything else as text
    lines.

    Raises:
        OSError: If the file cannot be read.
        ValidationError: If the content is malformed.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as stream:
        if path.suffix.lower() == ".json":
            try:
                records = json.load(stream)
            except json.JSONDecodeError as exc:
                raise ValidationError(f"{path}: invalid JSON - {exc}") from exc
            return _parse_records(records)
        return parse_event_lines(stream)


class StaticEventSource:
    """Serves a fixed collection of events."""

    def __init__(self, events: Iterable[PowerEvent] = ()) -> None:
        self._events: Snapshot = tuple(events)

    def fetch(self) -> Snapshot:
        return self._events


class FileEventSource:
    """Reads the event list from a file on every fetch.

    Args:
        path: A ``.json`` record file or a text file of event lines.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def fetch(self) -> Snapshot:
        try:
            events = load_events(self.path)
        except (OSError, ValidationError) as exc:
            raise EventSourceError(f"cannot read events from {self.path}: {exc}") from exc
        logger.debug("loaded %d events from %s", len(events), self.path)
        return tuple(events)


class CachedEventSource:
    """Time-boxed cache in front of another event source.

    The wrapped source is fetched at most once per ``ttl`` seconds. Failed
    fetches are not cached.

    Args:
        source: The source to cache.
        ttl: Seconds a snapshot stays fresh.
        clock: Monotonic clock in seconds.
    """

    def __init__(
        self,
        source: EventSource,
        ttl: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl < 0:
            raise ValueError("ttl must be non-negative")
        self.source = source
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[Snapshot] = None
        self._fetched_at = 0.0

    def fetch(self) -> Snapshot:
        with self._lock:
            now = self._clock()
            if self._snapshot is not None and now - self._fetched_at < self.ttl:
                logger.debug("event cache hit (%d events)", len(self._snapshot))
                return self._snapshot

            snapshot = self.source.fetch()
            logger.debug("event cache refreshed (%d events)", len(snapshot))
            self._snapshot = snapshot
            self._fetched_at = now
            return snapshot

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next fetch goes to the source."""
        with self._lock:
            self._snapshot = None
