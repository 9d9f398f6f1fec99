"""Statistics service: runs the period engine over an event source snapshot."""

import datetime
import logging
from typing import Callable, List, Optional

import numpy as np

from power_periods.config import Settings
from power_periods.core import events_in_window, reconstruct
from power_periods.daily import DayBucket, aggregate, group_events_by_day
from power_periods.errors import EventSourceError
from power_periods.event import (
    ZERO,
    BaseRecord,
    DateTime,
    DateTimeLike,
    Duration,
    Period,
    PowerEvent,
    validate_datetime,
)
from power_periods.source import CachedEventSource, EventSource, FileEventSource, Snapshot
from power_periods.summary import summarize
from power_periods.window import DEFAULT_UTC_OFFSET_HOURS, DateLike, Window

logger = logging.getLogger(__name__)


class WindowStatistics(BaseRecord):
    """Periods, totals and raw events for one query window."""

    total_events: int = 0
    total_on_time: Duration = ZERO
    total_off_time: Duration = ZERO
    percentage_on: float = 0.0
    percentage_off: float = 0.0
    periods: List[Period] = []
    events: List[PowerEvent] = []


class RecentStatistics(BaseRecord):
    on_hours: float = 0.0
    off_hours: float = 0.0
    percentage_on: float = 0.0
    percentage_off: float = 0.0


class DateRange(BaseRecord):
    start: DateTime
    end: DateTime


class OverallSummary(BaseRecord):
    """Overview of the whole event history plus the last 7 and 30 days."""

    total_events: int = 0
    first_event: Optional[PowerEvent] = None
    last_event: Optional[PowerEvent] = None
    date_range: Optional[DateRange] = None
    last_7_days: Optional[RecentStatistics] = None
    last_30_days: Optional[RecentStatistics] = None


def most_recent(events: List[PowerEvent], limit: Optional[int]) -> List[PowerEvent]:
    """The last ``limit`` of already sorted events; all of them if ``limit`` is None."""
    if limit is None:
        return events
    return events[-limit:] if limit > 0 else []


def utc_now() -> np.datetime64:
    """The current instant as a UTC datetime64."""
    now = datetime.datetime.now(datetime.timezone.utc)
    return validate_datetime(now)


class PowerStatistics:
    """Answers window and per-day statistics queries.

    Each query fetches one snapshot from the event source and captures
    ``now`` once, so periods, totals and day buckets of a query all describe
    the same state of the world.

    Args:
        source: Where events come from.
        utc_offset_hours: Fixed offset used to resolve calendar dates.
        clock: Returns the current instant; used when a query gets no ``now``.
    """

    def __init__(
        self,
        source: EventSource,
        utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS,
        clock: Callable[[], np.datetime64] = utc_now,
    ) -> None:
        self.source = source
        self.utc_offset_hours = utc_offset_hours
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "PowerStatistics":
        """Service reading ``settings.events_file`` through a TTL cache."""
        source = CachedEventSource(
            FileEventSource(settings.events_file), ttl=settings.cache_ttl_seconds
        )
        return cls(source, utc_offset_hours=settings.utc_offset_hours)

    def _snapshot(self) -> Snapshot:
        # An unavailable source reads as "no events"; the outage only shows in the log.
        try:
            return tuple(self.source.fetch())
        except EventSourceError as exc:
            logger.warning("event source unavailable, using empty snapshot: %s", exc)
            return ()

    def _now(self, now: Optional[DateTimeLike]) -> np.datetime64:
        return validate_datetime(now) if now is not None else self._clock()

    def _window(self, start_date: Optional[DateLike], end_date: Optional[DateLike]) -> Window:
        return Window.from_strings(start_date, end_date, self.utc_offset_hours)

    def _periods(
        self, window: Window, now: np.datetime64, events: Snapshot
    ) -> tuple[List[Period], List[PowerEvent]]:
        periods = reconstruct(events, window.start_instant, window.stop_instant, now)
        in_window = events_in_window(events, window.start_instant, window.stop_instant)
        logger.debug(
            "window %s..%s: %d events, %d periods",
            window.start,
            window.end,
            len(in_window),
            len(periods),
        )
        return periods, in_window

    def _statistics(
        self, window: Window, now: np.datetime64, events: Snapshot
    ) -> WindowStatistics:
        periods, in_window = self._periods(window, now, events)
        summary = summarize(periods)
        return WindowStatistics(
            total_events=len(in_window),
            total_on_time=summary.total_on_time,
            total_off_time=summary.total_off_time,
            percentage_on=summary.percentage_on,
            percentage_off=summary.percentage_off,
            periods=periods,
            events=in_window,
        )

    def calculate_statistics(
        self,
        start_date: Optional[DateLike],
        end_date: Optional[DateLike],
        now: Optional[DateTimeLike] = None,
    ) -> WindowStatistics:
        """Periods and on/off totals for ``start_date`` to ``end_date`` inclusive.

        Args:
            start_date: First local date, ``YYYY-MM-DD``.
            end_date: Last local date, ``YYYY-MM-DD``.
            now: Current instant; defaults to the service clock.

        Raises:
            ValidationError: If a date is missing or unparsable.
        """
        window = self._window(start_date, end_date)
        return self._statistics(window, self._now(now), self._snapshot())

    def get_daily_statistics(
        self,
        start_date: Optional[DateLike],
        end_date: Optional[DateLike],
        now: Optional[DateTimeLike] = None,
    ) -> List[DayBucket]:
        """One bucket per local day of the window, ascending by date.

        Raises:
            ValidationError: If a date is missing or unparsable.
        """
        window = self._window(start_date, end_date)
        periods, in_window = self._periods(window, self._now(now), self._snapshot())
        buckets = aggregate(periods, window)
        return group_events_by_day(buckets, in_window, window.utc_offset)

    def get_events(self, limit: Optional[int] = None) -> List[PowerEvent]:
        """All events sorted by instant; the most recent ``limit`` if given."""
        events = sorted(self._snapshot(), key=lambda e: e.instant)
        return most_recent(events, limit)

    def get_events_by_date_range(
        self,
        start_date: Optional[DateLike],
        end_date: Optional[DateLike],
        limit: Optional[int] = None,
    ) -> List[PowerEvent]:
        """Events whose instant falls within the local dates, sorted by instant.

        Only the most recent ``limit`` events are returned if given.

        Raises:
            ValidationError: If a date is missing or unparsable.
        """
        window = self._window(start_date, end_date)
        events = events_in_window(
            self._snapshot(), window.start_instant, window.stop_instant
        )
        return most_recent(events, limit)

    def _recent(
        self, days: int, now: np.datetime64, events: Snapshot
    ) -> RecentStatistics:
        window = Window.last_days(days, now, self.utc_offset_hours)
        stats = self._statistics(window, now, events)
        return RecentStatistics(
            on_hours=float(stats.total_on_time / np.timedelta64(1, "h")),
            off_hours=float(stats.total_off_time / np.timedelta64(1, "h")),
            percentage_on=stats.percentage_on,
            percentage_off=stats.percentage_off,
        )

    def summary(self, now: Optional[DateTimeLike] = None) -> OverallSummary:
        """Overview of the event history and the last 7 and 30 local days."""
        now = self._now(now)
        events = self._snapshot()
        if not events:
            return OverallSummary()

        ordered = sorted(events, key=lambda e: e.instant)
        first, last = ordered[0], ordered[-1]
        return OverallSummary(
            total_events=len(ordered),
            first_event=first,
            last_event=last,
            date_range=DateRange(start=first.instant, end=last.instant),
            last_7_days=self._recent(7, now, events),
            last_30_days=self._recent(30, now, events),
        )
