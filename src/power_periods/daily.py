"""Per-local-day distribution of status periods."""

import datetime
from collections import defaultdict
from typing import Any, Iterable, Iterator, List

import numpy as np
from pydantic import Field, SerializationInfo, model_serializer

from power_periods.event import ZERO, BaseRecord, Duration, Period, PowerEvent, Status
from power_periods.summary import percentages
from power_periods.window import ONE_DAY, Window, local_date, local_midnight


class DayBucket(BaseRecord):
    """On/off time accumulated for one local calendar day.

    Attributes:
        date: The local calendar date.
        on_time: Time with power on during the day.
        off_time: Time with power off during the day.
        percentage_on: Share of known time with power on.
        percentage_off: Share of known time with power off.
        events: Raw events whose local date is this day.
    """

    date: datetime.date
    on_time: Duration = ZERO
    off_time: Duration = ZERO
    percentage_on: float = 0.0
    percentage_off: float = 0.0
    events: List[PowerEvent] = Field(default_factory=list)

    @model_serializer(mode="wrap")
    def _serialize_with_hours(
        self, handler: Any, info: SerializationInfo
    ) -> dict[str, Any]:
        data = handler(self)
        if info.by_alias:
            data["onHours"], data["offHours"] = self.on_hours, self.off_hours
        else:
            data["on_hours"], data["off_hours"] = self.on_hours, self.off_hours
        return data

    @property
    def on_hours(self) -> float:
        return float(self.on_time / np.timedelta64(1, "h"))

    @property
    def off_hours(self) -> float:
        return float(self.off_time / np.timedelta64(1, "h"))


def split_by_day(
    start: np.datetime64, end: np.datetime64, utc_offset: np.timedelta64
) -> Iterator[tuple[datetime.date, np.datetime64, np.datetime64]]:
    """Split ``[start, end)`` at local midnights.

    Yields:
        ``(local_date, piece_start, piece_end)`` for every non-empty piece,
        in order.
    """
    day_start = local_midnight(start, utc_offset)
    while day_start < end:
        day_next = day_start + ONE_DAY
        piece_start = max(start, day_start)
        piece_end = min(end, day_next)
        if piece_start < piece_end:
            yield local_date(day_start, utc_offset), piece_start, piece_end
        day_start = day_next


def aggregate(periods: Iterable[Period], window: Window) -> List[DayBucket]:
    """Distribute periods over the local calendar days of a window.

    Periods crossing local midnight are split between the days they touch.
    Time falling on days outside the window is ignored.

    Args:
        periods: Periods produced by ``reconstruct``.
        window: The query window; its UTC offset defines local days.

    Returns:
        One bucket per day from ``window.start`` to ``window.end`` inclusive,
        ascending, including days without any periods.
    """
    utc_offset = window.utc_offset
    totals = {day: {Status.ON: ZERO, Status.OFF: ZERO} for day in window.days()}

    for period in periods:
        for day, piece_start, piece_end in split_by_day(
            period.start, period.end, utc_offset
        ):
            day_totals = totals.get(day)
            if day_totals is None:
                continue
            day_totals[period.status] = day_totals[period.status] + (
                piece_end - piece_start
            )

    buckets = []
    for day, day_totals in totals.items():
        percentage_on, percentage_off = percentages(
            day_totals[Status.ON], day_totals[Status.OFF]
        )
        buckets.append(
            DayBucket(
                date=day,
                on_time=day_totals[Status.ON],
                off_time=day_totals[Status.OFF],
                percentage_on=percentage_on,
                percentage_off=percentage_off,
            )
        )
    return buckets


def group_events_by_day(
    buckets: Iterable[DayBucket],
    events: Iterable[PowerEvent],
    utc_offset: np.timedelta64,
) -> List[DayBucket]:
    """Attach each event to the bucket of its local calendar date.

    Events on dates without a bucket are dropped.
    """
    by_day = defaultdict(list)
    for event in sorted(events, key=lambda e: e.instant):
        by_day[local_date(event.instant, utc_offset)].append(event)
    return [
        bucket.model_copy(update={"events": by_day.get(bucket.date, [])})
        for bucket in buckets
    ]
