"""
Core functionality for power-periods: reconstructing status periods from events.
"""

import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np

from power_periods.event import DateTimeLike, Period, PowerEvent, validate_datetime

logger = logging.getLogger(__name__)


def _sort_events(events: Iterable[PowerEvent]) -> tuple[List[PowerEvent], np.ndarray]:
    """Return a sorted copy of the events and their instants.

    The sort is stable, so events sharing an instant keep their input order.
    """
    events = list(events)
    instants = np.array([e.instant for e in events], dtype="datetime64[ns]")
    order = np.argsort(instants, kind="stable")
    return [events[i] for i in order], instants[order]


def _window_slice(
    instants: np.ndarray, start: np.datetime64, stop: np.datetime64
) -> tuple[int, int]:
    """Index range of sorted instants falling in ``[start, stop)``."""
    lo = int(np.searchsorted(instants, start, side="left"))
    hi = int(np.searchsorted(instants, stop, side="left"))
    return lo, max(lo, hi)


def events_in_window(
    events: Iterable[PowerEvent], window_start: DateTimeLike, window_end: DateTimeLike
) -> List[PowerEvent]:
    """Events with ``window_start <= instant < window_end``, sorted by instant."""
    ordered, instants = _sort_events(events)
    lo, hi = _window_slice(
        instants, validate_datetime(window_start), validate_datetime(window_end)
    )
    return ordered[lo:hi]


def boundary_event(
    events: Iterable[PowerEvent], window_start: DateTimeLike
) -> Optional[PowerEvent]:
    """The most recent event strictly before ``window_start``, if any."""
    ordered, instants = _sort_events(events)
    lo = int(np.searchsorted(instants, validate_datetime(window_start), side="left"))
    return ordered[lo - 1] if lo else None


def reconstruct(
    events: Iterable[PowerEvent],
    window_start: DateTimeLike,
    window_end: DateTimeLike,
    now: DateTimeLike,
) -> List[Period]:
    """Reconstruct contiguous status periods covering a query window.

    State between events is inferred by carrying each event's status forward
    until the next event. The state at the start of the window comes from the
    most recent event before it (the boundary event). Ongoing state is only
    extrapolated up to ``now``.

    Args:
        events: Power events in any order; a sorted copy is used.
        window_start: Inclusive start of the window.
        window_end: Exclusive end of the window.
        now: The current instant, captured once by the caller.

    Returns:
        Periods sorted by start, each ending where the next begins. Empty if
        the window lies entirely after ``now``, or if no event is known at or
        before the window. Time before the first in-window event is omitted
        when there is no boundary event. Consecutive periods with the same
        status are kept separate.

    Examples:
        >>> events = [
        ...     PowerEvent(instant="2025-10-01T06:00:00", status="off"),
        ...     PowerEvent(instant="2025-10-02T08:00:00", status="on"),
        ... ]
        >>> periods = reconstruct(
        ...     events, "2025-10-01T22:00:00", "2025-10-02T22:00:00",
        ...     now="2025-10-03T00:00:00",
        ... )
        >>> [(p.status.value, p.get_duration("h")) for p in periods]
        [('off', 10.0), ('on', 14.0)]
    """
    window_start = validate_datetime(window_start)
    window_end = validate_datetime(window_end)
    now = validate_datetime(now)

    effective_end = min(window_end, now)
    if effective_end <= window_start:
        return []

    ordered, instants = _sort_events(events)
    lo, hi = _window_slice(instants, window_start, window_end)
    in_window: Sequence[PowerEvent] = ordered[lo:hi]
    boundary = ordered[lo - 1] if lo else None

    if not in_window:
        if boundary is None:
            logger.debug("no status known for window starting %s", window_start)
            return []
        return [Period(start=window_start, end=effective_end, status=boundary.status)]

    periods = []

    first = in_window[0]
    if boundary is not None and first.instant > window_start:
        periods.append(
            Period(start=window_start, end=first.instant, status=boundary.status)
        )

    for current, following in zip(in_window[:-1], in_window[1:]):
        periods.append(
            Period(start=current.instant, end=following.instant, status=current.status)
        )

    last = in_window[-1]
    if effective_end > last.instant:
        periods.append(Period(start=last.instant, end=effective_end, status=last.status))

    return periods
