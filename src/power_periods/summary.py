"""Window-level on/off totals."""

from typing import Iterable

import numpy as np

from power_periods.event import ZERO, BaseRecord, Duration, Period, Status


class WindowSummary(BaseRecord):
    """Total on/off time over a list of periods and their shares in percent."""

    total_on_time: Duration = ZERO
    total_off_time: Duration = ZERO
    percentage_on: float = 0.0
    percentage_off: float = 0.0

    @property
    def total_time(self) -> np.timedelta64:
        return self.total_on_time + self.total_off_time


def percentages(on_time: np.timedelta64, off_time: np.timedelta64) -> tuple[float, float]:
    """Share of on and off time in percent.

    Both are 0 when there is no time at all; otherwise they sum to exactly 100.
    """
    total = on_time + off_time
    if total <= ZERO:
        return 0.0, 0.0
    percentage_on = float(on_time / total) * 100
    return percentage_on, 100.0 - percentage_on


def summarize(periods: Iterable[Period]) -> WindowSummary:
    """Reduce periods to total on/off time and percentages.

    Args:
        periods: Periods produced by ``reconstruct``.

    Returns:
        A WindowSummary. All zeros when ``periods`` is empty.
    """
    totals = {Status.ON: ZERO, Status.OFF: ZERO}
    for period in periods:
        totals[period.status] = totals[period.status] + period.duration

    percentage_on, percentage_off = percentages(totals[Status.ON], totals[Status.OFF])
    return WindowSummary(
        total_on_time=totals[Status.ON],
        total_off_time=totals[Status.OFF],
        percentage_on=percentage_on,
        percentage_off=percentage_off,
    )
