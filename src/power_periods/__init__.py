"""
power-periods: power availability statistics from on/off events.

This package reconstructs contiguous on/off periods from sparse power status
change events and aggregates them per query window and per local calendar day.
"""

from power_periods.core import boundary_event, events_in_window, reconstruct
from power_periods.daily import DayBucket, aggregate, group_events_by_day
from power_periods.errors import EventSourceError, PowerPeriodsError, ValidationError
from power_periods.event import Period, PowerEvent, Status
from power_periods.source import CachedEventSource, FileEventSource, StaticEventSource
from power_periods.statistics import PowerStatistics, WindowStatistics
from power_periods.summary import WindowSummary, summarize
from power_periods.window import Window

__version__ = "0.1.0"
__all__ = [
    "CachedEventSource",
    "DayBucket",
    "EventSourceError",
    "FileEventSource",
    "Period",
    "PowerEvent",
    "PowerPeriodsError",
    "PowerStatistics",
    "StaticEventSource",
    "Status",
    "ValidationError",
    "Window",
    "WindowStatistics",
    "WindowSummary",
    "aggregate",
    "boundary_event",
    "events_in_window",
    "group_events_by_day",
    "reconstruct",
    "summarize",
]
