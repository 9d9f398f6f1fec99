"""
Examples for using the power-periods package.
"""

from power_periods import PowerEvent, PowerStatistics, StaticEventSource

NOW = "2025-10-20T00:00:00+02:00"


def _service(events):
    return PowerStatistics(StaticEventSource(events), utc_offset_hours=2)


def example_known_at_boundary():
    """The status before the window is carried into it."""
    print("=" * 60)
    print("Example 1: Status Known at the Window Start")
    print("=" * 60)

    service = _service(
        [
            PowerEvent(instant="2025-10-01T08:00:00+02:00", status="off"),
            PowerEvent(instant="2025-10-02T10:00:00+02:00", status="on"),
        ]
    )
    stats = service.calculate_statistics("2025-10-02", "2025-10-02", now=NOW)

    print(f"\nEvents in window: {stats.total_events}")
    for period in stats.periods:
        print(f"  {period.status.value:>3}: {period.start} .. {period.end} ({period.get_duration('h'):.1f}h)")
    print(f"\nOn:  {stats.percentage_on:.2f}%")
    print(f"Off: {stats.percentage_off:.2f}%")


def example_unknown_before_first_event():
    """Time before the first event is left out of the totals."""
    print("\n" + "=" * 60)
    print("Example 2: Nothing Known Before the First Event")
    print("=" * 60)

    service = _service(
        [
            PowerEvent(instant="2025-10-02T08:00:00+02:00", status="on"),
            PowerEvent(instant="2025-10-02T20:00:00+02:00", status="off"),
        ]
    )
    stats = service.calculate_statistics("2025-10-02", "2025-10-02", now=NOW)

    covered = stats.total_on_time + stats.total_off_time
    print(f"\nCovered: {covered.astype('timedelta64[h]')} of 24h")
    print(f"On:  {stats.percentage_on:.2f}%")
    print(f"Off: {stats.percentage_off:.2f}%")


def example_daily_split():
    """A period across local midnight counts towards both days."""
    print("\n" + "=" * 60)
    print("Example 3: Per-Day Totals")
    print("=" * 60)

    service = _service(
        [
            PowerEvent(instant="2025-10-09T22:00:00+02:00", status="on"),
            PowerEvent(instant="2025-10-10T02:00:00+02:00", status="off"),
        ]
    )
    for bucket in service.get_daily_statistics("2025-10-09", "2025-10-10", now=NOW):
        print(f"\n{bucket.date}: on {bucket.on_hours:.1f}h, off {bucket.off_hours:.1f}h")
        for event in bucket.events:
            print(f"  {event.instant} {event.status.value}")


if __name__ == "__main__":
    example_known_at_boundary()
    example_unknown_before_first_event()
    example_daily_split()

    print("\n" + "=" * 60)
    print("All examples completed!")
    print("=" * 60)
