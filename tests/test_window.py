"""Unit tests for calendar windows and local-day helpers."""

import datetime

import numpy as np
import pytest

from power_periods import ValidationError, Window
from power_periods.window import local_date, local_midnight, offset_delta, parse_date


def _ts(value: str) -> np.datetime64:
    return np.datetime64(value, "ns")


KYIV = offset_delta(2)


class TestParseDate:
    def test_valid_date(self):
        assert parse_date("2025-10-02") == datetime.date(2025, 10, 2)

    def test_date_passes_through(self):
        assert parse_date(datetime.date(2025, 10, 2)) == datetime.date(2025, 10, 2)

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_date(self, value):
        with pytest.raises(ValidationError, match="startDate is required"):
            parse_date(value, "startDate")

    @pytest.mark.parametrize(
        "value", ["2025/10/02", "20251002", "02-10-2025", "2025-10-02T00:00:00", "soon"]
    )
    def test_wrong_format(self, value):
        with pytest.raises(ValidationError, match="expected YYYY-MM-DD"):
            parse_date(value, "endDate")

    def test_impossible_date(self):
        with pytest.raises(ValidationError, match="invalid endDate"):
            parse_date("2025-02-30", "endDate")

    def test_datetime_rejected(self):
        with pytest.raises(ValidationError, match="calendar date"):
            parse_date(datetime.datetime(2025, 10, 2, 12, 0))

    @pytest.mark.parametrize(
        "value", ["2300-01-01", "1600-06-15", "9999-12-31", datetime.date(2262, 6, 1)]
    )
    def test_date_outside_supported_range(self, value):
        with pytest.raises(ValidationError, match="supported range"):
            parse_date(value, "endDate")

    def test_range_limits_are_usable(self):
        early = Window.from_strings("1678-01-01", "1678-01-01", utc_offset_hours=14)
        late = Window.from_strings("2261-12-31", "2261-12-31", utc_offset_hours=-12)
        assert early.start_instant == _ts("1677-12-31T10:00:00")
        assert late.stop_instant == _ts("2262-01-01T12:00:00")

    def test_far_future_window_rejected(self):
        with pytest.raises(ValidationError, match="invalid startDate"):
            Window.from_strings("2300-01-01", "2300-01-01")


class TestLocalDays:
    def test_offset_delta(self):
        assert offset_delta(2) == np.timedelta64(2, "h")
        assert offset_delta(5.5) == np.timedelta64(330, "m")

    def test_local_midnight_before_utc_midnight(self):
        # 23:30 UTC is already 01:30 the next day in UTC+2
        assert local_midnight(_ts("2025-10-09T23:30"), KYIV) == _ts("2025-10-09T22:00")

    def test_local_midnight_after_utc_midnight(self):
        assert local_midnight(_ts("2025-10-10T01:00"), KYIV) == _ts("2025-10-09T22:00")

    def test_local_midnight_exactly_at_boundary(self):
        assert local_midnight(_ts("2025-10-09T22:00"), KYIV) == _ts("2025-10-09T22:00")

    def test_local_date(self):
        assert local_date(_ts("2025-10-09T21:59:59"), KYIV) == datetime.date(2025, 10, 9)
        assert local_date(_ts("2025-10-09T22:00:00"), KYIV) == datetime.date(2025, 10, 10)

    def test_negative_offset(self):
        new_york = offset_delta(-5)
        assert local_date(_ts("2025-10-10T03:00"), new_york) == datetime.date(2025, 10, 9)
        assert local_midnight(_ts("2025-10-10T03:00"), new_york) == _ts("2025-10-09T05:00")


class TestWindow:
    """Tests for resolving date windows to instants."""

    def test_single_day_instants(self):
        window = Window.from_strings("2025-10-02", "2025-10-02")
        assert window.start_instant == _ts("2025-10-01T22:00:00")
        assert window.end_instant == _ts("2025-10-02T21:59:59.999")
        assert window.stop_instant == _ts("2025-10-02T22:00:00")

    def test_stop_is_one_millisecond_after_end(self):
        window = Window.from_strings("2025-10-01", "2025-10-31")
        assert window.stop_instant - window.end_instant == np.timedelta64(1, "ms")

    def test_custom_offset(self):
        window = Window.from_strings("2025-10-02", "2025-10-02", utc_offset_hours=0)
        assert window.start_instant == _ts("2025-10-02T00:00:00")
        assert window.stop_instant == _ts("2025-10-03T00:00:00")

    def test_days(self):
        window = Window.from_strings("2025-09-29", "2025-10-02")
        assert window.days() == [
            datetime.date(2025, 9, 29),
            datetime.date(2025, 9, 30),
            datetime.date(2025, 10, 1),
            datetime.date(2025, 10, 2),
        ]

    def test_reversed_window_is_empty(self):
        window = Window.from_strings("2025-10-05", "2025-10-01")
        assert window.is_empty
        assert window.days() == []
        assert window.stop_instant <= window.start_instant

    def test_missing_bounds_raise(self):
        with pytest.raises(ValidationError, match="endDate is required"):
            Window.from_strings("2025-10-01", None)

    def test_last_days(self):
        now = _ts("2025-10-09T23:00:00")  # already 2025-10-10 locally
        window = Window.last_days(7, now)
        assert window.start == datetime.date(2025, 10, 4)
        assert window.end == datetime.date(2025, 10, 10)
        assert len(window.days()) == 7

    def test_last_days_needs_positive_count(self):
        with pytest.raises(ValueError):
            Window.last_days(0, _ts("2025-10-09T00:00:00"))
