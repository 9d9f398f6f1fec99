"""Tests for window summaries."""

import numpy as np
import pytest

from power_periods import Period, summarize
from power_periods.summary import percentages


def _period(start: str, end: str, status: str) -> Period:
    return Period(start=start, end=end, status=status)


class TestSummarize:
    def test_empty_periods(self):
        summary = summarize([])
        assert summary.total_on_time == np.timedelta64(0, "ns")
        assert summary.total_off_time == np.timedelta64(0, "ns")
        assert summary.percentage_on == 0
        assert summary.percentage_off == 0

    def test_boundary_known_scenario(self):
        summary = summarize(
            [
                _period("2025-10-01T22:00Z", "2025-10-02T08:00Z", "off"),
                _period("2025-10-02T08:00Z", "2025-10-02T22:00Z", "on"),
            ]
        )
        assert summary.total_off_time == np.timedelta64(36_000_000, "ms")
        assert summary.total_on_time == np.timedelta64(50_400_000, "ms")
        assert summary.percentage_on == pytest.approx(58.33, abs=0.01)
        assert summary.percentage_off == pytest.approx(41.67, abs=0.01)
        assert summary.total_time == np.timedelta64(24, "h")

    def test_same_status_periods_add_up(self):
        summary = summarize(
            [
                _period("2025-10-02T00:00Z", "2025-10-02T01:00Z", "on"),
                _period("2025-10-02T01:00Z", "2025-10-02T03:00Z", "on"),
            ]
        )
        assert summary.total_on_time == np.timedelta64(3, "h")
        assert summary.percentage_on == 100.0
        assert summary.percentage_off == 0.0

    def test_only_zero_length_periods(self):
        summary = summarize([_period("2025-10-02T00:00Z", "2025-10-02T00:00Z", "off")])
        assert summary.percentage_on == 0
        assert summary.percentage_off == 0

    def test_json_uses_milliseconds_and_camel_case(self):
        summary = summarize([_period("2025-10-02T00:00Z", "2025-10-02T01:00Z", "off")])
        assert summary.model_dump(mode="json", by_alias=True) == {
            "totalOnTime": 0,
            "totalOffTime": 3_600_000,
            "percentageOn": 0.0,
            "percentageOff": 100.0,
        }


class TestPercentages:
    @pytest.mark.parametrize(
        "on_ms, off_ms",
        [(1, 2), (7, 3), (1, 999_999), (123_456_789, 987_654_321)],
    )
    def test_sum_to_one_hundred(self, on_ms, off_ms):
        on, off = percentages(np.timedelta64(on_ms, "ms"), np.timedelta64(off_ms, "ms"))
        assert on + off == 100.0
        assert on == pytest.approx(on_ms / (on_ms + off_ms) * 100)

    def test_zero_total(self):
        zero = np.timedelta64(0, "ns")
        assert percentages(zero, zero) == (0.0, 0.0)
