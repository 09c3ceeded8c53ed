"""Tests for period comparison"""

import pytest

from density_app.data.models import View
from density_app.errors import SeriesLengthMismatchError, SystemFailureError
from density_app.series.comparator import compare, percent_change
from density_app.series.planner import plan

from conftest import REFERENCE_TS


def series_with_total(view: View, total: int, offset: int = 0):
    """Series whose first bucket holds ``total``."""
    template = plan(REFERENCE_TS, view, offset)
    counts = [0] * len(template)
    counts[0] = total
    return template.with_counts(counts)


class TestPercentChange:
    """Test percent change edge cases"""

    def test_both_zero(self):
        """Test 0 vs 0 is 0.0"""
        assert percent_change(0, 0) == 0.0

    def test_previous_zero(self):
        """Test any growth from zero is 100.0"""
        assert percent_change(5, 0) == 100.0

    def test_decrease(self):
        """Test halving is -50.0"""
        assert percent_change(5, 10) == -50.0

    def test_increase(self):
        """Test growth keeps its sign"""
        assert percent_change(15, 10) == 50.0

    def test_current_zero(self):
        """Test dropping to zero is -100.0"""
        assert percent_change(0, 4) == -100.0


class TestCompare:
    """Test compare()"""

    def test_totals_edge_cases(self):
        """Test compare applies the edge cases to series totals"""
        zero = compare(series_with_total(View.DAY, 0), series_with_total(View.DAY, 0, 1))
        assert zero.percent_change == 0.0

        from_zero = compare(series_with_total(View.DAY, 5), series_with_total(View.DAY, 0, 1))
        assert from_zero.percent_change == 100.0

        halved = compare(series_with_total(View.DAY, 5), series_with_total(View.DAY, 10, 1))
        assert halved.current_total == 5
        assert halved.previous_total == 10
        assert halved.percent_change == -50.0

    def test_deterministic(self):
        """Test identical inputs give identical results"""
        current = series_with_total(View.WEEK, 3)
        previous = series_with_total(View.WEEK, 9, 1)

        assert compare(current, previous) == compare(current, previous)

    def test_length_mismatch_is_fatal(self):
        """Test series of different lengths raise a system failure"""
        with pytest.raises(SeriesLengthMismatchError) as exc_info:
            compare(plan(REFERENCE_TS, View.DAY), plan(REFERENCE_TS, View.WEEK, 1))

        error = exc_info.value
        assert isinstance(error, SystemFailureError)
        assert error.recoverable is False
        assert error.current_length == 24
        assert error.previous_length == 7

    def test_alignment_earliest_first(self):
        """Test aligned() pairs bucket i with bucket i, earliest first"""
        current = plan(REFERENCE_TS, View.DAY).with_counts(list(range(24)))
        previous = plan(REFERENCE_TS, View.DAY, 1).with_counts([1] * 24)

        points = compare(current, previous).aligned()

        assert len(points) == 24
        assert points[0].label == "2-Jan 00:00"
        assert points[0].previous_label == "1-Jan 00:00"
        assert [p.current for p in points] == list(range(24))
        assert all(p.previous == 1 for p in points)

    def test_request_token_carried(self):
        """Test the request token is attached to the result"""
        result = compare(series_with_total(View.DAY, 1), series_with_total(View.DAY, 1, 1), request_token=42)
        assert result.request_token == 42

    def test_to_dict(self):
        """Test the rendering structure"""
        result = compare(series_with_total(View.WEEK, 2), series_with_total(View.WEEK, 1, 1), request_token=3)
        payload = result.to_dict()

        assert payload["view"] == "week"
        assert len(payload["points"]) == 7
        assert payload["points"][0]["current"] == 2
        assert payload["current_total"] == 2
        assert payload["previous_total"] == 1
        assert payload["percent_change"] == 100.0
        assert payload["previous_window"][1] == payload["current_window"][0]
