"""Tests for burst filtering and filtered-gap recomputation."""

from datetime import datetime, timedelta

import pytest

from counterproductive.analysis.burst import burst_filter, is_rapid, recompute_gaps
from counterproductive.analysis.parser import parse
from counterproductive.config import resolve_timezone

PST = resolve_timezone("-08:00")
BASE = datetime(2025, 1, 1, 9, 0, 0, tzinfo=PST)


def _sequence(offsets: list[float]):
    """Parse a log with one event per offset (seconds after BASE)."""
    lines = [
        f"{(BASE + timedelta(seconds=s)).isoformat()} t {i + 1}"
        for i, s in enumerate(offsets)
    ]
    return parse("\n".join(lines), PST)


class TestBurstFilter:

    def test_scenario_three_entries(self):
        full = parse(
            "2025-01-01T00:00:00-08:00 t 1\n"
            "2025-01-01T00:00:10-08:00 t 2\n"
            "2025-01-02T00:00:00-08:00 t 3\n",
            PST,
        )
        filtered = burst_filter(full, 30)
        assert [e.count for e in filtered] == [1, 3]

    def test_empty_and_single(self):
        assert burst_filter(()) == ()
        single = _sequence([0])
        assert burst_filter(single) == single

    def test_threshold_is_inclusive(self):
        full = _sequence([0, 30, 59.5, 120])
        assert [e.count for e in burst_filter(full, 30)] == [1, 2, 4]

    def test_keeps_first_even_inside_burst(self):
        full = _sequence([0, 1, 2, 3])
        filtered = burst_filter(full, 30)
        assert filtered == (full[0],)

    def test_is_ordered_subsequence(self):
        full = _sequence([0, 5, 100, 104, 300, 301, 302, 900, 2000])
        filtered = burst_filter(full, 30)
        assert filtered[0] == full[0]
        positions = [full.index(e) for e in filtered]
        assert positions == sorted(positions)
        assert [e.count for e in filtered] == [1, 3, 5, 8, 9]

    def test_gaps_untouched(self):
        full = _sequence([0, 10, 100])
        filtered = burst_filter(full, 30)
        # Event 3 keeps its full-sequence gap (90s from event 2)
        assert filtered[1].gap_since_previous == 90.0

    def test_zero_threshold_keeps_everything(self):
        full = _sequence([0, 0, 1])
        assert burst_filter(full, 0) == full

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            burst_filter(_sequence([0, 1]), -1)


class TestRecomputeGaps:

    def test_gaps_against_filtered_neighbours(self):
        full = _sequence([0, 10, 100])
        filtered = recompute_gaps(burst_filter(full, 30))
        assert filtered[0].gap_since_previous is None
        assert filtered[1].gap_since_previous == 100.0

    def test_returns_new_events(self):
        full = _sequence([0, 10, 100])
        filtered = burst_filter(full, 30)
        recomputed = recompute_gaps(filtered)
        assert filtered[1].gap_since_previous == 90.0
        assert recomputed[1].gap_since_previous == 100.0
        assert recomputed[1].timestamp == filtered[1].timestamp


def test_is_rapid():
    assert is_rapid(10.0, 30)
    assert not is_rapid(30.0, 30)
    assert not is_rapid(None, 30)
