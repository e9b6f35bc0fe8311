"""Tests for log parsing into the full event sequence."""

from datetime import date, datetime, timedelta, timezone

import pytest

from counterproductive.analysis.parser import (
    is_count,
    is_record_line,
    parse,
    parse_record,
    parse_timestamp,
)
from counterproductive.config import resolve_timezone
from counterproductive.errors import MalformedRecord

VANCOUVER = resolve_timezone("America/Vancouver")
PST = resolve_timezone("-08:00")


def _log(*lines: str) -> str:
    return "\n".join(lines) + "\n"


# -----------------------------------------------------------------------
# Timestamp and record parsing
# -----------------------------------------------------------------------


class TestParseTimestamp:
    """Timestamps must carry a UTC offset in one of the accepted forms."""

    def test_colon_offset(self):
        ts = parse_timestamp("2025-04-09T19:02:33-07:00")
        assert ts.utcoffset() == timedelta(hours=-7)
        assert ts.astimezone(timezone.utc) == datetime(2025, 4, 10, 2, 2, 33, tzinfo=timezone.utc)

    def test_compact_offset(self):
        ts = parse_timestamp("2025-04-01T19:11:20-0700")
        assert ts == parse_timestamp("2025-04-01T19:11:20-07:00")

    def test_zulu(self):
        ts = parse_timestamp("2025-04-01T19:11:20Z")
        assert ts.utcoffset() == timedelta(0)

    def test_fractional_seconds(self):
        ts = parse_timestamp("2025-04-01T19:11:20.250+00:00")
        assert ts.microsecond == 250000

    def test_naive_rejected(self):
        with pytest.raises(ValueError):
            parse_timestamp("2025-04-01T19:11:20")

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            parse_timestamp("2025-04-01Tnoon")

    def test_impossible_date_rejected(self):
        with pytest.raises(ValueError):
            parse_timestamp("2025-13-45T19:11:20-07:00")


class TestParseRecord:

    def test_valid_record(self):
        rec = parse_record("2025-04-09T19:02:33-07:00 CounterProductive/count 314", 7)
        assert rec.topic == "CounterProductive/count"
        assert rec.count == 314
        assert rec.line_number == 7

    @pytest.mark.parametrize("line", [
        "2025-04-09T19:02:33-07:00 CounterProductive/count",
        "2025-04-09T19:02:33-07:00 CounterProductive/count 314 extra",
        "2025-04-09T19:02:33-07:00 CounterProductive/count abc",
        "2025-04-09T19:02:33-07:00 CounterProductive/count -4",
        "2025-04-09T19:02:33-07:00 CounterProductive/count 3.5",
        "2025-04-09T19:02:33 CounterProductive/count 314",
    ])
    def test_malformed(self, line):
        with pytest.raises(MalformedRecord) as exc:
            parse_record(line, 3)
        assert exc.value.line_number == 3
        assert exc.value.line == line


@pytest.mark.parametrize("token, expected", [
    ("0", True),
    ("314", True),
    ("-4", False),
    ("3.5", False),
    ("", False),
    ("\u0663", False),
])
def test_is_count(token, expected):
    assert is_count(token) is expected


class TestIsRecordLine:

    def test_date_prefix(self):
        assert is_record_line("2025-04-09T19:02:33-07:00 t 1")
        assert is_record_line("1999-01-01Tgarbage")

    def test_comments(self):
        assert not is_record_line("# button moved to the kitchen")
        assert not is_record_line("")
        assert not is_record_line("note 2025-04-09T19:02:33-07:00 t 1")
        assert not is_record_line("2025-04-09 19:02:33 t 1")


# -----------------------------------------------------------------------
# Full sequence
# -----------------------------------------------------------------------


class TestParse:
    """Verify sorting, gaps, local fields and the malformed-line policy."""

    def test_scenario_three_entries(self):
        events = parse(_log(
            "2025-01-01T00:00:00-08:00 t 1",
            "2025-01-01T00:00:10-08:00 t 2",
            "2025-01-02T00:00:00-08:00 t 3",
        ), PST)
        assert [e.count for e in events] == [1, 2, 3]
        assert events[0].gap_since_previous is None
        assert events[1].gap_since_previous == 10.0
        assert events[2].gap_since_previous == 86390.0

    def test_comments_skipped(self):
        events = parse(_log(
            "CounterProductive log",
            "",
            "2025-01-01T00:00:00-08:00 t 1",
            "# restarted broker",
            "2025-01-01T01:00:00-08:00 t 2",
        ), PST)
        assert len(events) == 2

    def test_empty_text(self):
        assert parse("", PST) == ()
        assert parse("just a note\n", PST) == ()

    def test_sorted_by_instant(self):
        events = parse(_log(
            "2025-01-01T10:00:00-08:00 t 2",
            "2025-01-01T17:00:00+00:00 t 1",  # 09:00 PST
            "2025-01-01T11:00:00-08:00 t 3",
        ), PST)
        assert [e.count for e in events] == [1, 2, 3]
        assert events[1].gap_since_previous == 3600.0

    def test_ties_keep_line_order(self):
        events = parse(_log(
            "2025-01-01T10:00:00-08:00 t 5",
            "2025-01-01T09:00:00-08:00 t 1",
            "2025-01-01T18:00:00+00:00 t 6",  # same instant as the first line
        ), PST)
        assert [e.count for e in events] == [1, 5, 6]
        assert [e.line_number for e in events] == [2, 1, 3]
        assert events[2].gap_since_previous == 0.0

    def test_malformed_skipped_by_default(self):
        events = parse(_log(
            "2025-01-01T00:00:00-08:00 t 1",
            "2025-01-01T00:05:00-08:00 t",
            "2025-01-01T00:10:00-08:00 t lots",
            "2025-01-01T00:15:00-08:00 t 4",
        ), PST)
        assert [e.count for e in events] == [1, 4]
        assert events[1].gap_since_previous == 900.0

    def test_malformed_aborts_when_strict(self):
        text = _log(
            "2025-01-01T00:00:00-08:00 t 1",
            "2025-01-01T00:05:00-08:00 t",
        )
        with pytest.raises(MalformedRecord) as exc:
            parse(text, PST, strict=True)
        assert exc.value.line_number == 2

    def test_comments_never_fail_strict(self):
        events = parse(_log("# a note", "2025-01-01T00:00:00-08:00 t 1"), PST, strict=True)
        assert len(events) == 1


class TestLocalFields:
    """Hour, date and weekday come from the configured timezone."""

    def test_local_date_not_utc_date(self):
        # 05:30 UTC on Apr 10 is 22:30 on Apr 9 in Vancouver (PDT)
        events = parse(_log("2025-04-10T05:30:00+00:00 t 1"), VANCOUVER)
        assert events[0].calendar_date == date(2025, 4, 9)
        assert events[0].hour_of_day == 22
        assert events[0].weekday == 3  # Wednesday

    def test_late_evening_local_offset(self):
        events = parse(_log("2025-04-09T23:59:59-07:00 t 1"), VANCOUVER)
        assert events[0].calendar_date == date(2025, 4, 9)
        assert events[0].hour_of_day == 23

    def test_same_log_other_zone(self):
        text = _log("2025-04-09T23:30:00-07:00 t 1")
        utc_events = parse(text, timezone.utc)
        assert utc_events[0].calendar_date == date(2025, 4, 10)
        assert utc_events[0].hour_of_day == 6

    def test_sunday_is_zero(self):
        events = parse(_log(
            "2025-01-05T12:00:00-08:00 t 1",  # Sunday
            "2025-01-04T12:00:00-08:00 t 2",  # Saturday
        ), PST)
        assert [e.weekday for e in events] == [6, 0]

    def test_events_are_frozen(self):
        events = parse(_log("2025-01-05T12:00:00-08:00 t 1"), PST)
        with pytest.raises(Exception):
            events[0].count = 99
