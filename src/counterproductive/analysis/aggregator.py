"""Temporal aggregation.

Computes the Statistics Snapshot from the two event sequences. Most
metrics describe the filtered (burst-collapsed) sequence; the burst
metrics -- rapid press count and longest rapid session -- describe the
full sequence, since bursts are exactly what filtering removes.

Tie-break rules are part of the output contract:

- most frequent hour: lowest hour wins
- most active date, top gaps: first seen wins
- busiest single hour slot: first slot to reach the maximum wins

Every ratio guards its denominator. Metrics that need two or more events
raise InsufficientData internally and are reported as missing; an empty
sequence yields the empty snapshot.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import date, timezone, tzinfo
from typing import Callable, Optional, TypeVar

import numpy as np

from counterproductive.analysis.burst import DEFAULT_THRESHOLD_SECONDS, is_rapid
from counterproductive.errors import EmptyLog, InsufficientData
from counterproductive.models.events import EventSequence
from counterproductive.models.snapshot import (
    WEEKDAY_NAMES,
    DailyGap,
    DateCount,
    DayActivity,
    GapInterval,
    HourCell,
    HourCount,
    HourSlot,
    PressMark,
    RapidSession,
    SnapshotStatus,
    StatisticsSnapshot,
    TimeOfDayBucket,
    WeekdayBucket,
    WeekSplit,
)

logger = logging.getLogger("counterproductive.analysis.aggregator")

T = TypeVar("T")

TOP_GAPS = 3
TOP_DATES = 3
SECONDS_PER_DAY = 86400

# (name, inclusive start hour, exclusive end hour)
TIME_OF_DAY_BUCKETS = [
    ("morning", 0, 8),
    ("daytime", 8, 17),
    ("evening", 17, 24),
]

WEEKEND_DAYS = (0, 6)


def aggregate(
    full_sequence: EventSequence,
    filtered_sequence: EventSequence,
    threshold_seconds: float = DEFAULT_THRESHOLD_SECONDS,
    tz: tzinfo = timezone.utc,
) -> StatisticsSnapshot:
    """Compute every statistic for one report generation.

    Args:
        full_sequence: All events, sorted, with full-sequence gaps.
        filtered_sequence: Burst-collapsed events, sorted.
        threshold_seconds: Burst threshold used for the rapid press metrics.
        tz: Local timezone the events were parsed in.

    Returns:
        A fresh StatisticsSnapshot. Never raises for lack of data.
    """
    try:
        return _aggregate(full_sequence, filtered_sequence, threshold_seconds, tz)
    except EmptyLog:
        logger.warning("No usable events in log, producing empty snapshot")
        return StatisticsSnapshot.empty(threshold_seconds, timezone_name(tz))


def _aggregate(
    full: EventSequence,
    filtered: EventSequence,
    threshold_seconds: float,
    tz: tzinfo,
) -> StatisticsSnapshot:
    if not filtered:
        raise EmptyLog("filtered sequence is empty")
    # The filter always keeps the first event, so a non-empty filtered
    # sequence implies a non-empty full sequence.
    if not full:
        full = filtered

    missing: list[str] = []
    gaps = filtered_gaps(filtered)
    total = len(filtered)

    day_counts = Counter(e.calendar_date for e in filtered)
    weekday_buckets = day_of_week_histogram(filtered)
    rapid_count = rapid_press_count(full, threshold_seconds)
    last_count = filtered[-1].count

    rapid_pct = rapid_press_percentage(rapid_count, last_count)
    if rapid_pct is None:
        missing.append("rapid_press_percentage")

    snapshot = StatisticsSnapshot(
        status=(
            SnapshotStatus.OK if total >= 2 else SnapshotStatus.INSUFFICIENT_DATA
        ),
        missing=missing,
        threshold_seconds=threshold_seconds,
        timezone=timezone_name(tz),
        total_events=len(full),
        filtered_events=total,
        last_count=last_count,
        first_event_at=full[0].timestamp,
        last_event_at=full[-1].timestamp,
        running_days=math.floor(
            (full[-1].timestamp - full[0].timestamp).total_seconds() / SECONDS_PER_DAY
        ),
        total_days=len(day_counts),
        average_per_day=round(total / len(day_counts), 2),
        most_active_date=most_active_date(day_counts),
        top_active_dates=top_active_dates(day_counts),
        most_frequent_hour=most_frequent_hour(filtered),
        max_presses_in_single_hour=max_presses_in_single_hour(filtered),
        top_gaps=_guarded("top_gaps", lambda: top_gaps(filtered), missing, []),
        longest_gap_by_date=_guarded(
            "longest_gap_by_date", lambda: longest_gap_by_date(filtered), missing, []
        ),
        median_gap_seconds=_guarded(
            "median_gap_seconds", lambda: median_gap(gaps), missing
        ),
        average_gap_seconds=_guarded(
            "average_gap_seconds", lambda: average_gap(gaps), missing
        ),
        day_of_week=weekday_buckets,
        most_popular_weekday=max(weekday_buckets, key=lambda b: b.count),
        weekday_vs_weekend=weekday_vs_weekend(weekday_buckets),
        time_of_day=time_of_day_histogram(filtered),
        rapid_press_count=rapid_count,
        rapid_press_percentage=rapid_pct,
        longest_rapid_session=_guarded(
            "longest_rapid_session",
            lambda: longest_rapid_session(full, threshold_seconds),
            missing,
        ),
        activity_grid=activity_grid(full, filtered, tz),
    )

    logger.info(
        "Aggregated %d events (%d after burst filter) over %d days",
        len(full), total, snapshot.total_days,
    )
    return snapshot


def _guarded(
    name: str,
    compute: Callable[[], T],
    missing: list[str],
    default: Optional[T] = None,
) -> Optional[T]:
    """Run a two-point metric, recording its name when data is insufficient."""
    try:
        return compute()
    except InsufficientData as e:
        logger.debug("Metric unavailable: %s", e)
        missing.append(name)
        return default


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def timezone_name(tz: tzinfo) -> str:
    return getattr(tz, "key", None) or str(tz)


def percentage(part: int, whole: int) -> Optional[float]:
    """part/whole as a two-decimal percentage; None for an empty whole."""
    if whole <= 0:
        return None
    return round(part / whole * 100, 2)


def filtered_gaps(sequence: EventSequence) -> list[float]:
    """Consecutive gaps in seconds, measured between the given neighbours."""
    return [
        (curr.timestamp - prev.timestamp).total_seconds()
        for prev, curr in zip(sequence, sequence[1:])
    ]


# ---------------------------------------------------------------------------
# Gap statistics
# ---------------------------------------------------------------------------


def median_gap(gaps: list[float]) -> float:
    """Median of the gaps; even counts average the two middle values."""
    if not gaps:
        raise InsufficientData("median_gap_seconds", available=len(gaps) + 1)
    return float(np.median(np.asarray(gaps, dtype=np.float64)))


def average_gap(gaps: list[float]) -> float:
    if not gaps:
        raise InsufficientData("average_gap_seconds", available=len(gaps) + 1)
    return float(np.mean(np.asarray(gaps, dtype=np.float64)))


def top_gaps(sequence: EventSequence, n: int = TOP_GAPS) -> list[GapInterval]:
    """The n largest consecutive gaps, descending, ties in insertion order."""
    if len(sequence) < 2:
        raise InsufficientData("top_gaps", available=len(sequence))
    intervals = [
        GapInterval(
            duration_seconds=(curr.timestamp - prev.timestamp).total_seconds(),
            start=prev.timestamp,
            end=curr.timestamp,
        )
        for prev, curr in zip(sequence, sequence[1:])
    ]
    # reverse=True keeps sort stability for equal durations
    return sorted(intervals, key=lambda g: g.duration_seconds, reverse=True)[:n]


def longest_gap_by_date(sequence: EventSequence) -> list[DailyGap]:
    """Longest gap per date, attributed to the date of the earlier event."""
    if len(sequence) < 2:
        raise InsufficientData("longest_gap_by_date", available=len(sequence))
    longest: dict[date, DailyGap] = {}
    for prev, curr in zip(sequence, sequence[1:]):
        gap = (curr.timestamp - prev.timestamp).total_seconds()
        current = longest.get(prev.calendar_date)
        if current is None or gap > current.duration_seconds:
            longest[prev.calendar_date] = DailyGap(
                date=prev.calendar_date,
                duration_seconds=gap,
                start=prev.timestamp,
                end=curr.timestamp,
            )
    return list(longest.values())


# ---------------------------------------------------------------------------
# Frequency statistics
# ---------------------------------------------------------------------------


def most_frequent_hour(sequence: EventSequence) -> HourCount:
    counts = Counter(e.hour_of_day for e in sequence)
    # Ascending iteration makes max() resolve ties to the lowest hour
    hour = max(sorted(counts), key=lambda h: counts[h])
    return HourCount(hour=hour, count=counts[hour])


def most_active_date(day_counts: Counter) -> DateCount:
    day, count = max(day_counts.items(), key=lambda kv: kv[1])
    return DateCount(date=day, count=count)


def top_active_dates(day_counts: Counter, n: int = TOP_DATES) -> list[DateCount]:
    ranked = sorted(day_counts.items(), key=lambda kv: kv[1], reverse=True)
    return [DateCount(date=day, count=count) for day, count in ranked[:n]]


def max_presses_in_single_hour(sequence: EventSequence) -> HourSlot:
    """The (date, hour) slot holding the most events."""
    slots: Counter = Counter()
    best: Optional[tuple[date, int]] = None
    best_count = 0
    for e in sequence:
        key = (e.calendar_date, e.hour_of_day)
        slots[key] += 1
        if slots[key] > best_count:
            best_count = slots[key]
            best = key
    return HourSlot(date=best[0], hour=best[1], count=best_count)


def day_of_week_histogram(sequence: EventSequence) -> list[WeekdayBucket]:
    counts = [0] * 7
    for e in sequence:
        counts[e.weekday] += 1
    total = len(sequence)
    return [
        WeekdayBucket(
            weekday=day,
            name=WEEKDAY_NAMES[day],
            count=counts[day],
            percentage=percentage(counts[day], total) or 0.0,
        )
        for day in range(7)
    ]


def weekday_vs_weekend(buckets: list[WeekdayBucket]) -> WeekSplit:
    weekend = sum(b.count for b in buckets if b.weekday in WEEKEND_DAYS)
    weekday = sum(b.count for b in buckets if b.weekday not in WEEKEND_DAYS)
    combined = weekday + weekend
    return WeekSplit(
        weekday_count=weekday,
        weekday_percentage=percentage(weekday, combined) or 0.0,
        weekend_count=weekend,
        weekend_percentage=percentage(weekend, combined) or 0.0,
    )


def time_of_day_histogram(sequence: EventSequence) -> list[TimeOfDayBucket]:
    total = len(sequence)
    buckets = []
    for name, start, end in TIME_OF_DAY_BUCKETS:
        count = sum(1 for e in sequence if start <= e.hour_of_day < end)
        buckets.append(TimeOfDayBucket(
            name=name,
            start_hour=start,
            end_hour=end,
            count=count,
            percentage=percentage(count, total) or 0.0,
        ))
    return buckets


# ---------------------------------------------------------------------------
# Burst statistics (full sequence)
# ---------------------------------------------------------------------------


def rapid_press_count(full: EventSequence, threshold_seconds: float) -> int:
    """Consecutive full-sequence pairs closer than the threshold."""
    return sum(1 for e in full[1:] if is_rapid(e.gap_since_previous, threshold_seconds))


def rapid_press_percentage(rapid_count: int, last_count: int) -> Optional[float]:
    """Rapid presses relative to the counter's latest value."""
    return percentage(rapid_count, last_count)


def longest_rapid_session(
    full: EventSequence, threshold_seconds: float
) -> Optional[RapidSession]:
    """Longest run of consecutive rapid gaps; None when there are none."""
    if len(full) < 2:
        raise InsufficientData("longest_rapid_session", available=len(full))

    longest = 0
    longest_date: Optional[date] = None
    current = 0
    for e in full[1:]:
        if is_rapid(e.gap_since_previous, threshold_seconds):
            current += 1
            if current > longest:
                longest = current
                longest_date = e.calendar_date
        else:
            current = 0

    if longest == 0:
        return None
    return RapidSession(
        rapid_presses=longest, event_count=longest + 1, date=longest_date
    )


# ---------------------------------------------------------------------------
# Activity grid
# ---------------------------------------------------------------------------


def activity_grid(
    full: EventSequence, filtered: EventSequence, tz: tzinfo
) -> list[DayActivity]:
    """Day-by-hour grid over the filtered dates, most recent date first.

    Cell counts come from the filtered sequence; each cell also lists the
    raw presses of the full sequence that fell in the same date and hour.
    """
    counts: Counter = Counter((e.calendar_date, e.hour_of_day) for e in filtered)
    presses: dict[tuple[date, int], list[PressMark]] = {}
    for e in full:
        presses.setdefault((e.calendar_date, e.hour_of_day), []).append(
            PressMark(
                time=e.timestamp.astimezone(tz).strftime("%H:%M:%S"),
                count=e.count,
            )
        )

    rows = []
    for day in sorted({e.calendar_date for e in filtered}, reverse=True):
        weekday = day.isoweekday() % 7
        cells = [
            HourCell(
                hour=hour,
                count=counts.get((day, hour), 0),
                presses=presses.get((day, hour), []),
            )
            for hour in range(24)
        ]
        rows.append(DayActivity(
            date=day,
            weekday_name=WEEKDAY_NAMES[weekday],
            is_weekend=weekday in WEEKEND_DAYS,
            cells=cells,
            total=sum(c.count for c in cells),
        ))
    return rows
