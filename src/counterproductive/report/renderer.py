"""Report rendering.

Lays a Statistics Snapshot out as a ReportDocument. The renderer only
formats: every number it shows comes from the snapshot verbatim, and the
only values it derives are presentation flags (a day or hour is "hot"
once its count reaches the hot threshold). `now` feeds the generated-at
stamp and nothing else.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Optional

from counterproductive.models.events import EventSequence
from counterproductive.models.snapshot import DayActivity, StatisticsSnapshot
from counterproductive.report.document import (
    GridCell,
    GridRow,
    ReportDocument,
    Section,
)
from counterproductive.report.formatting import (
    NOT_AVAILABLE,
    format_date,
    format_datetime,
    format_day_label,
    format_duration,
    format_gap,
    format_hour,
    format_percentage,
)

logger = logging.getLogger("counterproductive.report.renderer")

DEFAULT_HOT_THRESHOLD = 10
NO_DATA_MESSAGE = "No button presses have been logged yet."


def render(
    snapshot: StatisticsSnapshot,
    full_sequence: EventSequence,
    filtered_sequence: EventSequence,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
    hot_threshold: int = DEFAULT_HOT_THRESHOLD,
) -> ReportDocument:
    """Render a snapshot into a report document.

    Args:
        snapshot: Statistics computed for this generation.
        full_sequence: All events. Raw presses reach the grid through the
            snapshot, so this only decides whether there is anything to show.
        filtered_sequence: Burst-collapsed events the snapshot describes.
        now: Generation time; defaults to the current time.
        tz: Timezone for every displayed date and time.
        hot_threshold: Count at which a grid day or hour is flagged hot.
    """
    now = now or datetime.now(timezone.utc)
    generated = dict(
        generated_at=now,
        generated_at_text=format_datetime(now, tz),
        hot_threshold=hot_threshold,
    )

    if snapshot.is_empty or not (full_sequence and filtered_sequence):
        logger.info("Rendering empty report")
        return ReportDocument(
            has_data=False,
            sections=[Section(key="summary", heading="Summary", lines=[NO_DATA_MESSAGE])],
            **generated,
        )

    sections = [
        _summary(snapshot, tz),
        _rapid_presses(snapshot),
        _filtered_stats(snapshot),
        _day_of_week(snapshot),
        _time_of_day(snapshot),
        _top_gaps(snapshot, tz),
        _daily_gaps(snapshot, tz),
    ]
    grid = [_grid_row(day, hot_threshold) for day in snapshot.activity_grid]

    return ReportDocument(
        has_data=True,
        sections=sections,
        grid=grid,
        **generated,
    )


def _summary(s: StatisticsSnapshot, tz: tzinfo) -> Section:
    return Section(
        key="summary",
        heading="Summary",
        lines=[
            f"The button has been pressed {s.last_count} times",
            f"Last button press: {format_datetime(s.last_event_at, tz)}",
            f"Project has been running for: {s.running_days} days",
        ],
    )


def _rapid_presses(s: StatisticsSnapshot) -> Section:
    threshold = f"{s.threshold_seconds:g}"
    lines = [
        f"Total rapid button presses (gap < {threshold} seconds): "
        f"{s.rapid_press_count} ({format_percentage(s.rapid_press_percentage)})",
    ]
    session = s.longest_rapid_session
    if session is not None:
        lines.append(
            f"Most rapid button presses in a single session: "
            f"{session.rapid_presses} on {format_date(session.date)}"
        )
    else:
        lines.append("Most rapid button presses in a single session: none")
    lines.append(
        f"Rapid button presses occurring within a {threshold}-second interval "
        "are combined into a single button press event below."
    )
    return Section(key="rapid", heading="Rapid presses", lines=lines)


def _filtered_stats(s: StatisticsSnapshot) -> Section:
    lines = [
        f"Average button presses per day: {s.average_per_day:.2f} "
        f"({s.filtered_events} entries over {s.total_days} days)",
        f"Average length between button presses: {format_duration(s.average_gap_seconds)}",
        f"Median length between button presses: {format_duration(s.median_gap_seconds)}",
    ]
    if s.most_active_date:
        lines.append(
            f"Most active day: {format_date(s.most_active_date.date)} "
            f"with {s.most_active_date.count} button presses"
        )
    if s.top_active_dates:
        ranked = ", ".join(
            f"{format_date(d.date)} ({d.count})" for d in s.top_active_dates
        )
        lines.append(f"Most active days: {ranked}")
    if s.max_presses_in_single_hour:
        slot = s.max_presses_in_single_hour
        lines.append(
            f"The most presses in a single hour of a day: {slot.count} presses "
            f"in the {format_hour(slot.hour)} on {format_date(slot.date)}"
        )
    if s.most_frequent_hour:
        lines.append(
            f"Most popular hour of the day: {format_hour(s.most_frequent_hour.hour)} "
            f"({s.most_frequent_hour.count} button presses)"
        )
    if s.most_popular_weekday:
        day = s.most_popular_weekday
        lines.append(
            f"Most popular day of the week: {day.name} with {day.count} "
            f"({format_percentage(day.percentage)}) button presses"
        )
    if s.weekday_vs_weekend:
        split = s.weekday_vs_weekend
        lines.append(
            f"Weekday vs Weekend Activity: {split.weekday_count} "
            f"({format_percentage(split.weekday_percentage)}) presses on weekdays vs "
            f"{split.weekend_count} ({format_percentage(split.weekend_percentage)}) "
            "presses on weekends"
        )
    return Section(key="statistics", heading="Statistics", lines=lines)


def _day_of_week(s: StatisticsSnapshot) -> Section:
    return Section(
        key="day_of_week",
        heading="Day of week",
        lines=[
            f"{b.name}: {b.count} ({format_percentage(b.percentage)})"
            for b in s.day_of_week
        ],
    )


def _time_of_day(s: StatisticsSnapshot) -> Section:
    return Section(
        key="time_of_day",
        heading="Time of day",
        lines=[
            f"{b.name.capitalize()} ({b.start_hour:02d}:00-{b.end_hour:02d}:00): "
            f"{b.count} ({format_percentage(b.percentage)})"
            for b in s.time_of_day
        ],
    )


def _top_gaps(s: StatisticsSnapshot, tz: tzinfo) -> Section:
    lines = [
        f"{i}. {format_gap(g.duration_seconds)} between "
        f"{format_datetime(g.start, tz)} -> {format_datetime(g.end, tz)}"
        for i, g in enumerate(s.top_gaps, start=1)
    ]
    return Section(
        key="top_gaps",
        heading=f"Top {len(s.top_gaps)} longest gaps between button presses",
        lines=lines or [NOT_AVAILABLE],
    )


def _daily_gaps(s: StatisticsSnapshot, tz: tzinfo) -> Section:
    lines = [
        f"{format_date(g.date)}: {format_gap(g.duration_seconds)} "
        f"({format_datetime(g.start, tz)} -> {format_datetime(g.end, tz)})"
        for g in reversed(s.longest_gap_by_date)
    ]
    return Section(
        key="daily_gaps",
        heading="Longest gap per day",
        lines=lines or [NOT_AVAILABLE],
    )


def _grid_row(day: DayActivity, hot_threshold: int) -> GridRow:
    cells = []
    for cell in day.cells:
        if cell.presses:
            tooltip = ", ".join(f"{p.time} (#{p.count})" for p in cell.presses)
        else:
            tooltip = f"No presses during {cell.hour}:00 - {cell.hour + 1}:00"
        cells.append(GridCell(
            hour=cell.hour,
            count=cell.count,
            hot=cell.count >= hot_threshold,
            tooltip=tooltip,
        ))
    return GridRow(
        day=day.date,
        label=format_day_label(day.date),
        is_weekend=day.is_weekend,
        hot=day.total >= hot_threshold,
        total=day.total,
        cells=cells,
    )
