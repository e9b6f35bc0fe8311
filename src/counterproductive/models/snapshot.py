"""Statistics Snapshot data model.

The Statistics Snapshot is the central data contract of CounterProductive.
The aggregator produces it, the renderer and the API consume it verbatim.
It is produced fresh on every report generation and never updated in
place; collections are tuples and corrections applied by callers produce
a new snapshot.

Metrics that need more data than the log holds are None and their names
are listed in `missing`, so absence of data is explicit rather than a
NaN or infinity leaking into the output.
"""

from __future__ import annotations

from datetime import date as Date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


WEEKDAY_NAMES = [
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
]


class SnapshotStatus(str, Enum):
    """How complete a snapshot is."""
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"
    EMPTY_LOG = "empty_log"


class HourCount(BaseModel):
    hour: int = Field(ge=0, le=23)
    count: int


class DateCount(BaseModel):
    date: Date
    count: int


class GapInterval(BaseModel):
    """A gap between two temporally adjacent events."""
    duration_seconds: float = Field(ge=0.0)
    start: datetime
    end: datetime


class DailyGap(GapInterval):
    """Longest gap attributed to the date of its earlier event."""
    date: Date


class WeekdayBucket(BaseModel):
    weekday: int = Field(
        ge=0,
        le=6,
        description="Sunday=0 ... Saturday=6"
    )
    name: str
    count: int
    percentage: float


class WeekSplit(BaseModel):
    weekday_count: int
    weekday_percentage: float
    weekend_count: int
    weekend_percentage: float


class TimeOfDayBucket(BaseModel):
    name: str
    start_hour: int = Field(description="Inclusive local hour")
    end_hour: int = Field(description="Exclusive local hour")
    count: int
    percentage: float


class HourSlot(BaseModel):
    """A single hour of a single date."""
    date: Date
    hour: int = Field(ge=0, le=23)
    count: int


class RapidSession(BaseModel):
    rapid_presses: int = Field(
        description="Consecutive gaps below the burst threshold"
    )
    event_count: int = Field(
        description="Events in the run (rapid_presses + 1)"
    )
    date: Date = Field(
        description="Local date of the event that completed the run"
    )


class PressMark(BaseModel):
    """One raw press shown inside a grid cell."""
    time: str = Field(description="Local wall-clock time, HH:MM:SS")
    count: int


class HourCell(BaseModel):
    hour: int = Field(ge=0, le=23)
    count: int = Field(description="Filtered events in this date+hour")
    presses: tuple[PressMark, ...] = Field(
        default=(),
        description="Every full-sequence press in this date+hour"
    )


class DayActivity(BaseModel):
    """One row of the day-by-hour activity grid."""
    date: Date
    weekday_name: str
    is_weekend: bool
    cells: tuple[HourCell, ...]
    total: int


class StatisticsSnapshot(BaseModel):
    """Every metric computed for one report generation."""
    status: SnapshotStatus = SnapshotStatus.OK
    missing: tuple[str, ...] = Field(
        default=(),
        description="Metrics that could not be computed for lack of data"
    )
    threshold_seconds: float = 30.0
    timezone: str = ""

    # Volume
    total_events: int = 0
    filtered_events: int = 0
    last_count: Optional[int] = None
    first_event_at: Optional[datetime] = None
    last_event_at: Optional[datetime] = None
    running_days: Optional[int] = None

    # Daily activity
    total_days: int = 0
    average_per_day: Optional[float] = None
    most_active_date: Optional[DateCount] = None
    top_active_dates: tuple[DateCount, ...] = ()
    most_frequent_hour: Optional[HourCount] = None
    max_presses_in_single_hour: Optional[HourSlot] = None

    # Gaps
    top_gaps: tuple[GapInterval, ...] = ()
    longest_gap_by_date: tuple[DailyGap, ...] = ()
    median_gap_seconds: Optional[float] = None
    average_gap_seconds: Optional[float] = None

    # Histograms
    day_of_week: tuple[WeekdayBucket, ...] = ()
    most_popular_weekday: Optional[WeekdayBucket] = None
    weekday_vs_weekend: Optional[WeekSplit] = None
    time_of_day: tuple[TimeOfDayBucket, ...] = ()

    # Bursts
    rapid_press_count: int = 0
    rapid_press_percentage: Optional[float] = None
    longest_rapid_session: Optional[RapidSession] = None

    activity_grid: tuple[DayActivity, ...] = ()

    class Config:
        frozen = True

    @property
    def is_empty(self) -> bool:
        return self.status == SnapshotStatus.EMPTY_LOG

    @classmethod
    def empty(cls, threshold_seconds: float, timezone: str) -> StatisticsSnapshot:
        """The well-defined snapshot of a log with no usable events."""
        return cls(
            status=SnapshotStatus.EMPTY_LOG,
            missing=("all",),
            threshold_seconds=threshold_seconds,
            timezone=timezone,
        )
