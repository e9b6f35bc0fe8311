"""Parsed log records and events.

A RawRecord is one structurally valid log line. An Event is a RawRecord
placed in local time and in sequence: hour, calendar date, weekday and the
gap since the previous event. Both are frozen -- stages that need a
different gap produce new Event values instead of mutating.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Optional

from pydantic import BaseModel, Field


class RawRecord(BaseModel):
    """One log line: `<timestamp> <topic> <count>`."""
    timestamp: datetime = Field(
        description="Point in time, parsed with its embedded UTC offset"
    )
    topic: str = Field(
        description="Topic the count arrived on (informational)"
    )
    count: int = Field(
        ge=0,
        description="Counter value carried by the message"
    )
    line_number: int = Field(
        default=0,
        description="1-based line in the source log, breaks timestamp ties"
    )

    class Config:
        frozen = True


class Event(BaseModel):
    """A RawRecord enriched with local-time and sequence fields."""
    timestamp: datetime
    topic: str
    count: int = Field(ge=0)
    line_number: int = 0
    hour_of_day: int = Field(
        ge=0,
        le=23,
        description="Hour in the configured local timezone"
    )
    calendar_date: date = Field(
        description="Date in the configured local timezone"
    )
    weekday: int = Field(
        ge=0,
        le=6,
        description="Day of week, Sunday=0 ... Saturday=6"
    )
    gap_since_previous: Optional[float] = Field(
        default=None,
        description="Seconds since the previous event; None for the first"
    )

    class Config:
        frozen = True

    @classmethod
    def from_record(cls, record: RawRecord, tz: tzinfo) -> Event:
        local = record.timestamp.astimezone(tz)
        return cls(
            timestamp=record.timestamp,
            topic=record.topic,
            count=record.count,
            line_number=record.line_number,
            hour_of_day=local.hour,
            calendar_date=local.date(),
            # isoweekday: Monday=1 ... Sunday=7
            weekday=local.isoweekday() % 7,
        )

    def with_gap(self, gap: Optional[float]) -> Event:
        """Return a copy carrying a different gap_since_previous."""
        return self.model_copy(update={"gap_since_previous": gap})


EventSequence = tuple[Event, ...]
