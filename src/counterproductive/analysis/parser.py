"""Log parsing.

Turns the raw text of the event log into the full sequence: every record
line parsed, placed in local time, sorted by timestamp and annotated with
the gap since its predecessor.

A line is a record candidate only when its first token starts with a
`YYYY-MM-DDT` date prefix. Anything else is a comment or note and is
dropped without complaint. A candidate that then fails structural parsing
is a MalformedRecord: skipped with a warning by default, fatal when
parsing strictly.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, tzinfo

from counterproductive.errors import MalformedRecord
from counterproductive.models.events import Event, EventSequence, RawRecord

logger = logging.getLogger("counterproductive.analysis.parser")

DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T")

_TIMESTAMP = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{1,6})?"
    r"(?P<offset>Z|[+-]\d{2}:?\d{2})?$"
)
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def is_record_line(line: str) -> bool:
    """True when the line's first token carries the record date prefix."""
    return bool(DATE_PREFIX.match(line.lstrip()))


def is_count(token: str) -> bool:
    """True when the token is a non-negative decimal integer."""
    return token.isascii() and token.isdigit()


def parse_timestamp(token: str) -> datetime:
    """Parse an ISO-8601 timestamp that carries a UTC offset.

    Accepts `Z`, `+HH:MM` and `+HHMM` offsets. Raises ValueError for
    anything else, including timestamps without an offset -- a naive
    timestamp cannot be placed on the timeline deterministically.
    """
    match = _TIMESTAMP.match(token)
    if not match:
        raise ValueError(f"not an ISO-8601 timestamp: {token}")
    offset = match.group("offset")
    if offset is None:
        raise ValueError(f"timestamp has no UTC offset: {token}")

    if offset == "Z":
        normalized = token[:-1] + "+00:00"
    elif ":" not in offset:
        normalized = _COMPACT_OFFSET.sub(r"\1:\2", token)
    else:
        normalized = token
    return datetime.fromisoformat(normalized)


def parse_record(line: str, line_number: int = 0) -> RawRecord:
    """Parse one record line. Raises MalformedRecord on any defect."""
    tokens = line.split()
    if len(tokens) != 3:
        raise MalformedRecord(
            line_number, line, f"expected 3 fields, found {len(tokens)}"
        )
    ts_token, topic, count_token = tokens

    try:
        timestamp = parse_timestamp(ts_token)
    except ValueError as e:
        raise MalformedRecord(line_number, line, str(e)) from e

    if not is_count(count_token):
        raise MalformedRecord(
            line_number, line, f"count is not a non-negative integer: {count_token}"
        )

    return RawRecord(
        timestamp=timestamp,
        topic=topic,
        count=int(count_token),
        line_number=line_number,
    )


def parse(log_text: str, tz: tzinfo, strict: bool = False) -> EventSequence:
    """Parse raw log text into the full, sorted event sequence.

    Args:
        log_text: Entire content of the log file.
        tz: Local timezone used for hour, date and weekday.
        strict: Abort on the first malformed record instead of skipping it.

    Returns:
        Events sorted ascending by timestamp (stable on ties), with
        gap_since_previous set on every event after the first.
    """
    records: list[RawRecord] = []
    skipped = 0

    for line_number, line in enumerate(log_text.splitlines(), start=1):
        if not is_record_line(line):
            continue
        try:
            records.append(parse_record(line.strip(), line_number))
        except MalformedRecord as e:
            if strict:
                raise
            skipped += 1
            logger.warning(
                "Skipping malformed record: %s", e,
                extra={"line_number": e.line_number},
            )

    # sorted() is stable, so equal timestamps keep line order
    records = sorted(records, key=lambda r: r.timestamp)
    events = with_gaps(Event.from_record(r, tz) for r in records)

    logger.debug(
        "Parsed %d events (%d malformed lines skipped)", len(events), skipped
    )
    return events


def with_gaps(events) -> EventSequence:
    """Fill gap_since_previous in a single pass over already-ordered events."""
    out: list[Event] = []
    previous: Event | None = None
    for event in events:
        gap = None
        if previous is not None:
            gap = (event.timestamp - previous.timestamp).total_seconds()
        out.append(event.with_gap(gap))
        previous = event
    return tuple(out)
