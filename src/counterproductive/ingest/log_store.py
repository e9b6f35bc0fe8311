"""Append-only event log.

Incoming count messages become one line each:

    2025-04-09T19:02:33-07:00 CounterProductive/count 314

The timestamp is local wall-clock time with its numeric UTC offset, so
the log stays readable and every line can still be placed on the
timeline exactly. The log is re-read in full on every report run.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Optional

logger = logging.getLogger("counterproductive.ingest")

_LINE_BREAKS = re.compile(r"[\r\n]+")


def format_timestamp(moment: datetime, tz: tzinfo) -> str:
    """`2025-04-09T19:02:33-07:00`: local time, second precision, offset."""
    return moment.astimezone(tz).replace(microsecond=0).isoformat()


def format_record(
    topic: str,
    message: str,
    when: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> str:
    """Format one log line. Line breaks inside the message become spaces."""
    when = when or datetime.now(timezone.utc)
    text = _LINE_BREAKS.sub(" ", message).strip()
    return f"{format_timestamp(when, tz)} {topic} {text}"


def append_record(path: str | Path, line: str) -> None:
    """Append one line to the log, creating the file if needed."""
    with open(path, "a", encoding="utf-8") as f:
        f.write(line + "\n")
    logger.info("Appended log record: %s", line)


def read_log(path: str | Path) -> str:
    """Read the whole log. A log that does not exist yet reads as empty."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Log file %s does not exist yet", path)
        return ""
