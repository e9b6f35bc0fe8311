"""Report generation pipeline.

This module is the conductor of one report generation. It drives the
raw log text through the full sequence of stages:
parse -> burst filter -> recompute gaps -> aggregate -> caller
corrections -> render.

Each run starts from the full log and produces fresh values; nothing is
cached between runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from counterproductive.analysis.aggregator import aggregate, rapid_press_percentage
from counterproductive.analysis.burst import burst_filter, recompute_gaps
from counterproductive.analysis.parser import parse
from counterproductive.config import Settings, settings
from counterproductive.ingest.log_store import read_log
from counterproductive.models.events import EventSequence
from counterproductive.models.snapshot import StatisticsSnapshot
from counterproductive.report.document import ReportDocument
from counterproductive.report.renderer import render

logger = logging.getLogger("counterproductive.pipeline")


@dataclass(frozen=True)
class ReportResult:
    """Everything one report generation produced."""
    full: EventSequence
    filtered: EventSequence
    snapshot: StatisticsSnapshot
    document: ReportDocument


def apply_rapid_press_offset(
    snapshot: StatisticsSnapshot, offset: int
) -> StatisticsSnapshot:
    """Add a historical correction to the rapid press count.

    Presses that happened before logging began are known only as a
    total. The aggregator always counts from zero; callers who want the
    historical total apply it here, producing a new snapshot.
    """
    if not offset or snapshot.is_empty:
        return snapshot

    count = snapshot.rapid_press_count + offset
    pct = rapid_press_percentage(count, snapshot.last_count or 0)
    missing = [m for m in snapshot.missing if m != "rapid_press_percentage"]
    if pct is None:
        missing.append("rapid_press_percentage")
    return snapshot.model_copy(update={
        "rapid_press_count": count,
        "rapid_press_percentage": pct,
        "missing": tuple(missing),
    })


def build_report(
    log_text: str,
    config: Settings = settings,
    now: Optional[datetime] = None,
) -> ReportResult:
    """Run every stage over the log text and return all intermediate values."""
    tz = config.tz
    threshold = config.burst_threshold_seconds

    # Stage 1: Parse
    full = parse(log_text, tz, strict=config.strict_parsing)

    # Stage 2: Collapse bursts, then measure gaps between survivors
    filtered = recompute_gaps(burst_filter(full, threshold))
    logger.info(
        "Burst filter kept %d of %d events (threshold %ss)",
        len(filtered), len(full), threshold,
    )

    # Stage 3: Statistics
    snapshot = aggregate(full, filtered, threshold, tz)
    snapshot = apply_rapid_press_offset(snapshot, config.rapid_press_offset)

    # Stage 4: Document
    document = render(
        snapshot, full, filtered, now=now, tz=tz, hot_threshold=config.hot_threshold
    )
    return ReportResult(full=full, filtered=filtered, snapshot=snapshot, document=document)


def generate_report_file(
    config: Settings = settings,
    now: Optional[datetime] = None,
) -> ReportResult:
    """Read the log file, build the report and write its HTML to disk."""
    result = build_report(read_log(config.log_file), config, now)
    Path(config.report_file).write_text(result.document.to_html(), encoding="utf-8")
    logger.info(
        "Report generated and saved to %s (%s)",
        config.report_file, result.snapshot.status.value,
    )
    return result
