"""Burst filtering.

Pressing the physical button several times within a few seconds is one
logical press. The filter keeps the first event of the log and every
event that arrived at least `threshold_seconds` after its predecessor in
the full sequence.

Filtering never touches gaps. Statistics on the filtered sequence need
gaps measured between filtered neighbours; recompute_gaps() is that
separate step.
"""

from __future__ import annotations

from counterproductive.analysis.parser import with_gaps
from counterproductive.models.events import EventSequence

DEFAULT_THRESHOLD_SECONDS = 30.0


def burst_filter(
    full_sequence: EventSequence,
    threshold_seconds: float = DEFAULT_THRESHOLD_SECONDS,
) -> EventSequence:
    """Collapse rapid-fire presses into one event per burst."""
    if threshold_seconds < 0:
        raise ValueError(f"threshold_seconds must be >= 0, got {threshold_seconds}")

    return tuple(
        event
        for i, event in enumerate(full_sequence)
        if i == 0 or event.gap_since_previous >= threshold_seconds
    )


def recompute_gaps(sequence: EventSequence) -> EventSequence:
    """Return the sequence with gaps measured against its own neighbours."""
    return with_gaps(sequence)


def is_rapid(gap: float | None, threshold_seconds: float) -> bool:
    """True for a gap that belongs to a burst."""
    return gap is not None and gap < threshold_seconds
