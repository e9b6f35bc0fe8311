"""Tests for end-to-end report generation."""

from datetime import datetime, timezone

import pytest

from counterproductive.config import Settings
from counterproductive.errors import MalformedRecord
from counterproductive.models.snapshot import SnapshotStatus
from counterproductive.pipeline import (
    apply_rapid_press_offset,
    build_report,
    generate_report_file,
)

NOW = datetime(2025, 4, 12, 3, 0, 0, tzinfo=timezone.utc)

LOG = (
    "2025-04-09T19:02:33-07:00 CounterProductive/count 314\n"
    "2025-04-09T19:02:40-07:00 CounterProductive/count 315\n"
    "2025-04-09T21:10:00-07:00 CounterProductive/count 316\n"
    "2025-04-10T05:30:00+00:00 CounterProductive/count 317\n"
    "2025-04-11T08:00:00-07:00 CounterProductive/count 318\n"
)


@pytest.fixture
def config(monkeypatch, tmp_path) -> Settings:
    monkeypatch.setenv("COUNTERPRODUCTIVE_TIMEZONE", "America/Vancouver")
    monkeypatch.setenv("COUNTERPRODUCTIVE_LOG_FILE", str(tmp_path / "output.txt"))
    monkeypatch.setenv("COUNTERPRODUCTIVE_REPORT_FILE", str(tmp_path / "report.html"))
    monkeypatch.delenv("COUNTERPRODUCTIVE_RAPID_PRESS_OFFSET", raising=False)
    monkeypatch.delenv("COUNTERPRODUCTIVE_STRICT_PARSING", raising=False)
    return Settings()


class TestBuildReport:

    def test_stages(self, config):
        result = build_report(LOG, config, now=NOW)
        assert len(result.full) == 5
        assert len(result.filtered) == 4
        assert result.snapshot.status == SnapshotStatus.OK
        assert result.snapshot.last_count == 318
        assert result.snapshot.rapid_press_count == 1
        assert result.document.has_data

    def test_filtered_gaps_recomputed(self, config):
        result = build_report(LOG, config, now=NOW)
        # 19:02:33 -> 21:10:00, skipping the collapsed 19:02:40 press
        assert result.filtered[1].gap_since_previous == 2 * 3600 + 7 * 60 + 27

    def test_local_dates(self, config):
        result = build_report(LOG, config, now=NOW)
        # 05:30 UTC on Apr 10 is still Apr 9 in Vancouver
        assert result.snapshot.total_days == 2
        assert result.snapshot.most_active_date.count == 3
        assert str(result.snapshot.most_active_date.date) == "2025-04-09"

    def test_strict_parsing(self, config):
        config.strict_parsing = True
        with pytest.raises(MalformedRecord):
            build_report(LOG + "2025-04-12T08:00:00-07:00 CounterProductive/count\n", config)

    def test_empty_log(self, config):
        result = build_report("", config, now=NOW)
        assert result.snapshot.status == SnapshotStatus.EMPTY_LOG
        assert not result.document.has_data

    def test_configured_offset_applied(self, config):
        config.rapid_press_offset = 152
        result = build_report(LOG, config, now=NOW)
        assert result.snapshot.rapid_press_count == 153


class TestRapidPressOffset:

    def test_offset_recomputes_percentage(self, config):
        snapshot = build_report(LOG, config, now=NOW).snapshot
        corrected = apply_rapid_press_offset(snapshot, 152)
        assert corrected.rapid_press_count == 153
        assert isinstance(corrected.missing, tuple)
        assert corrected.rapid_press_percentage == round(153 / 318 * 100, 2)
        # the original snapshot is untouched
        assert snapshot.rapid_press_count == 1

    def test_zero_offset_is_identity(self, config):
        snapshot = build_report(LOG, config, now=NOW).snapshot
        assert apply_rapid_press_offset(snapshot, 0) is snapshot

    def test_empty_snapshot_unchanged(self, config):
        snapshot = build_report("", config, now=NOW).snapshot
        assert apply_rapid_press_offset(snapshot, 10).rapid_press_count == 0


def test_generate_report_file(config):
    with open(config.log_file, "w", encoding="utf-8") as f:
        f.write(LOG)
    result = generate_report_file(config, now=NOW)
    with open(config.report_file, encoding="utf-8") as f:
        html = f.read()
    assert html == result.document.to_html()
    assert "The button has been pressed 318 times" in html


def test_generate_report_file_without_log(config):
    result = generate_report_file(config, now=NOW)
    assert result.snapshot.status == SnapshotStatus.EMPTY_LOG
