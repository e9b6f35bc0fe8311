"""CounterProductive configuration via environment variables.

Every knob is a COUNTERPRODUCTIVE_* variable. The local timezone is
explicit configuration: report dates and hours never depend on the
host clock's zone.
"""

import os
import re
import logging
from datetime import timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger("counterproductive.config")

_OFFSET_PATTERN = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def resolve_timezone(name: str) -> tzinfo:
    """Resolve a timezone setting into a tzinfo.

    Accepts an IANA name ("America/Vancouver"), "UTC"/"Z", or a fixed
    numeric offset ("-07:00", "+0530").
    """
    name = name.strip()
    if name.upper() in ("UTC", "Z"):
        return timezone.utc

    match = _OFFSET_PATTERN.match(name)
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes))
        if delta >= timedelta(hours=24):
            raise ValueError(f"Offset out of range: {name}")
        return timezone(-delta if sign == "-" else delta)

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def _env_bool(key: str, default: str) -> bool:
    return os.environ.get(key, default).strip().lower() in ("1", "true", "yes")


class GistConfig:
    """Remote snippet store delivery settings, parsed from environment."""

    def __init__(self):
        self.gist_id = os.environ.get("COUNTERPRODUCTIVE_GIST_ID", "")
        self.token = os.environ.get("COUNTERPRODUCTIVE_GITHUB_TOKEN", "")
        self.report_filename = os.environ.get(
            "COUNTERPRODUCTIVE_GIST_FILENAME", "report.html"
        )
        self.data_filename = os.environ.get(
            "COUNTERPRODUCTIVE_GIST_DATA_FILENAME", "counterproductive-data.json"
        )
        self.api_url = os.environ.get(
            "COUNTERPRODUCTIVE_GIST_API_URL", "https://api.github.com"
        ).rstrip("/")
        self.timeout = int(os.environ.get("COUNTERPRODUCTIVE_GIST_TIMEOUT", "30"))

    @property
    def enabled(self) -> bool:
        return bool(self.gist_id and self.token)


class Settings:
    """All configuration sourced from environment."""

    def __init__(self):
        # Core
        self.version = "0.1.0"
        self.log_level = os.environ.get("COUNTERPRODUCTIVE_LOG_LEVEL", "info")
        self.api_port = int(os.environ.get("COUNTERPRODUCTIVE_API_PORT", "8080"))
        self.topic = os.environ.get(
            "COUNTERPRODUCTIVE_TOPIC", "CounterProductive/count"
        )

        # Files
        self.log_file = os.environ.get("COUNTERPRODUCTIVE_LOG_FILE", "output.txt")
        self.report_file = os.environ.get(
            "COUNTERPRODUCTIVE_REPORT_FILE", "report.html"
        )

        # Analysis
        self.timezone_name = os.environ.get(
            "COUNTERPRODUCTIVE_TIMEZONE", "America/Vancouver"
        )
        self.burst_threshold_seconds = float(
            os.environ.get("COUNTERPRODUCTIVE_BURST_THRESHOLD_SECONDS", "30")
        )
        self.hot_threshold = int(
            os.environ.get("COUNTERPRODUCTIVE_HOT_THRESHOLD", "10")
        )
        self.strict_parsing = _env_bool("COUNTERPRODUCTIVE_STRICT_PARSING", "false")
        self.rapid_press_offset = int(
            os.environ.get("COUNTERPRODUCTIVE_RAPID_PRESS_OFFSET", "0")
        )

        # Delivery
        self.gist = GistConfig()

        self.tz = resolve_timezone(self.timezone_name)
        if self.rapid_press_offset:
            logger.info(
                "Rapid press count will be corrected by %d", self.rapid_press_offset
            )


settings = Settings()
