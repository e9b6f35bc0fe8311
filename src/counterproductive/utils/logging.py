"""Structured JSON logging for all CounterProductive components.

Fields passed through ``extra=`` (a topic, a line number, a count) are
emitted as top-level keys next to the message.
"""

import logging
import json
import sys
from datetime import datetime, timezone

# Attributes every LogRecord carries; anything else came from extra=
_RESERVED = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Emit logs as structured JSON, one object per line."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and key not in log_entry:
                log_entry[key] = value
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(level="info"):
    """Configure structured logging under the counterproductive namespace.

    Safe to call more than once: an existing JSON handler is reused
    rather than stacked.
    """
    root = logging.getLogger("counterproductive")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not any(isinstance(h.formatter, JSONFormatter) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    root.propagate = False
    return root
