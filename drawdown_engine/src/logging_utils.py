"""
Logging Setup
=============
Root logger configuration for the driver and namespaced loggers for the
engine modules.

Engine events arrive as records carrying two extra attributes:
    event   – event name, e.g. ``simulation_started``
    fields  – dict of the event's keyword payload

Both formatters render those attributes; plain records are unaffected.
"""

import json
import logging
import sys
from typing import Any, Dict, Mapping

LOGGER_NAMESPACE = "drawdown_engine"
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"


def _render_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


def format_fields(fields: Mapping[str, Any]) -> str:
    """Render an event payload as ``key=value`` pairs in insertion order."""
    return " ".join(f"{key}={_render_value(val)}" for key, val in fields.items())


class EventTextFormatter(logging.Formatter):
    """Human-readable lines with event payloads appended as ``key=value``."""

    def __init__(self, fmt: str = TEXT_FORMAT):
        super().__init__(fmt)

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        fields = getattr(record, "fields", None)
        if fields:
            line = f"{line} {format_fields(fields)}"
        return line


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Event records get top-level ``event`` and ``fields`` keys so that a
    log shipper can filter on the event name without parsing ``msg``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        event = getattr(record, "event", None)
        if event is not None:
            entry["event"] = event
            entry["fields"] = dict(getattr(record, "fields", None) or {})
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        # numpy scalars and paths fall back to str
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure the root logger. Only the driver calls this.

    Calling it again replaces the previous handler, so the driver can
    start with defaults and reconfigure once its config is loaded.

    Parameters
    ----------
    level : str
        Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    json_output : bool
        Emit JSON lines instead of human-readable text.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else EventTextFormatter())
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return a namespaced logger under ``drawdown_engine.<name>``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
