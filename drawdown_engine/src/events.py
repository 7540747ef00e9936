"""
Event Sink
==========
Optional destination for progress and completion events emitted by the
simulation engine. The engine falls back to ``NullSink`` when no sink is
supplied, so nothing in the core depends on a sink being present.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from src.logging_utils import get_logger


class EventSink(Protocol):
    """Receives named events with keyword payloads."""

    def record(self, event: str, **fields: Any) -> None:
        ...


class NullSink:
    """Discards every event."""

    def record(self, event: str, **fields: Any) -> None:
        return None


class LoggingSink:
    """
    Forwards events to a logger.

    The message is the event name; the name and payload also ride on the
    record as ``event`` and ``fields`` for the formatters in
    ``src.logging_utils``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self._logger = logger or get_logger("events")
        self._level = level

    def record(self, event: str, **fields: Any) -> None:
        self._logger.log(
            self._level, event, extra={"event": event, "fields": dict(fields)}
        )


@dataclass
class RecordedEvent:
    name: str
    fields: Dict[str, Any] = field(default_factory=dict)


class MemorySink:
    """Keeps events in memory, in the order they were recorded."""

    def __init__(self):
        self.events: List[RecordedEvent] = []

    def record(self, event: str, **fields: Any) -> None:
        self.events.append(RecordedEvent(event, dict(fields)))

    def names(self) -> List[str]:
        return [e.name for e in self.events]
