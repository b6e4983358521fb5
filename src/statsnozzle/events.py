"""Firehose event records."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class EventType(str, Enum):
    """Envelope types emitted on the firehose."""

    HTTP_START_STOP = "HttpStartStop"
    LOG_MESSAGE = "LogMessage"
    VALUE_METRIC = "ValueMetric"
    COUNTER_EVENT = "CounterEvent"
    ERROR = "Error"
    CONTAINER_METRIC = "ContainerMetric"

    @classmethod
    def parse(cls, value: Any) -> "EventType":
        """Accept either the type name ("LogMessage") or its wire number (5)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) or (isinstance(value, str) and value.isdigit()):
            try:
                return _BY_NUMBER[int(value)]
            except KeyError:
                raise ValueError(f"unknown event type number: {value}") from None
        return cls(str(value))


_BY_NUMBER = {
    4: EventType.HTTP_START_STOP,
    5: EventType.LOG_MESSAGE,
    6: EventType.VALUE_METRIC,
    7: EventType.COUNTER_EVENT,
    8: EventType.ERROR,
    9: EventType.CONTAINER_METRIC,
}


@dataclass(frozen=True)
class Envelope:
    """One event off the stream.

    String fields default to ``""``; an absent field is still counted, under
    the empty-string key. ``app_id`` is only set for records that belong to an
    application (log messages).
    """

    event_type: EventType
    origin: str = ""
    job: str = ""
    deployment: str = ""
    index: str = ""
    ip: str = ""
    app_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Envelope":
        """Build an envelope from a decoded JSON object.

        Accepts both snake_case and the camelCase keys produced by
        ``cf nozzle``-style dumps. Raises ``ValueError`` when the event type
        is missing or unknown.
        """
        raw_type = data.get("event_type", data.get("eventType"))
        if raw_type is None:
            raise ValueError("envelope has no event type")
        event_type = EventType.parse(raw_type)

        app_id = data.get("app_id", data.get("appId"))
        log_message = data.get("logMessage")
        if app_id is None and isinstance(log_message, dict):
            app_id = log_message.get("app_id", log_message.get("appId"))

        return cls(
            event_type=event_type,
            origin=str(data.get("origin") or ""),
            job=str(data.get("job") or ""),
            deployment=str(data.get("deployment") or ""),
            index=str(data.get("index") or ""),
            ip=str(data.get("ip") or ""),
            app_id=str(app_id) if app_id else None,
        )
