"""
Clinic notification events.

Write operations announce what happened through a ``NotificationSink``
that is passed in by the caller; there is no process-wide registry. The
``EventBus`` fans one notification out to any number of listeners, and a
failing listener is logged without affecting the others or the write that
triggered it.
"""

import enum
import logging
from collections import Counter
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    runtime_checkable,
)

from .utils.datetime_utils import get_current_utc

logger = logging.getLogger(__name__)


class ClinicEvent(enum.Enum):
    """Events emitted by clinic write operations."""

    OWNER_REGISTERED = "owner_registered"
    PET_REGISTERED = "pet_registered"
    VISIT_CREATED = "visit_created"
    APPOINTMENT_CREATED = "appointment_created"
    RECORD_UPDATED = "record_updated"


Listener = Callable[[ClinicEvent, Mapping[str, Any]], None]


@runtime_checkable
class NotificationSink(Protocol):
    """Anything that can receive clinic events."""

    def notify(self, event: ClinicEvent, payload: Mapping[str, Any]) -> None:
        ...


class NullSink:
    """Sink that discards every event."""

    def notify(self, event: ClinicEvent, payload: Mapping[str, Any]) -> None:
        return None


class LoggingSink:
    """Sink that writes each event to the log."""

    def __init__(
        self, target: Optional[logging.Logger] = None, level: int = logging.INFO
    ):
        self.logger = target or logging.getLogger(
            f"{__name__}.{self.__class__.__name__}"
        )
        self.level = level

    def notify(self, event: ClinicEvent, payload: Mapping[str, Any]) -> None:
        self.logger.log(
            self.level,
            f"[VetCare event {get_current_utc().isoformat()}] {event.value}",
            extra={"event": event.value, "payload": dict(payload)},
        )


class EventCounter:
    """Sink keeping per-event statistics."""

    def __init__(self) -> None:
        self._counts: Counter = Counter()

    def notify(self, event: ClinicEvent, payload: Mapping[str, Any]) -> None:
        self._counts[event] += 1

    def count(self, event: ClinicEvent) -> int:
        return self._counts[event]

    @property
    def stats(self) -> Dict[str, int]:
        """Counts for every known event, including those never seen."""
        return {event.value: self._counts[event] for event in ClinicEvent}

    def reset(self) -> None:
        self._counts.clear()


class EventBus:
    """
    Sink that dispatches events to subscribed listeners.

    Example:
        bus = EventBus()
        counter = EventCounter()
        bus.subscribe(ClinicEvent.VISIT_CREATED, counter.notify)
        bus.notify(ClinicEvent.VISIT_CREATED, {"id": 1})
    """

    def __init__(self) -> None:
        self._listeners: Dict[ClinicEvent, List[Listener]] = {}

    def subscribe(self, event: ClinicEvent, listener: Listener) -> None:
        """
        Register a listener for an event.

        Raises:
            TypeError: If listener is not callable
        """
        if not callable(listener):
            raise TypeError("Listener must be callable")
        listeners = self._listeners.setdefault(event, [])
        if listener not in listeners:
            listeners.append(listener)

    def subscribe_all(self, sink: NotificationSink) -> None:
        """Register a sink for every clinic event."""
        for event in ClinicEvent:
            self.subscribe(event, sink.notify)

    def unsubscribe(self, event: ClinicEvent, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: ClinicEvent) -> int:
        return len(self._listeners.get(event, []))

    def notify(self, event: ClinicEvent, payload: Mapping[str, Any]) -> None:
        """Deliver an event to every listener, logging listener failures."""
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(event, payload)
            except Exception as e:
                logger.error(
                    f"Listener error on event {event.value!r}: {e}", exc_info=True
                )
