"""
Authorization events.

The evaluator publishes one PROVIDER_CHECK event per provider it consults and
one DECISION event per evaluation. Handlers observe these for logging,
auditing and metrics; nothing in the decision path reads them back.
"""

import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, Any, List, Callable, Optional
from dataclasses import dataclass, field

from ..core.types import Outcome, RequestContext, Verdict


logger = logging.getLogger(__name__)


class EventType(Enum):
    """Typed authorization event types."""

    PROVIDER_CHECK = "provider_check"
    DECISION = "decision"
    CONFIGURATION_FAULT = "configuration_fault"


@dataclass
class Event:
    """
    Authorization event.

    Attributes:
        id: Unique event identifier
        type: Event type
        request_id: Request the event belongs to
        user: Identity of the request, if any
        uri: Resource the request targets
        provider: Provider consulted (PROVIDER_CHECK only)
        verdict: Verdict produced, by the provider or the whole chain
        outcome: Mapped outcome (DECISION only)
        timestamp: When the event occurred
        metadata: Additional event-specific data
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    type: EventType = EventType.PROVIDER_CHECK
    request_id: str = ""
    user: Optional[str] = None
    uri: str = ""
    provider: Optional[str] = None
    verdict: Optional[Verdict] = None
    outcome: Optional[Outcome] = None
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary representation."""
        return {
            "id": self.id,
            "type": self.type.value,
            "request_id": self.request_id,
            "user": self.user,
            "uri": self.uri,
            "provider": self.provider,
            "verdict": self.verdict.value if self.verdict else None,
            "outcome": self.outcome.value if self.outcome else None,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class EventHandler:
    """Base class for event handlers."""

    async def handle(self, event: Event) -> None:
        """Handle an event. Override in subclasses."""
        pass


class EventBus:
    """
    Dispatches events to subscribed handlers.

    Events are delivered in publish order before publish() returns, so the
    events of one request are observed in evaluation order. A failing
    handler is logged and does not affect other handlers or the decision.
    """

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._subscribers: Dict[EventType, List[Callable[[Event], None]]] = {}

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe a handler to an event type."""
        self._handlers.setdefault(event_type, []).append(handler)

    def subscribe_function(self, event_type: EventType, callback: Callable[[Event], None]) -> None:
        """Subscribe a function to an event type."""
        self._subscribers.setdefault(event_type, []).append(callback)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe a handler to every event type."""
        for event_type in EventType:
            self.subscribe(event_type, handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe a handler from an event type."""
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
            except ValueError:
                pass

    async def publish(self, event: Event) -> None:
        """Deliver an event to all handlers subscribed to its type."""
        for handler in self._handlers.get(event.type, ()):
            try:
                await handler.handle(event)
            except Exception:
                logger.exception(f"Error in event handler {handler!r} for {event.type.value}")

        for callback in self._subscribers.get(event.type, ()):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Error in event subscriber {callback!r} for {event.type.value}")


class LoggingEventHandler(EventHandler):
    """Emit each event as a structured log record."""

    def __init__(self, event_logger: Optional[logging.Logger] = None):
        self.logger = event_logger or logging.getLogger("authzgate.events")

    async def handle(self, event: Event) -> None:
        extra = {
            "authz_event": event.type.value,
            "request_id": event.request_id,
            "authz_provider": event.provider,
            "authz_verdict": event.verdict.value if event.verdict else None,
        }
        if event.type == EventType.PROVIDER_CHECK:
            self.logger.debug(
                f"authz provider {event.provider} returned "
                f"{event.verdict.value if event.verdict else None} for \"{event.uri}\"",
                extra=extra,
            )
        elif event.type == EventType.DECISION:
            extra["authz_outcome"] = event.outcome.value if event.outcome else None
            self.logger.info(
                f"user {event.user}: authorization "
                f"{event.outcome.value if event.outcome else None} for \"{event.uri}\"",
                extra=extra,
            )
        else:
            self.logger.warning(f"authz configuration fault for \"{event.uri}\"", extra=extra)


class RecordingEventHandler(EventHandler):
    """Keep events in memory; useful for diagnostics and tests."""

    def __init__(self):
        self.events: List[Event] = []

    async def handle(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, event_type: EventType) -> List[Event]:
        return [e for e in self.events if e.type == event_type]


def create_provider_check_event(context: RequestContext, provider: str, verdict: Verdict,
                                index: int, duration: float) -> Event:
    """Create the event for one provider invocation."""
    return Event(
        type=EventType.PROVIDER_CHECK,
        request_id=context.request_id,
        user=context.user,
        uri=context.uri,
        provider=provider,
        verdict=verdict,
        metadata={"index": index, "duration_seconds": duration},
    )


def create_decision_event(context: RequestContext, verdict: Verdict, outcome: Optional[Outcome],
                          scope: Optional[str] = None, duration: Optional[float] = None) -> Event:
    """Create the event for a finished evaluation."""
    metadata: Dict[str, Any] = {}
    if scope is not None:
        metadata["scope"] = scope
    if duration is not None:
        metadata["duration_seconds"] = duration
    return Event(
        type=EventType.DECISION,
        request_id=context.request_id,
        user=context.user,
        uri=context.uri,
        verdict=verdict,
        outcome=outcome,
        metadata=metadata,
    )


def create_configuration_fault_event(context: RequestContext, reason: str) -> Event:
    """Create the event for a request that hit a configuration fault."""
    return Event(
        type=EventType.CONFIGURATION_FAULT,
        request_id=context.request_id,
        user=context.user,
        uri=context.uri,
        verdict=Verdict.ERROR,
        metadata={"reason": reason},
    )
