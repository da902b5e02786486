"""
Event system for authzgate.
"""

from .events import (
    Event,
    EventType,
    EventHandler,
    EventBus,
    LoggingEventHandler,
    RecordingEventHandler,
    create_provider_check_event,
    create_decision_event,
    create_configuration_fault_event,
)

__all__ = [
    "Event",
    "EventType",
    "EventHandler",
    "EventBus",
    "LoggingEventHandler",
    "RecordingEventHandler",
    "create_provider_check_event",
    "create_decision_event",
    "create_configuration_fault_event",
]
