from .bus import Event, EventBus, event_bus
from .events import (
    UserRegisteredEvent,
    UserDeletedEvent,
    PasswordResetRequestedEvent,
    PasswordResetCompletedEvent,
)
from .handlers import register_event_handlers

__all__ = [
    "Event",
    "EventBus",
    "event_bus",
    "UserRegisteredEvent",
    "UserDeletedEvent",
    "PasswordResetRequestedEvent",
    "PasswordResetCompletedEvent",
    "register_event_handlers",
]
