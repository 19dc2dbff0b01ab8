"""
Event Bus for Decoupled Service Communication

Services publish domain events (registration, password resets, deletions)
and subscribers handle cross-cutting concerns such as audit logging without
blocking or failing the request that raised them.
"""
from typing import List, Callable, Dict, Type
from abc import ABC
import logging

logger = logging.getLogger(__name__)


class Event(ABC):
    """Base event class - all events inherit from this"""
    pass


class EventBus:
    """Event bus for decoupled service communication"""

    def __init__(self):
        self._subscribers: Dict[Type[Event], List[Callable]] = {}
        logger.info("Event bus initialized")

    def subscribe(self, event_type: Type[Event], handler: Callable):
        """
        Subscribe to an event type

        Args:
            event_type: The event class to subscribe to
            handler: Callable that handles the event
        """
        handlers = self._subscribers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"Subscribed handler {handler.__name__} to {event_type.__name__}")

    def clear(self):
        self._subscribers.clear()

    def publish(self, event: Event):
        """
        Publish an event to all subscribers

        Handler failures are logged and never reach the publisher.

        Args:
            event: Event instance to publish
        """
        event_type = type(event)
        if event_type not in self._subscribers:
            logger.debug(f"No subscribers for event {event_type.__name__}")
            return
        for handler in self._subscribers[event_type]:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Error handling event {event_type.__name__} in {handler.__name__}: {e}",
                    exc_info=True
                )


# Process-wide event bus, handlers are registered at startup
event_bus = EventBus()
