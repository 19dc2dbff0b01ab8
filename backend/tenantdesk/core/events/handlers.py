"""
Audit handlers for account lifecycle events
"""
from .bus import event_bus
from .events import (
    UserRegisteredEvent,
    UserDeletedEvent,
    PasswordResetRequestedEvent,
    PasswordResetCompletedEvent,
)
import logging

logger = logging.getLogger("tenantdesk.audit")


class AuditEventHandler:
    """Writes one audit line per account lifecycle event"""

    def handle_registered(self, event: UserRegisteredEvent):
        logger.info(f"User registered: {event.email} (id: {event.user_id}) at {event.timestamp}")

    def handle_deleted(self, event: UserDeletedEvent):
        logger.info(
            f"User deleted: {event.user_id}, removed {event.files_removed} files "
            f"and {event.conversations_removed} conversations at {event.timestamp}"
        )

    def handle_reset_requested(self, event: PasswordResetRequestedEvent):
        if event.delivered:
            logger.info(f"Password reset requested for {event.email} (id: {event.user_id})")
        else:
            logger.warning(f"Password reset requested for {event.email} but no email was delivered")

    def handle_reset_completed(self, event: PasswordResetCompletedEvent):
        logger.info(f"Password reset completed for user {event.user_id} at {event.timestamp}")


audit_handler = AuditEventHandler()


def register_event_handlers():
    """Register all event handlers with the event bus"""
    event_bus.subscribe(UserRegisteredEvent, audit_handler.handle_registered)
    event_bus.subscribe(UserDeletedEvent, audit_handler.handle_deleted)
    event_bus.subscribe(PasswordResetRequestedEvent, audit_handler.handle_reset_requested)
    event_bus.subscribe(PasswordResetCompletedEvent, audit_handler.handle_reset_completed)
    logger.info("Event handlers registered successfully")
