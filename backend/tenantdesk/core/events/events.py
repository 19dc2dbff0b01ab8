"""
Event Definitions

Events describe account lifecycle changes that other components may want to
observe. Core operations that need an immediate result use direct service calls.
"""
from .bus import Event
from datetime import datetime, timezone


class UserRegisteredEvent(Event):
    """Event fired when an account is created through registration"""

    def __init__(self, user_id: str, email: str):
        self.user_id = user_id
        self.email = email
        self.timestamp = datetime.now(timezone.utc)

    def __repr__(self):
        return f"UserRegisteredEvent(user_id={self.user_id}, email='{self.email}')"


class UserDeletedEvent(Event):
    """Event fired after a user and their files/conversations are removed"""

    def __init__(self, user_id: str, files_removed: int = 0, conversations_removed: int = 0):
        self.user_id = user_id
        self.files_removed = files_removed
        self.conversations_removed = conversations_removed
        self.timestamp = datetime.now(timezone.utc)

    def __repr__(self):
        return (
            f"UserDeletedEvent(user_id={self.user_id}, files_removed={self.files_removed}, "
            f"conversations_removed={self.conversations_removed})"
        )


class PasswordResetRequestedEvent(Event):
    """Event fired when a reset token is issued"""

    def __init__(self, user_id: str, email: str, delivered: bool):
        self.user_id = user_id
        self.email = email
        self.delivered = delivered
        self.timestamp = datetime.now(timezone.utc)

    def __repr__(self):
        return f"PasswordResetRequestedEvent(user_id={self.user_id}, delivered={self.delivered})"


class PasswordResetCompletedEvent(Event):
    """Event fired when a password is changed with a reset token"""

    def __init__(self, user_id: str):
        self.user_id = user_id
        self.timestamp = datetime.now(timezone.utc)

    def __repr__(self):
        return f"PasswordResetCompletedEvent(user_id={self.user_id})"
