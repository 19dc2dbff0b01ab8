from .database import Base, get_db, get_db_transaction, init_db, ping_database
from .security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_reset_token,
    verify_token,
    strip_reserved_claims,
    is_reset_token,
    RESET_PASSWORD_PURPOSE,
)
from .logging_config import setup_logging, set_logged_user, get_logged_user
from .events import event_bus, Event, EventBus

__all__ = [
    "Base",
    "get_db",
    "get_db_transaction",
    "init_db",
    "ping_database",
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "create_reset_token",
    "verify_token",
    "strip_reserved_claims",
    "is_reset_token",
    "RESET_PASSWORD_PURPOSE",
    "setup_logging",
    "set_logged_user",
    "get_logged_user",
    "event_bus",
    "Event",
    "EventBus",
]
