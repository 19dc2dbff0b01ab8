from .base import ApiException
from .not_found import NotFoundError
from .validation import ValidationError
from .auth import AuthenticationError, AuthorizationError
from .database import DatabaseError, format_database_error
from .external import MailDeliveryError, StorageError

__all__ = [
    "ApiException",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "DatabaseError",
    "format_database_error",
    "MailDeliveryError",
    "StorageError",
]
