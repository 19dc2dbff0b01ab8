from .user import User, Tenant, Role
from .file import File
from .conversation import Conversation
from .error_log import ErrorLog

__all__ = [
    "User",
    "Tenant",
    "Role",
    "File",
    "Conversation",
    "ErrorLog",
]
