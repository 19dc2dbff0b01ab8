from .base import BaseRepository, EntityDescriptor, normalize_field_name
from .user_repository import UserRepository, USER_DESCRIPTOR
from .file_repository import FileRepository, FILE_DESCRIPTOR
from .conversation_repository import ConversationRepository, CONVERSATION_DESCRIPTOR
from .error_log_repository import ErrorLogRepository

__all__ = [
    "BaseRepository",
    "EntityDescriptor",
    "normalize_field_name",
    "UserRepository",
    "USER_DESCRIPTOR",
    "FileRepository",
    "FILE_DESCRIPTOR",
    "ConversationRepository",
    "CONVERSATION_DESCRIPTOR",
    "ErrorLogRepository",
]
