from .base_service import BaseService
from .storage_service import StorageService
from .user_service import UserService, DEFAULT_TENANT_NAME, DEFAULT_ROLE_NAME, ROLE_NAMES
from .file_service import FileService
from .conversation_service import ConversationService
from .auth_service import AuthService
from .health_service import HealthService

__all__ = [
    "BaseService",
    "StorageService",
    "UserService",
    "DEFAULT_TENANT_NAME",
    "DEFAULT_ROLE_NAME",
    "ROLE_NAMES",
    "FileService",
    "ConversationService",
    "AuthService",
    "HealthService",
]
