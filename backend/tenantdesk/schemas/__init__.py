from .base import ApiModel
from .auth import (
    LoginRequest,
    RegisterRequest,
    AuthResponse,
    ExtendTokenRequest,
    TokenResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    LogoutResponse,
    MessageResponse,
)
from .user import User, UserCreate, UserUpdate, Role, Tenant
from .file import File, FileCreate, FileUpdate
from .conversation import Conversation, ConversationCreate, ConversationUpdate, Message
from .query import (
    SortDirection,
    Paginate,
    OrderBy,
    FindByQuery,
    FindByQueryResult,
    ImportRowError,
    ImportResult,
    BulkDeleteRequest,
    DeleteManyResult,
)
from .health import ServiceCheck, HealthReport

__all__ = [
    "ApiModel",
    "LoginRequest",
    "RegisterRequest",
    "AuthResponse",
    "ExtendTokenRequest",
    "TokenResponse",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "LogoutResponse",
    "MessageResponse",
    "User",
    "UserCreate",
    "UserUpdate",
    "Role",
    "Tenant",
    "File",
    "FileCreate",
    "FileUpdate",
    "Conversation",
    "ConversationCreate",
    "ConversationUpdate",
    "Message",
    "SortDirection",
    "Paginate",
    "OrderBy",
    "FindByQuery",
    "FindByQueryResult",
    "ImportRowError",
    "ImportResult",
    "BulkDeleteRequest",
    "DeleteManyResult",
    "ServiceCheck",
    "HealthReport",
]
