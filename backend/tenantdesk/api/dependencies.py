"""
Dependency Injection Container for API Routes

Services are built per request around the request's database session.
Long-lived clients (storage, cache, mail) are created once at startup,
kept on `app.state` and handed to the services that need them.
"""
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from ..core.database import get_db
from ..core.security import verify_token, is_reset_token
from ..core.logging_config import set_logged_user
from ..clients import CacheClient, MailClient
from ..exceptions import AuthenticationError, AuthorizationError
from ..models import User
from ..repositories import UserRepository
from ..services import (
    AuthService,
    ConversationService,
    FileService,
    HealthService,
    StorageService,
    UserService,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_storage(request: Request) -> StorageService:
    return request.app.state.storage


def get_cache(request: Request) -> Optional[CacheClient]:
    return getattr(request.app.state, "cache", None)


def get_mail_client(request: Request) -> Optional[MailClient]:
    return getattr(request.app.state, "mail", None)


def get_user_service(
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
) -> UserService:
    """
    Get UserService instance

    Args:
        db: Database session (injected by FastAPI)
        storage: Upload storage, used to remove a deleted user's files

    Returns:
        UserService instance
    """
    return UserService(db, storage)


def get_file_service(
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
) -> FileService:
    return FileService(db, storage)


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    return ConversationService(db)


def get_auth_service(
    db: Session = Depends(get_db),
    user_service: UserService = Depends(get_user_service),
    mail_client: Optional[MailClient] = Depends(get_mail_client),
) -> AuthService:
    """
    Get AuthService instance with dependencies

    Args:
        db: Database session (injected by FastAPI)
        user_service: used for registration
        mail_client: delivers reset-password links

    Returns:
        AuthService instance
    """
    return AuthService(db, user_service, mail_client)


def get_health_service(
    db: Session = Depends(get_db),
    cache: Optional[CacheClient] = Depends(get_cache),
) -> HealthService:
    return HealthService(db, cache)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return credentials.credentials


def get_authenticated_user(
    request: Request,
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user; reset tokens are not accepted"""
    claims = verify_token(token)
    if is_reset_token(claims):
        raise AuthorizationError()
    user_id = claims.get("sub")
    user = UserRepository(db).get_by_id(user_id) if user_id else None
    if user is None:
        raise AuthenticationError("User not found")
    request.state.logged_user = user.email
    return user


async def get_current_user(user: User = Depends(get_authenticated_user)) -> User:
    """
    Authenticated user for protected routes

    Runs on the request task so the logged user set here is inherited by the
    worker threads that run the sync endpoints and services.
    """
    set_logged_user(user.email)
    return user
