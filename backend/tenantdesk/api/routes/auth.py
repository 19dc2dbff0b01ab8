from fastapi import APIRouter, Depends, status
from ...models import User
from ...schemas import (
    User as UserSchema,
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
from ...services import AuthService
from ...utils import create_response
from ..dependencies import get_auth_service, get_bearer_token, get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(result: dict) -> AuthResponse:
    return AuthResponse(user=UserSchema.model_validate(result["user"]), token=result["token"])


@router.post("/login")
def login(
    credentials: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    result = auth_service.login(credentials.email, credentials.password)
    return create_response(data=_auth_response(result), message="Login successful")


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    user_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Register a new user and log them in"""
    result = auth_service.register(user_data)
    return create_response(
        data=_auth_response(result),
        message="User registered successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/logout")
def logout(
    token: str = Depends(get_bearer_token),
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Stateless logout"""
    result = auth_service.logout(token)
    return create_response(data=LogoutResponse.model_validate(result), message="Logout successful")


@router.post("/extend-token")
def extend_token(
    request: ExtendTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Re-issue a valid token with a fresh expiry"""
    result = auth_service.extend_token(request.token)
    return create_response(data=TokenResponse.model_validate(result), message="Token extended successfully")


@router.post("/forgot-password")
def forgot_password(
    request: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Email a reset-password link"""
    result = auth_service.forgot_password(request.email)
    return create_response(data=MessageResponse.model_validate(result), message=result["message"])


@router.post("/reset-password")
def reset_password(
    request: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Set a new password using a reset token"""
    result = auth_service.reset_password(request)
    return create_response(data=MessageResponse.model_validate(result), message=result["message"])
