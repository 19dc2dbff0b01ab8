from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from ..repositories import UserRepository
from ..core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_reset_token,
    verify_token,
    is_reset_token,
)
from ..core.events import (
    event_bus,
    UserRegisteredEvent,
    PasswordResetRequestedEvent,
    PasswordResetCompletedEvent,
)
from ..clients import MailClient, render_reset_password
from ..models import User
from ..schemas import RegisterRequest, ResetPasswordRequest
from ..exceptions import ApiException, AuthorizationError, MailDeliveryError, ValidationError
from ..config import settings
from .user_service import UserService
import logging

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_RESET_TOKEN = "Invalid or expired reset token."


def user_claims(user: User) -> Dict[str, Any]:
    """Public claims carried by a user's access token"""
    return {
        "sub": user.id,
        "email": user.email,
        "role": user.role.name if user.role else None,
        "tenantId": user.tenant_id,
    }


class AuthService:
    """Service for authentication operations"""

    log_prefix = "[Auth Service]"

    def __init__(self, db: Session, user_service: UserService, mail_client: Optional[MailClient] = None):
        self.user_repo = UserRepository(db)
        self.user_service = user_service
        self.mail_client = mail_client
        self.db = db

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Check credentials and issue an access token"""
        logger.info(f"{self.log_prefix} Login attempt for: {email}")
        user = self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password):
            logger.warning(f"{self.log_prefix} Login failed for: {email}")
            raise ValidationError(INVALID_CREDENTIALS)

        token = create_access_token(user_claims(user))
        logger.info(f"{self.log_prefix} User logged in: {user.id}")
        return {"user": user, "token": token}

    def register(self, data: RegisterRequest) -> Dict[str, Any]:
        """Create the account, then log it in with the same credentials"""
        logger.info(f"{self.log_prefix} Attempting to register user: {data.email}")
        user = self.user_service.create(data)
        event_bus.publish(UserRegisteredEvent(user.id, user.email))
        return self.login(data.email, data.password)

    def logout(self, token: str) -> Dict[str, Any]:
        """Tokens are not tracked server-side, so logout only acknowledges"""
        return {"token": token, "success": True}

    def extend_token(self, token: str) -> Dict[str, str]:
        """Re-issue a valid token with a fresh expiry"""
        claims = verify_token(token)
        if is_reset_token(claims):
            raise AuthorizationError()
        logger.info(f"{self.log_prefix} Extending token for: {claims.get('sub')}")
        return {"token": create_access_token(claims)}

    def forgot_password(self, email: str) -> Dict[str, str]:
        """
        Issue a reset token, store it on the user and mail the reset link.

        When delivery fails the previously stored token is put back, so a
        token that never reached the user is not left valid.
        """
        logger.info(f"{self.log_prefix} Forgot password requested for: {email}")
        user = self.user_repo.get_by_email(email)
        if not user:
            raise ValidationError("User with this email does not exist")

        previous_token = user.reset_token
        reset_token = create_reset_token({"sub": user.id, "email": user.email})
        try:
            user.reset_token = reset_token
            self.user_repo.commit()
        except Exception:
            self.user_repo.rollback()
            raise

        delivered = False
        if self.mail_client is not None:
            link = f"{settings.app_url.rstrip('/')}/reset-password?token={reset_token}"
            try:
                delivered = self.mail_client.send(
                    to=user.email,
                    subject="Reset Password Requested",
                    html=render_reset_password(user.name, link),
                )
            except MailDeliveryError:
                logger.error(f"{self.log_prefix} Reset email to {user.email} failed, revoking token")
                try:
                    user.reset_token = previous_token
                    self.user_repo.commit()
                except ApiException as e:
                    logger.error(f"{self.log_prefix} Could not revoke reset token for {user.id}: {e.message}")
                    self.user_repo.rollback()
                raise
        else:
            logger.warning(f"{self.log_prefix} No mail client configured, reset link not sent")

        event_bus.publish(PasswordResetRequestedEvent(user.id, user.email, delivered))
        return {"message": "Reset password link sent to your email"}

    def reset_password(self, data: ResetPasswordRequest) -> Dict[str, str]:
        """Set a new password with a reset token; the token is single-use"""
        logger.info(f"{self.log_prefix} Reset password invoked")
        users = self.user_repo.get_by_field("reset_token", data.reset_token)
        if not users:
            raise ValidationError(INVALID_RESET_TOKEN)
        user = users[0]

        claims = verify_token(data.reset_token)
        if not is_reset_token(claims) or claims.get("sub") != user.id:
            raise ValidationError(INVALID_RESET_TOKEN)
        if not user.reset_token or user.reset_token != data.reset_token:
            raise ValidationError(INVALID_RESET_TOKEN)

        try:
            # Password and token change in a single commit
            self.user_repo.update(user.id, {
                "password": get_password_hash(data.password),
                "reset_token": None,
            })
            self.user_repo.commit()
        except Exception as e:
            logger.error(f"{self.log_prefix} Reset password failed: {e}")
            self.user_repo.rollback()
            raise

        event_bus.publish(PasswordResetCompletedEvent(user.id))
        logger.info(f"{self.log_prefix} Password reset successful for: {user.id}")
        return {"message": "Password reset successful"}
