from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional
from jose import JWTError, jwt
import bcrypt
from ..config import settings
from ..exceptions import AuthorizationError
import logging

logger = logging.getLogger(__name__)

# Registered claims that are always recomputed when a token is signed
RESERVED_CLAIMS = ("exp", "iat", "nbf")
RESET_PASSWORD_PURPOSE = "reset-password"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash"""
    if not plain_password or not hashed_password:
        return False
    try:
        password_bytes = plain_password.encode('utf-8')
        if isinstance(hashed_password, str):
            hashed_password_bytes = hashed_password.encode('utf-8')
        else:
            hashed_password_bytes = hashed_password
        return bcrypt.checkpw(password_bytes, hashed_password_bytes)
    except ValueError as e:
        logger.error(f"Password verification failed: {e}")
        return False


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password using bcrypt with the configured cost factor"""
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt(rounds=rounds or settings.hash_rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def strip_reserved_claims(claims: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop expiry/issued-at/not-before so they are never carried over"""
    return {key: value for key, value in dict(claims).items() if key not in RESERVED_CLAIMS}


def create_access_token(claims: Mapping[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""
    to_encode = strip_reserved_claims(claims)
    issued_at = datetime.now(timezone.utc)
    if expires_delta:
        expire = issued_at + expires_delta
    else:
        expire = issued_at + timedelta(hours=settings.jwt_expiration_hours)
    to_encode.update({"iat": issued_at, "exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    logger.debug(f"Created access token for subject: {to_encode.get('sub')}")
    return encoded_jwt


def create_reset_token(claims: Mapping[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT carrying the reset-password purpose marker"""
    to_encode = strip_reserved_claims(claims)
    to_encode["purpose"] = RESET_PASSWORD_PURPOSE
    return create_access_token(to_encode, expires_delta=expires_delta)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Validate signature and expiry and return the decoded claims.

    Every failure surfaces as the same AuthorizationError so callers learn
    nothing about why a token was rejected.
    """
    if not token or not isinstance(token, str):
        raise AuthorizationError()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise AuthorizationError()


def is_reset_token(claims: Mapping[str, Any]) -> bool:
    return claims.get("purpose") == RESET_PASSWORD_PURPOSE
