from fastapi import status
from .base import ApiException


class AuthenticationError(ApiException):
    """Exception raised when authentication fails"""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"}
        )


class AuthorizationError(ApiException):
    """Exception raised when a token is rejected"""

    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_403_FORBIDDEN
        )
