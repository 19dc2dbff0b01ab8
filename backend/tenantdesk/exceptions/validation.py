from fastapi import status
from .base import ApiException


class ValidationError(ApiException):
    """Exception raised when validation fails"""

    def __init__(self, detail: str, resource: str = None):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"resource": resource} if resource else None
        )
