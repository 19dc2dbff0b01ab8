from fastapi import status
from .base import ApiException


class MailDeliveryError(ApiException):
    """Exception raised when the mail provider rejects a message"""

    def __init__(self, detail: str = "Error while sending email"):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_502_BAD_GATEWAY
        )


class StorageError(ApiException):
    """Exception raised when an uploaded file cannot be written or removed"""

    def __init__(self, detail: str = "Failed to save file"):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
