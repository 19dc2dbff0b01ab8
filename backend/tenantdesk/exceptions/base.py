from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class ApiException(HTTPException):
    """Base exception for the Tenantdesk API"""

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers: dict = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.details = details or {}

    @property
    def message(self) -> str:
        return str(self.detail)
