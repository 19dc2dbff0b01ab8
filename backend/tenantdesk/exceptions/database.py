from fastapi import status
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from .base import ApiException


class DatabaseError(ApiException):
    """Exception raised when the data store rejects an operation"""

    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR, code: str = None):
        super().__init__(
            detail=detail,
            status_code=status_code,
            details={"code": code} if code else None
        )


def format_database_error(error: SQLAlchemyError) -> DatabaseError:
    """Translate a SQLAlchemy failure into a uniform DatabaseError"""
    if isinstance(error, IntegrityError):
        reason = str(error.orig).split("\n")[0] if error.orig is not None else "constraint violation"
        return DatabaseError(
            f"Database error: unique or foreign key constraint failed ({reason})",
            status_code=status.HTTP_409_CONFLICT,
            code="INTEGRITY_ERROR",
        )
    if isinstance(error, OperationalError):
        return DatabaseError(
            "Database error: the data store is unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="OPERATIONAL_ERROR",
        )
    return DatabaseError("Database error: the operation could not be completed", code=type(error).__name__)
