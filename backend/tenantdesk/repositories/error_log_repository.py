from sqlalchemy.orm import Session
from ..models.error_log import ErrorLog
from .base import BaseRepository, EntityDescriptor

ERROR_LOG_DESCRIPTOR = EntityDescriptor(model=ErrorLog, collection_name="errorLogs")


class ErrorLogRepository(BaseRepository[ErrorLog]):
    """Append-only repository for ErrorLog records"""

    def __init__(self, db: Session):
        super().__init__(ERROR_LOG_DESCRIPTOR, db)
