from sqlalchemy import Column, String, Text, DateTime, JSON
from sqlalchemy.sql import func
from ..core.database import Base
from .user import generate_id


class ErrorLog(Base):
    """Append-only record of failed requests"""
    __tablename__ = "error_logs"

    id = Column(String(36), primary_key=True, default=generate_id)
    status = Column(String, nullable=True)
    message = Column(Text, nullable=True)
    method = Column(String, nullable=True)
    url = Column(Text, nullable=True)
    logged_user = Column(String, nullable=True)
    name = Column(String, nullable=True)
    stack = Column(Text, nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
