from pydantic import Field
from typing import Optional
from datetime import datetime
from .base import ApiModel


class FileCreate(ApiModel):
    user_id: str
    name: Optional[str] = None
    path: Optional[str] = None
    text: Optional[str] = None
    tags: Optional[str] = None
    views: int = Field(default=0, ge=0)


class FileUpdate(ApiModel):
    user_id: Optional[str] = None
    name: Optional[str] = None
    text: Optional[str] = None
    tags: Optional[str] = None
    views: Optional[int] = Field(default=None, ge=0)


class File(ApiModel):
    id: str
    user_id: str
    name: Optional[str] = None
    path: Optional[str] = None
    text: Optional[str] = None
    tags: Optional[str] = None
    views: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
