from typing import List
from sqlalchemy.orm import Session
from ..models.file import File
from ..schemas.file import FileCreate
from .base import BaseRepository, EntityDescriptor

FILE_DESCRIPTOR = EntityDescriptor(
    model=File,
    collection_name="files",
    create_schema=FileCreate,
)


class FileRepository(BaseRepository[File]):
    """Repository for File model"""

    def __init__(self, db: Session):
        super().__init__(FILE_DESCRIPTOR, db)

    def get_by_user(self, user_id: str) -> List[File]:
        """All files owned by a user"""
        return self.get_by_field("user_id", user_id)
