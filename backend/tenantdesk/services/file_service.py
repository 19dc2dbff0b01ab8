from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session
from ..repositories import FileRepository, UserRepository
from ..models import File
from ..schemas import FileUpdate
from ..exceptions import NotFoundError
from .base_service import BaseService
from .storage_service import StorageService
import logging

logger = logging.getLogger(__name__)


class FileService(BaseService[File]):
    """
    File records paired with content on disk

    Disk and database changes are kept consistent by compensation: each disk
    step is undone when the following database step fails.
    """

    def __init__(self, db: Session, storage: StorageService):
        super().__init__(FileRepository(db))
        self.file_repo: FileRepository = self.repository
        self.user_repo = UserRepository(db)
        self.storage = storage

    def get_by_user(self, user_id: str) -> List[File]:
        return self.file_repo.get_by_user(user_id)

    def _require_owner(self, user_id: str) -> None:
        if self.user_repo.get_by_id(user_id) is None:
            raise NotFoundError("User", user_id)

    def upload(
        self,
        user_id: str,
        content: bytes,
        filename: Optional[str],
        text: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> File:
        """Write the content to disk, then create its record"""
        self._require_owner(user_id)
        path = self.storage.save(content, filename)
        try:
            file = self.file_repo.create({
                "user_id": user_id,
                "name": filename,
                "path": path,
                "text": text,
                "tags": tags,
            })
            self.file_repo.commit()
        except Exception as e:
            logger.error(f"{self.log_prefix} Upload failed, removing {path}: {e}")
            self.file_repo.rollback()
            self.storage.remove(path)
            raise
        logger.info(f"{self.log_prefix} File uploaded: {file.id}")
        return file

    def update_file(self, id: str, data: FileUpdate, content: Optional[bytes] = None, filename: str = None) -> File:
        """Update metadata and optionally replace the stored content"""
        file = self.get_by_id(id)
        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)
        if changes.get("user_id"):
            self._require_owner(changes["user_id"])

        path, backup, new_path = file.path, None, None
        if content is not None:
            if path and Path(path).exists():
                backup = self.storage.replace(path, content)
            else:
                new_path = self.storage.save(content, filename or file.name)
                changes["path"] = new_path
            if filename:
                changes.setdefault("name", filename)

        try:
            file = self.file_repo.update(id, changes)
            self.file_repo.commit()
        except Exception as e:
            logger.error(f"{self.log_prefix} Update of {id} failed, restoring content: {e}")
            self.file_repo.rollback()
            if new_path:
                self.storage.remove(new_path)
            elif content is not None:
                self.storage.restore_content(path, backup)
            raise
        logger.info(f"{self.log_prefix} File updated: {id}")
        return file

    def update(self, id: str, data: FileUpdate) -> File:
        return self.update_file(id, data)

    def _delete_with_artifacts(self, files: List[File]) -> int:
        stashed = []
        try:
            for file in files:
                stashed.append(self.storage.stash(file.path))
            deleted_count = self.file_repo.delete_many([file.id for file in files])
            self.file_repo.commit()
        except Exception as e:
            logger.error(f"{self.log_prefix} Delete failed, restoring artifacts: {e}")
            self.file_repo.rollback()
            for stash_path in stashed:
                self.storage.restore(stash_path)
            raise
        for stash_path in stashed:
            self.storage.discard(stash_path)
        return deleted_count

    def delete(self, id: str) -> Dict[str, Any]:
        """Delete the record and its content on disk"""
        file = self.get_by_id(id)
        snapshot = self.file_repo.to_dict(file)
        self._delete_with_artifacts([file])
        logger.info(f"{self.log_prefix} File deleted: {id}")
        return snapshot

    def delete_many(self, ids: Any) -> Dict[str, int]:
        ids = self.validate_ids(ids)
        files = self.file_repo.get_many(ids)
        if not files:
            raise NotFoundError("File", detail="No files found to delete")
        return {"deleted_count": self._delete_with_artifacts(files)}

    def increment_views(self, id: str) -> File:
        file = self.get_by_id(id)
        file = self.file_repo.update(id, {"views": (file.views or 0) + 1})
        self.file_repo.commit()
        return file

    def download(self, id: str) -> Tuple[File, Path]:
        """Resolve the stored content and count the view"""
        file = self.get_by_id(id)
        path = self.storage.open(file.path)
        return self.increment_views(id), path
