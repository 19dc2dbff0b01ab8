from typing import Any, Dict, List
from sqlalchemy.orm import Session
from ..repositories import UserRepository, FileRepository, ConversationRepository
from ..models import User
from ..core.security import get_password_hash
from ..core.events import event_bus, UserDeletedEvent
from ..exceptions import NotFoundError, ValidationError
from .base_service import BaseService
from .storage_service import StorageService
import logging

logger = logging.getLogger(__name__)

DEFAULT_TENANT_NAME = "Default Tenant"
DEFAULT_ROLE_NAME = "user"
ROLE_NAMES = ("admin", "user", "tenant")


class UserService(BaseService[User]):
    """Users with unique emails, default tenant/role and cascading deletes"""

    def __init__(self, db: Session, storage: StorageService):
        super().__init__(UserRepository(db))
        self.user_repo: UserRepository = self.repository
        self.file_repo = FileRepository(db)
        self.conversation_repo = ConversationRepository(db)
        self.storage = storage

    def get_by_email(self, email: str) -> User:
        user = self.user_repo.get_by_email(email)
        if user is None:
            raise NotFoundError("User", detail=f"User not found with email: {email}")
        return user

    def _apply_defaults(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not data.get("tenant_id"):
            data["tenant_id"] = self.user_repo.get_or_create_tenant(DEFAULT_TENANT_NAME).id
        if not data.get("role_id"):
            data["role_id"] = self.user_repo.get_or_create_role(DEFAULT_ROLE_NAME).id
        return data

    def prepare_create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if self.user_repo.email_taken(data["email"]):
            logger.warning(f"{self.log_prefix} Create failed: email already exists - {data['email']}")
            raise ValidationError("User with this email already exists", resource="users")
        data["password"] = get_password_hash(data["password"])
        return self._apply_defaults(data)

    def prepare_update(self, id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        email = data.get("email")
        if email is None:
            data.pop("email", None)
        elif self.user_repo.email_taken(email, exclude_id=id):
            logger.warning(f"{self.log_prefix} Update failed: email already exists - {email}")
            raise ValidationError("User with this email already exists", resource="users")
        for key in ("role_id", "tenant_id"):
            if key in data and not data[key]:
                data.pop(key)
        return data

    def prepare_import_row(self, data: Dict[str, Any]) -> Dict[str, Any]:
        # Passwords arrive already hashed from CSV ingestion; the unique index rejects duplicates
        return self._apply_defaults(data)

    def _remove_owned(self, user_ids: List[str], stashed: List[str]) -> Dict[str, int]:
        """Delete files and conversations of the given users, stashing file artifacts into `stashed`"""
        files_removed = 0
        conversations_removed = 0
        for user_id in user_ids:
            files = self.file_repo.get_by_user(user_id)
            for file in files:
                stashed.append(self.storage.stash(file.path))
            if files:
                files_removed += self.file_repo.delete_many([file.id for file in files])
            conversations_removed += self.conversation_repo.delete_by_user(user_id)
        return {"files": files_removed, "conversations": conversations_removed}

    def _cascade_delete(self, user_ids: List[str]) -> Dict[str, Any]:
        stashed = []
        try:
            removed = self._remove_owned(user_ids, stashed)
            deleted_count = self.user_repo.delete_many(user_ids)
            self.user_repo.commit()
        except Exception as e:
            logger.error(f"{self.log_prefix} Cascading delete failed: {e}")
            self.user_repo.rollback()
            for stash_path in stashed:
                self.storage.restore(stash_path)
            raise
        for stash_path in stashed:
            self.storage.discard(stash_path)
        removed["deleted_count"] = deleted_count
        return removed

    def delete(self, id: str) -> User:
        """Soft-delete a user and remove their files (rows and disk) and conversations"""
        logger.info(f"{self.log_prefix} Deleting User {id}")
        user = self.get_by_id(id)
        removed = self._cascade_delete([id])
        event_bus.publish(UserDeletedEvent(id, removed["files"], removed["conversations"]))
        return user

    def delete_many(self, ids: Any) -> Dict[str, int]:
        ids = self.validate_ids(ids)
        existing = [user.id for user in self.user_repo.get_many(ids)]
        if not existing:
            raise NotFoundError("User", detail="No users found to delete")
        logger.info(f"{self.log_prefix} Deleting {len(existing)} users")
        removed = self._cascade_delete(existing)
        for user_id in existing:
            event_bus.publish(UserDeletedEvent(user_id))
        return {"deleted_count": removed["deleted_count"]}
