from typing import List
from sqlalchemy.orm import Session
from ..models.conversation import Conversation
from ..schemas.conversation import ConversationCreate
from .base import BaseRepository, EntityDescriptor

CONVERSATION_DESCRIPTOR = EntityDescriptor(
    model=Conversation,
    collection_name="conversations",
    create_schema=ConversationCreate,
)


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for Conversation model"""

    def __init__(self, db: Session):
        super().__init__(CONVERSATION_DESCRIPTOR, db)

    def get_by_user(self, user_id: str) -> List[Conversation]:
        """All conversations owned by a user"""
        return self.get_by_field("user_id", user_id)

    def delete_by_user(self, user_id: str) -> int:
        """Remove every conversation owned by a user"""
        with self._database_errors("delete_by_user"):
            deleted_count = (
                self.db.query(Conversation)
                .filter(Conversation.user_id == user_id)
                .delete(synchronize_session=False)
            )
            self.db.flush()
        return deleted_count
