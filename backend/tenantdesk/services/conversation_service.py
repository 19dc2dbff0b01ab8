from typing import List
from sqlalchemy.orm import Session
from ..repositories import ConversationRepository
from ..models import Conversation
from ..schemas import ConversationCreate, Message
from .base_service import BaseService
import logging

logger = logging.getLogger(__name__)


class ConversationService(BaseService[Conversation]):
    """Service for conversation operations"""

    def __init__(self, db: Session):
        super().__init__(ConversationRepository(db))
        self.conversation_repo: ConversationRepository = self.repository

    def get_by_user(self, user_id: str) -> List[Conversation]:
        return self.conversation_repo.get_by_user(user_id)

    def create_for(self, user_id: str, data: ConversationCreate) -> Conversation:
        """Create a conversation, owned by `user_id` unless the payload names another owner"""
        payload = data.model_dump()
        payload["user_id"] = payload.get("user_id") or user_id
        return self.create(payload)

    def append_message(self, id: str, message: Message) -> Conversation:
        """Add one message to the end of the conversation"""
        logger.info(f"{self.log_prefix} Appending {message.role} message to {id}")
        with self.transaction("append_message"):
            conversation = self.get_by_id(id)
            messages = list(conversation.messages or []) + [message.model_dump()]
            conversation = self.conversation_repo.update(id, {"messages": messages})
        return conversation
