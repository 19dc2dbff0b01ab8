import json
from pydantic import BeforeValidator, Field
from typing import Annotated, Any, List, Optional
from datetime import datetime
from .base import ApiModel


def _decode_json_text(value):
    """CSV cells carry JSON columns as text"""
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


JsonValue = Annotated[Optional[Any], BeforeValidator(_decode_json_text)]


class Message(ApiModel):
    role: str = Field(min_length=1)
    content: str


MessageList = Annotated[List[Message], BeforeValidator(lambda value: _decode_json_text(value) or [])]


class ConversationBase(ApiModel):
    category: Optional[str] = None
    answers: JsonValue = None
    notes: JsonValue = None


class ConversationCreate(ConversationBase):
    user_id: Optional[str] = None
    messages: MessageList = []


class ConversationUpdate(ConversationBase):
    user_id: Optional[str] = None
    messages: Optional[MessageList] = None


class Conversation(ConversationBase):
    id: str
    user_id: str
    messages: List[Message] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
