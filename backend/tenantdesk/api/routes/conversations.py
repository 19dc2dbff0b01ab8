from fastapi import APIRouter, Depends, File, UploadFile, status
from ...models import User
from ...schemas import (
    Conversation as ConversationSchema,
    ConversationCreate,
    ConversationUpdate,
    Message,
    FindByQuery,
    BulkDeleteRequest,
    DeleteManyResult,
)
from ...services import ConversationService
from ...utils import create_response
from ..dependencies import get_current_user, get_conversation_service
from .common import csv_response, import_result, page_of, read_upload, serialize, serialize_many

router = APIRouter(prefix="/conversations", tags=["conversations"], dependencies=[Depends(get_current_user)])


@router.get("")
def list_conversations(conversation_service: ConversationService = Depends(get_conversation_service)):
    """List all conversations"""
    return create_response(data=serialize_many(ConversationSchema, conversation_service.get_all()))


@router.get("/export")
def export_conversations(conversation_service: ConversationService = Depends(get_conversation_service)):
    """Download every conversation as CSV"""
    return csv_response(conversation_service.export_csv(), "conversations")


@router.post("/import")
def import_conversations(
    file: UploadFile = File(...),
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    """Create conversations from a CSV file, skipping rows that fail"""
    result = conversation_service.import_csv(read_upload(file, csv_only=True))
    return create_response(data=import_result(result), message="Conversations imported successfully")


@router.post("/find")
def find_conversations(
    query: FindByQuery,
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    """Paginated, ordered and filtered conversation search"""
    return create_response(data=page_of(ConversationSchema, conversation_service.find_by_query(query)))


@router.delete("/bulk")
def delete_conversations(
    request: BulkDeleteRequest,
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    """Delete several conversations"""
    result = conversation_service.delete_many(request.ids)
    return create_response(
        data=DeleteManyResult.model_validate(result),
        message="Conversations deleted successfully",
    )


@router.get("/user/{user_id}")
def get_conversations_by_user(
    user_id: str,
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    """List the conversations owned by a user"""
    return create_response(data=serialize_many(ConversationSchema, conversation_service.get_by_user(user_id)))


@router.get("/{id}")
def get_conversation(
    id: str,
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    """Get a specific conversation"""
    return create_response(data=serialize(ConversationSchema, conversation_service.get_by_id(id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_conversation(
    conversation_data: ConversationCreate,
    current_user: User = Depends(get_current_user),
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    """Create a conversation, owned by the caller unless userId is given"""
    conversation = conversation_service.create_for(current_user.id, conversation_data)
    return create_response(
        data=serialize(ConversationSchema, conversation),
        message="Conversation created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/{id}/messages")
def append_message(
    id: str,
    message: Message,
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    """Append a message to a conversation"""
    conversation = conversation_service.append_message(id, message)
    return create_response(data=serialize(ConversationSchema, conversation), message="Message added successfully")


@router.put("/{id}")
def update_conversation(
    id: str,
    conversation_data: ConversationUpdate,
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    """Update a conversation"""
    conversation = conversation_service.update(id, conversation_data)
    return create_response(
        data=serialize(ConversationSchema, conversation),
        message="Conversation updated successfully",
    )


@router.delete("/{id}")
def delete_conversation(
    id: str,
    conversation_service: ConversationService = Depends(get_conversation_service)
):
    """Delete a conversation"""
    conversation = conversation_service.delete(id)
    return create_response(
        data=serialize(ConversationSchema, conversation),
        message="Conversation deleted successfully",
    )
