from fastapi import APIRouter, Depends, File, UploadFile, status
from ...schemas import (
    User as UserSchema,
    UserCreate,
    UserUpdate,
    FindByQuery,
    BulkDeleteRequest,
    DeleteManyResult,
)
from ...services import UserService
from ...utils import create_response
from ..dependencies import get_current_user, get_user_service
from .common import csv_response, import_result, page_of, read_upload, serialize, serialize_many

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(get_current_user)])


@router.get("")
def list_users(user_service: UserService = Depends(get_user_service)):
    """List all active users"""
    return create_response(data=serialize_many(UserSchema, user_service.get_all()))


@router.get("/export")
def export_users(user_service: UserService = Depends(get_user_service)):
    """Download every user as CSV"""
    return csv_response(user_service.export_csv(), "users")


@router.post("/import")
def import_users(
    file: UploadFile = File(...),
    user_service: UserService = Depends(get_user_service)
):
    """Create users from a CSV file, skipping rows that fail"""
    result = user_service.import_csv(read_upload(file, csv_only=True))
    return create_response(data=import_result(result), message="Users imported successfully")


@router.post("/find")
def find_users(
    query: FindByQuery,
    user_service: UserService = Depends(get_user_service)
):
    """Paginated, ordered and filtered user search"""
    return create_response(data=page_of(UserSchema, user_service.find_by_query(query)))


@router.delete("/bulk")
def delete_users(
    request: BulkDeleteRequest,
    user_service: UserService = Depends(get_user_service)
):
    """Delete several users along with their files and conversations"""
    result = user_service.delete_many(request.ids)
    return create_response(data=DeleteManyResult.model_validate(result), message="Users deleted successfully")


@router.get("/email/{email}")
def get_user_by_email(
    email: str,
    user_service: UserService = Depends(get_user_service)
):
    """Get a user by email"""
    return create_response(data=serialize(UserSchema, user_service.get_by_email(email)))


@router.get("/{id}")
def get_user(
    id: str,
    user_service: UserService = Depends(get_user_service)
):
    """Get a specific user"""
    return create_response(data=serialize(UserSchema, user_service.get_by_id(id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    user_service: UserService = Depends(get_user_service)
):
    """Create a new user"""
    user = user_service.create(user_data)
    return create_response(
        data=serialize(UserSchema, user),
        message="User created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.put("/{id}")
def update_user(
    id: str,
    user_data: UserUpdate,
    user_service: UserService = Depends(get_user_service)
):
    """Update a user"""
    user = user_service.update(id, user_data)
    return create_response(data=serialize(UserSchema, user), message="User updated successfully")


@router.delete("/{id}")
def delete_user(
    id: str,
    user_service: UserService = Depends(get_user_service)
):
    """Delete a user (cascades to files and conversations)"""
    user = user_service.delete(id)
    return create_response(data=serialize(UserSchema, user), message="User deleted successfully")
