from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse
from ...models import User
from ...schemas import (
    File as FileSchema,
    FileUpdate,
    FindByQuery,
    BulkDeleteRequest,
    DeleteManyResult,
)
from ...services import FileService
from ...utils import create_response
from ..dependencies import get_current_user, get_file_service
from .common import csv_response, import_result, page_of, read_upload, serialize, serialize_many

router = APIRouter(prefix="/files", tags=["files"])


@router.get("")
def list_files(
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """List all files"""
    return create_response(data=serialize_many(FileSchema, file_service.get_all()))


@router.get("/export")
def export_files(
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """Download every file record as CSV"""
    return csv_response(file_service.export_csv(), "files")


@router.post("/import")
def import_files(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """Create file records from a CSV file, skipping rows that fail"""
    result = file_service.import_csv(read_upload(file, csv_only=True))
    return create_response(data=import_result(result), message="Files imported successfully")


@router.post("/find")
def find_files(
    query: FindByQuery,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """Paginated, ordered and filtered file search"""
    return create_response(data=page_of(FileSchema, file_service.find_by_query(query)))


@router.post("/upload", status_code=status.HTTP_201_CREATED)
def upload_file(
    file: UploadFile = File(...),
    user_id: Optional[str] = Form(None, alias="userId"),
    text: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """Store an uploaded file, owned by the caller unless userId is given"""
    created = file_service.upload(
        user_id=user_id or current_user.id,
        content=read_upload(file),
        filename=file.filename,
        text=text,
        tags=tags,
    )
    return create_response(
        data=serialize(FileSchema, created),
        message="File uploaded successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.delete("/bulk")
def delete_files(
    request: BulkDeleteRequest,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """Delete several files and their content"""
    result = file_service.delete_many(request.ids)
    return create_response(data=DeleteManyResult.model_validate(result), message="Files deleted successfully")


@router.get("/user/{user_id}")
def get_files_by_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """List the files owned by a user"""
    return create_response(data=serialize_many(FileSchema, file_service.get_by_user(user_id)))


@router.get("/{id}")
def get_file(
    id: str,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """Get a specific file record"""
    return create_response(data=serialize(FileSchema, file_service.get_by_id(id)))


@router.get("/{id}/download")
def download_file(
    id: str,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """Stream the stored content and count the view"""
    file, path = file_service.download(id)
    return FileResponse(path, filename=file.name or path.name)


@router.put("/{id}")
def update_file(
    id: str,
    file_data: FileUpdate,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """Update file metadata"""
    updated = file_service.update(id, file_data)
    return create_response(data=serialize(FileSchema, updated), message="File updated successfully")


@router.put("/{id}/content")
def replace_file_content(
    id: str,
    file: UploadFile = File(...),
    text: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """Replace the stored content (the previous content is restored if the record update fails)"""
    changes = {key: value for key, value in (("text", text), ("tags", tags)) if value is not None}
    updated = file_service.update_file(
        id,
        FileUpdate(**changes),
        content=read_upload(file),
        filename=file.filename,
    )
    return create_response(data=serialize(FileSchema, updated), message="File updated successfully")


@router.delete("/{id}")
def delete_file(
    id: str,
    current_user: User = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service)
):
    """Delete a file record and its content"""
    deleted = file_service.delete(id)
    return create_response(data=serialize(FileSchema, deleted), message="File deleted successfully")
