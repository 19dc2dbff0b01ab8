from typing import Any, Dict, Iterable, List, Type
from fastapi import UploadFile
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from ...config import settings
from ...exceptions import ValidationError
from ...schemas import FindByQueryResult, ImportResult

CSV_CONTENT_TYPES = ("text/csv", "application/csv", "application/vnd.ms-excel", "text/plain")


def serialize(schema: Type[BaseModel], value: Any) -> BaseModel:
    return schema.model_validate(value)


def serialize_many(schema: Type[BaseModel], values: Iterable[Any]) -> List[BaseModel]:
    return [schema.model_validate(value) for value in values]


def page_of(schema: Type[BaseModel], result: Dict[str, Any]) -> FindByQueryResult:
    """Wrap a repository paging result with serialised items"""
    return FindByQueryResult[schema](
        items=serialize_many(schema, result["items"]),
        total_count=result["total_count"],
        page=result["page"],
        page_size=result["page_size"],
        total_pages=result["total_pages"],
    )


def import_result(result: Dict[str, Any]) -> ImportResult:
    return ImportResult.model_validate(result)


def read_upload(file: UploadFile, csv_only: bool = False) -> bytes:
    """Read an uploaded file, enforcing the size limit (and CSV type for imports)"""
    if csv_only:
        filename = (file.filename or "").lower()
        if not filename.endswith(".csv") and file.content_type not in CSV_CONTENT_TYPES:
            raise ValidationError("Only CSV files are allowed")
    content = file.file.read()
    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise ValidationError(f"File exceeds the {settings.max_upload_mb} MB upload limit")
    return content


def csv_response(content: str, collection_name: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={collection_name}.csv",
        },
    )
