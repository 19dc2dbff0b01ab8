from http import HTTPStatus
from typing import Any, Iterable, Optional
from fastapi import status


def create_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
    success: bool = True,
) -> dict:
    """Wrap a payload in the {success, statusCode, message, data} envelope"""
    return {
        "success": success,
        "statusCode": status_code,
        "message": message or HTTPStatus(status_code).phrase,
        "data": data,
    }


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (dict, list)) and not value)


def clean_object(obj: Any) -> Any:
    """Recursively drop None values and empty containers"""
    if isinstance(obj, list):
        cleaned = (clean_object(item) for item in obj)
        return [item for item in cleaned if not _is_empty(item)]
    if isinstance(obj, dict):
        cleaned = {key: clean_object(value) for key, value in obj.items()}
        return {key: value for key, value in cleaned.items() if not _is_empty(value)}
    return obj


def find_deep(obj: Any, keys: Iterable[str]) -> Any:
    """Return the first value stored under any of `keys`, searching nested dicts and lists"""
    keys = tuple(keys)
    if isinstance(obj, dict):
        for key in keys:
            if key in obj:
                return obj[key]
        children = obj.values()
    elif isinstance(obj, list):
        children = obj
    else:
        return None
    for child in children:
        found = find_deep(child, keys)
        if found is not None:
            return found
    return None
