from .responses import create_response, clean_object, find_deep
from .csv_import import csv_to_records, sanitize_entry, transform_value

__all__ = [
    "create_response",
    "clean_object",
    "find_deep",
    "csv_to_records",
    "sanitize_entry",
    "transform_value",
]
