"""
CSV ingestion for bulk imports

Rows are read with pandas as plain strings. Header names are trimmed,
lower-cased and stripped of whitespace, values are trimmed, the literal
markers NULL/TRUE/FALSE become None/True/False, UNDEFINED drops the cell,
and a `password` column is hashed before it ever leaves this module.
"""
import io
import logging
import os
import re
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Tuple, Union

import pandas as pd

from ..core.security import get_password_hash
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

FileInput = Union[str, Path, bytes, BinaryIO]

LITERAL_VALUES = {"NULL": None, "FALSE": False, "TRUE": True}
UNDEFINED = "UNDEFINED"
PASSWORD_KEY = "password"

_WHITESPACE = re.compile(r"\s+")


class _Undefined:
    def __repr__(self):
        return "UNDEFINED"


UNSET = _Undefined()


def sanitize_entry(key: Any, value: Any) -> Tuple[str, Any]:
    """Normalise one header/cell pair"""
    sanitized_key = _WHITESPACE.sub("", str(key)).strip().lower()
    sanitized_value = value.strip() if isinstance(value, str) else value
    return sanitized_key, sanitized_value


def transform_value(value: Any, key: str = None) -> Any:
    """Apply the literal conventions and password hashing to a sanitised cell"""
    if key == PASSWORD_KEY and isinstance(value, str) and value:
        return get_password_hash(value)
    if not isinstance(value, str):
        return value
    if value == UNDEFINED:
        return UNSET
    return LITERAL_VALUES.get(value, value)


def _normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    record = {}
    for raw_key, raw_value in row.items():
        key, value = sanitize_entry(raw_key, raw_value)
        value = transform_value(value, key)
        if value is not UNSET:
            record[key] = value
    return record


def _read_frame(source: FileInput) -> pd.DataFrame:
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    if hasattr(source, "seek"):
        source.seek(0)
    try:
        return pd.read_csv(source, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ValidationError(f"Invalid CSV file: {e}")


def csv_to_records(source: FileInput) -> List[Dict[str, Any]]:
    """
    Parse a CSV file into normalised records.

    Args:
        source: path on disk, raw bytes or a binary file object. A path is
            treated as a temporary upload and removed once parsing finishes,
            whether or not it succeeded.

    Returns:
        List of dicts keyed by normalised header names
    """
    temp_path = None
    if isinstance(source, (str, Path)):
        temp_path = Path(source)
    try:
        frame = _read_frame(source if temp_path is None else str(temp_path))
        records = [_normalize_row(row) for row in frame.to_dict(orient="records")]
        logger.info(f"Parsed {len(records)} CSV rows")
        return records
    finally:
        if temp_path is not None and temp_path.exists():
            os.remove(temp_path)
            logger.debug(f"Removed temporary upload {temp_path}")
