"""
Disk storage for uploaded files

Every write that a later database step depends on has a matching undo
(`remove`, `restore_content`, `restore`) so services can compensate when the
record update fails after the disk has already changed.
"""
import os
import time
import uuid
from pathlib import Path
from typing import Optional, Union
from ..exceptions import NotFoundError, StorageError
import logging

logger = logging.getLogger(__name__)

STASH_SUFFIX = ".deleting"

PathLike = Union[str, Path]


class StorageService:
    """Stores uploaded file content under a single directory"""

    def __init__(self, directory: PathLike):
        self.directory = Path(directory)

    def _ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def unique_name(self, original_name: Optional[str], field: str = "file") -> str:
        """<field>-<epoch ms>-<random><ext>"""
        extension = Path(original_name or "").suffix
        return f"{field}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}{extension}"

    def save(self, content: bytes, original_name: Optional[str], field: str = "file") -> str:
        """Write new content and return its path"""
        self._ensure_directory()
        path = self.directory / self.unique_name(original_name, field)
        try:
            path.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to write upload {path}: {e}")
            raise StorageError() from e
        logger.info(f"Saved upload to {path} ({len(content)} bytes)")
        return str(path)

    def replace(self, path: PathLike, content: bytes) -> Optional[bytes]:
        """Overwrite an existing artifact, returning the previous bytes (None if it was missing)"""
        path = Path(path)
        try:
            backup = path.read_bytes() if path.exists() else None
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to replace {path}: {e}")
            raise StorageError("Failed to update file") from e
        return backup

    def restore_content(self, path: PathLike, backup: Optional[bytes]) -> None:
        """Undo `replace`"""
        path = Path(path)
        try:
            if backup is None:
                path.unlink(missing_ok=True)
            else:
                path.write_bytes(backup)
        except OSError as e:
            logger.error(f"Failed to restore previous content of {path}: {e}")
            return
        logger.warning(f"Restored previous content of {path}")

    def stash(self, path: Optional[PathLike]) -> Optional[str]:
        """Move an artifact aside ahead of a delete, None when there is nothing on disk"""
        if not path or not Path(path).exists():
            return None
        stash_path = f"{path}{STASH_SUFFIX}"
        try:
            os.replace(path, stash_path)
        except OSError as e:
            logger.error(f"Failed to stash {path}: {e}")
            raise StorageError("Failed to remove file") from e
        return stash_path

    def restore(self, stash_path: Optional[str]) -> None:
        """Undo `stash`"""
        if not stash_path:
            return
        original = stash_path[: -len(STASH_SUFFIX)]
        try:
            os.replace(stash_path, original)
        except OSError as e:
            logger.error(f"Failed to restore {original}: {e}")
            return
        logger.warning(f"Restored {original} after a failed delete")

    def discard(self, stash_path: Optional[str]) -> None:
        """Permanently remove a stashed artifact"""
        if stash_path:
            self.remove(stash_path)

    def remove(self, path: Optional[PathLike]) -> None:
        if not path:
            return
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove {path}: {e}")
            return
        logger.debug(f"Removed {path}")

    def open(self, path: Optional[PathLike]) -> Path:
        """Resolve a stored artifact for reading"""
        if not path or not Path(path).is_file():
            raise NotFoundError("File", detail="File content not found on disk")
        return Path(path)
