import resource
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from ..clients import CacheClient
from ..core.database import ping_database
from ..config import settings
import logging

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"
DISABLED = "disabled"


def _megabytes(value: float) -> str:
    return f"{value / 1024 / 1024:.2f} MB"


class HealthService:
    """Reports on the database, the cache and the running process"""

    def __init__(self, db: Session, cache: Optional[CacheClient] = None):
        self.db = db
        self.cache = cache

    def check_cache(self) -> Dict[str, Any]:
        if self.cache is None:
            return {"status": DISABLED, "details": {}}
        try:
            self.cache.ping()
            return {"status": HEALTHY, "details": {}}
        except RedisError as e:
            logger.warning(f"[Health Service] Cache check failed: {e}")
            return {"status": UNHEALTHY, "details": {"error": str(e)}}

    def check_database(self) -> Dict[str, Any]:
        try:
            ping_database(self.db)
            return {"status": HEALTHY, "details": {}}
        except SQLAlchemyError as e:
            logger.warning(f"[Health Service] Database check failed: {e}")
            return {"status": UNHEALTHY, "details": {"error": str(e)}}

    def check_server(self) -> Dict[str, Any]:
        usage = resource.getrusage(resource.RUSAGE_SELF)
        # ru_maxrss is reported in kilobytes on Linux and bytes on macOS
        max_rss = usage.ru_maxrss if sys.platform == "darwin" else usage.ru_maxrss * 1024
        return {
            "status": HEALTHY,
            "details": {
                "uptime": round(time.monotonic() - STARTED_AT, 2),
                "memoryUsage": {"maxRss": _megabytes(max_rss)},
                "pythonVersion": sys.version.split()[0],
            },
        }

    def check(self) -> Dict[str, Any]:
        details = {
            "cache": self.check_cache(),
            "database": self.check_database(),
            "server": self.check_server(),
        }
        healthy = all(check["status"] != UNHEALTHY for check in details.values())
        return {"status": HEALTHY if healthy else UNHEALTHY, "details": details}

    def clear_cache(self) -> Dict[str, int]:
        """Delete every cached response under the configured key prefix"""
        if self.cache is None:
            logger.warning("[Health Service] Cache not configured, nothing to clear")
            return {"deleted_keys": 0}
        return {"deleted_keys": self.cache.delete_prefix(settings.cache_key_prefix)}

    def clear_log_files(self, directory: str = None) -> Dict[str, int]:
        """Delete every file in the log directory"""
        logs_directory = Path(directory or settings.logs_directory)
        logs_directory.mkdir(parents=True, exist_ok=True)
        deleted = 0
        for path in logs_directory.iterdir():
            if path.is_file():
                path.unlink()
                deleted += 1
        logger.info(f"[Health Service] Deleted {deleted} log files from {logs_directory}")
        return {"deleted_files": deleted}
