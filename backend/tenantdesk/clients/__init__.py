from .cache_client import CacheClient, create_cache_client
from .mail_client import MailClient, render_reset_password

__all__ = [
    "CacheClient",
    "create_cache_client",
    "MailClient",
    "render_reset_password",
]
