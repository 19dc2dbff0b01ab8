from pydantic_settings import BaseSettings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./tenantdesk.db"
    environment: str = "development"  # "development", "test" or "production"
    app_url: str = "http://localhost:3000"
    # Tokens
    jwt_secret_key: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 24
    # bcrypt cost factor
    hash_rounds: int = 10
    # Logging
    log_level: str = "INFO"
    debug: bool = False
    structured_logging: bool = False  # file logs instead of the error_logs table
    logs_directory: str = "logs"
    log_retention_days: int = 3
    # Uploaded files
    upload_directory: str = "uploads"
    max_upload_mb: int = 10
    # Cache
    redis_url: Optional[str] = None
    cache_key_prefix: str = "apiResponseCache"
    # Mail (Mailgun HTTP API)
    mailgun_api_key: Optional[str] = None
    mailgun_domain: Optional[str] = None
    mailgun_sender_email: Optional[str] = None
    mailgun_sender_name: str = "Tenantdesk"
    mailgun_base_url: str = "https://api.mailgun.net/v3"
    # CORS
    cors_origins: list = ["http://localhost:3000"]
    # Tracing
    telemetry_enabled: bool = False
    telemetry_service_name: str = "tenantdesk-api"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def mail_enabled(self) -> bool:
        return bool(self.mailgun_api_key and self.mailgun_domain)


def validate_settings(settings: Settings) -> None:
    """Validate required settings"""
    errors = []

    # Security
    if not settings.jwt_secret_key:
        errors.append("JWT_SECRET_KEY is required")

    if not 4 <= settings.hash_rounds <= 31:
        errors.append("HASH_ROUNDS must be between 4 and 31")

    if settings.environment.lower() not in ("development", "test", "production"):
        errors.append("ENVIRONMENT must be one of development, test, production")

    # Mail provider
    if settings.mailgun_api_key and not settings.mailgun_domain:
        errors.append("MAILGUN_DOMAIN is required when MAILGUN_API_KEY is set")

    if settings.mailgun_api_key and not settings.mailgun_sender_email:
        errors.append("MAILGUN_SENDER_EMAIL is required when MAILGUN_API_KEY is set")

    if errors:
        error_message = "Configuration errors:\n" + "\n".join(f"  - {error}" for error in errors)
        raise ValueError(error_message)


settings = Settings()
validate_settings(settings)
logger.info("Settings loaded and validated successfully")
