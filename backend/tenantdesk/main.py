from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.database import SessionLocal, engine, init_db, dispose_engine, get_db_transaction
from .core.logging_config import setup_logging
from .core.events import register_event_handlers
from .core.telemetry import setup_telemetry, shutdown_telemetry
from .clients import MailClient, create_cache_client
from .repositories import UserRepository
from .services import StorageService, DEFAULT_TENANT_NAME, ROLE_NAMES
from .api.routes import auth, users, files, conversations, health
from .api.middleware import RequestBodyRecorder
from .api.exceptions import (
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler
)
from .config import settings
import logging

logger = logging.getLogger(__name__)


def seed_defaults(session_factory=SessionLocal):
    """Make sure the default tenant and the standard roles exist"""
    with get_db_transaction(session_factory) as db:
        user_repo = UserRepository(db)
        user_repo.get_or_create_tenant(DEFAULT_TENANT_NAME)
        for role_name in ROLE_NAMES:
            user_repo.get_or_create_role(role_name)
    logger.info("Default tenant and roles ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    seed_defaults(app.state.session_factory)
    app.state.cache = create_cache_client(settings.redis_url)
    app.state.mail = MailClient(settings)
    register_event_handlers()
    logger.info(f"Tenantdesk API started ({settings.environment})")
    try:
        yield
    finally:
        if app.state.cache is not None:
            app.state.cache.close()
        app.state.mail.close()
        shutdown_telemetry(app.state.tracer_provider)
        dispose_engine()
        logger.info("Tenantdesk API stopped")


app = FastAPI(title="Tenantdesk API", version="1.0.0", lifespan=lifespan)
app.state.session_factory = SessionLocal
app.state.storage = StorageService(settings.upload_directory)
app.state.tracer_provider = setup_telemetry(app, engine) if settings.telemetry_enabled else None

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestBodyRecorder)

# Register exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers
app.include_router(health.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(files.router, prefix="/api")
app.include_router(conversations.router, prefix="/api")


@app.get("/")
def root():
    return {"message": "Tenantdesk API"}
