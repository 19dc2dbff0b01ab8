from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from contextlib import contextmanager
from ..config import settings
import logging

logger = logging.getLogger(__name__)

sqlite_connect_args = {}
if "sqlite" in settings.database_url:
    sqlite_connect_args = {
        "check_same_thread": False,
        "timeout": 30.0,  # seconds to wait for a lock
    }

engine = create_engine(
    settings.database_url,
    connect_args=sqlite_connect_args,
    echo=settings.debug,
    pool_pre_ping=True,
)

if "sqlite" in settings.database_url:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        """Enable WAL mode and foreign keys for SQLite connections"""
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=30000")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        logger.debug("SQLite WAL mode, busy timeout and foreign keys enabled")

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_transaction(session_factory: sessionmaker = None):
    """Context manager for database transactions"""
    db: Session = (session_factory or SessionLocal)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def ping_database(db: Session) -> None:
    """Run a trivial statement, raising if the store is unreachable"""
    db.execute(text("SELECT 1"))


def init_db(bind=None):
    """Initialize database tables"""
    # Models must be imported so their tables are registered on Base.metadata
    from .. import models  # noqa: F401

    logger.info("Initializing database tables...")
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables initialized successfully")


def dispose_engine():
    """Release pooled connections at shutdown"""
    engine.dispose()
    logger.info("Database engine disposed")
