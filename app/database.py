import os
from typing import Any, Dict
from sqlalchemy import create_engine, Column, DateTime, func
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from dotenv import load_dotenv
from app.core.config import settings
from app.core.logging_config import logger

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    raise RuntimeError(
        "DATABASE_URL environment variable is not set.\n"
        "Point it at the HR master data database in your .env file."
    )


def engine_options(url: str) -> Dict[str, Any]:
    """
    Engine keyword arguments for a database URL.

    Pool sizing only applies to server databases; SQLite (used by the
    test suite and local snapshots) keeps SQLAlchemy's default pool.
    """
    options: Dict[str, Any] = {"pool_pre_ping": True, "echo": False, "future": True}
    if make_url(url).get_backend_name() == "sqlite":
        return options
    options.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=30,
        pool_recycle=3600,  # MSSQL drops idle connections
    )
    return options


engine = create_engine(DATABASE_URL, **engine_options(DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)

logger.info(f"Database engine configured for dialect '{engine.dialect.name}'")


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
