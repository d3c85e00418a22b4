"""
Dependency injection utilities for FastAPI.

This module provides reusable dependencies for database sessions,
service construction, and upload checks.
"""

import logging
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi import Depends, HTTPException, status

from api.config import settings
from services.sheet_import_service import SheetImportService
from services.sheet_service import SheetService

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    """
    Build create_engine keyword arguments for the configured backend.

    SQLite (used for local runs and tests) shares one connection across
    threads; server databases get a sized connection pool.
    """
    if database_url.startswith('sqlite'):
        return {
            'connect_args': {'check_same_thread': False},
            'poolclass': StaticPool,
            'echo': settings.DEBUG
        }

    return {
        'pool_size': settings.DB_POOL_SIZE,
        'max_overflow': settings.DB_MAX_OVERFLOW,
        'pool_pre_ping': settings.DB_POOL_PRE_PING,
        'echo': settings.DEBUG
    }


# Create database engine
engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields database session and ensures it's closed after use.

    Usage:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            # Use db session
            pass
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_sheet_service(db: Session = Depends(get_db)) -> SheetService:
    """Row mutation service bound to the request's session."""
    return SheetService(db)


def get_import_service(db: Session = Depends(get_db)) -> SheetImportService:
    """Import service bound to the request's session."""
    return SheetImportService(db)


def verify_file_size(file_size: int) -> bool:
    """
    Verify uploaded file size is within limit.

    Args:
        file_size: File size in bytes

    Returns:
        True if size is acceptable

    Raises:
        HTTPException: If file is too large
    """
    max_size_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024

    if file_size > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size ({file_size / 1024 / 1024:.1f} MB) exceeds maximum allowed "
                   f"({settings.MAX_FILE_SIZE_MB} MB)"
        )

    return True
