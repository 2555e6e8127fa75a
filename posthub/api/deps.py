"""
Dependencies for settings, database sessions and the post services.

Everything hangs off ``request.app.state`` (populated by ``create_app``), so
each app instance, including the ones built in tests, carries its own
configuration and connection pool.
"""
from typing import Generator
from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from posthub.config import Settings
from posthub.services import AdminGate, ImageStore, PostRepository
from posthub.utils import get_logger

logger = get_logger(__name__)

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Database session dependency.
    One session per request, always closed; rolled back if the handler raised.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error("Database session error", error=str(e), exc_info=True)
        db.rollback()
        raise
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def get_admin_gate(settings: Settings = Depends(get_settings)) -> AdminGate:
    return AdminGate(settings.admin_password)

def get_image_store(settings: Settings = Depends(get_settings)) -> ImageStore:
    return ImageStore(settings.uploads_dir)

def get_post_repository(db: Session = Depends(get_db)) -> PostRepository:
    return PostRepository(db)

def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID", "unknown")
