"""FastAPI dependency injection — session factory and service factories."""
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from app.db.session import get_session_factory
from app.identity.locking import IdentifyLock, get_identify_lock
from app.identity.service import ContactService


def get_db_session_factory() -> sessionmaker:
    """Return the process-wide sessionmaker bound to DATABASE_URL."""
    return get_session_factory()


def get_contact_service(
    session_factory: sessionmaker = Depends(get_db_session_factory),
    lock: IdentifyLock = Depends(get_identify_lock),
) -> ContactService:
    """Return a ContactService sharing the process-wide identify lock."""
    return ContactService(session_factory, lock=lock)
