"""Transactional entry points used by the API layer."""
from __future__ import annotations

import logging

from sqlalchemy.orm import sessionmaker

from app.db.repositories import ContactRepository
from app.identity.consolidation import ConsolidatedContact
from app.identity.listing import ContactPage, paginate
from app.identity.locking import IdentifyLock, get_identify_lock
from app.identity.reconciler import IdentityReconciler

logger = logging.getLogger(__name__)


class ContactService:
    """Run reconciliation and listing against a session factory."""

    def __init__(self, session_factory: sessionmaker, lock: IdentifyLock | None = None) -> None:
        self.session_factory = session_factory
        self.lock = lock or get_identify_lock()

    def identify(self, email: str | None, phone_number: str | None) -> ConsolidatedContact:
        """Reconcile one observation atomically.

        The whole read-decide-write sequence runs under the identify lock and
        inside a single transaction: either every write is committed or, on
        any exception, none is.
        """
        with self.lock.hold():
            with self.session_factory.begin() as db:
                self.lock.acquire_database_lock(db)
                return IdentityReconciler(ContactRepository(db)).identify(email, phone_number)

    def list_contacts(self, limit: int, page: int) -> ContactPage:
        with self.session_factory() as db:
            contacts = ContactRepository(db)
            pagination = paginate(contacts.count_active(), limit, page)
            rows = contacts.list_page(limit, pagination.offset)
        return ContactPage(contacts=rows, pagination=pagination)
