"""Serialization of identify operations.

Two observations that share an email or phone number, directly or through
the identities they touch, must not interleave their read-decide-write
sequences.  All identify calls therefore run inside one critical section:

* within a process, a ``threading.Lock``;
* across processes on PostgreSQL, a transaction-scoped advisory lock that
  is released by the enclosing commit or rollback.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# Arbitrary constant shared by every process talking to the same database.
IDENTIFY_ADVISORY_LOCK_KEY = 0x1D3_7171


class IdentifyLock:
    """Process-wide critical section around the identify operation."""

    def __init__(self, advisory_key: int = IDENTIFY_ADVISORY_LOCK_KEY) -> None:
        self._mutex = threading.Lock()
        self.advisory_key = advisory_key

    @contextmanager
    def hold(self) -> Iterator[None]:
        with self._mutex:
            yield

    def acquire_database_lock(self, db: Session) -> None:
        """Take the cross-process lock for the current transaction, if supported."""
        if db.get_bind().dialect.name != "postgresql":
            return
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": self.advisory_key})
        logger.debug("Acquired advisory lock key=%s", self.advisory_key)


_default_lock = IdentifyLock()


def get_identify_lock() -> IdentifyLock:
    return _default_lock
