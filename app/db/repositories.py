from __future__ import annotations

from typing import Generic, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.db import models

ModelT = TypeVar("ModelT")

_UNSET = object()


class BaseRepository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def create(self, **kwargs) -> ModelT:
        entity = self.model(**kwargs)
        self.db.add(entity)
        self.db.flush()
        return entity

    def get(self, entity_id: int) -> ModelT | None:
        return self.db.get(self.model, entity_id)

    def update(self, entity: ModelT, **kwargs) -> ModelT:
        for key, value in kwargs.items():
            setattr(entity, key, value)
        self.db.flush()
        return entity


class ContactRepository(BaseRepository[models.Contact]):
    """Record store for ``Contact`` rows.

    Every query excludes rows with ``deleted_at`` set.  Writes flush but do
    not commit; the caller owns the transaction boundary.
    """

    model = models.Contact

    def _active(self):
        return select(models.Contact).where(models.Contact.deleted_at.is_(None))

    def find_by_email_or_phone(self, email: str | None, phone_number: str | None) -> list[models.Contact]:
        """Return active contacts whose email OR phone equals the given values."""
        clauses = []
        if email is not None:
            clauses.append(models.Contact.email == email)
        if phone_number is not None:
            clauses.append(models.Contact.phone_number == phone_number)
        if not clauses:
            return []

        stmt = self._active().where(or_(*clauses))
        return list(self.db.execute(stmt).scalars().all())

    def find_identity_members(self, primary_id: int) -> list[models.Contact]:
        """Return the primary and its direct secondaries, oldest first."""
        stmt = (
            self._active()
            .where(or_(models.Contact.id == primary_id, models.Contact.linked_id == primary_id))
            .order_by(models.Contact.created_at.asc(), models.Contact.id.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def create_record(
        self,
        *,
        email: str | None,
        phone_number: str | None,
        link_precedence: models.LinkPrecedence,
        linked_id: int | None = None,
    ) -> models.Contact:
        contact = self.create(
            email=email,
            phone_number=phone_number,
            linked_id=linked_id,
            link_precedence=link_precedence.value,
        )
        # Reload so timestamps carry the same representation as queried rows.
        self.db.refresh(contact)
        return contact

    def update_record(
        self,
        contact: models.Contact,
        *,
        linked_id: int | None | object = _UNSET,
        link_precedence: models.LinkPrecedence | None = None,
    ) -> models.Contact:
        """Repoint and/or re-rank *contact*; no other column may change."""
        changes: dict[str, object] = {}
        if linked_id is not _UNSET:
            changes["linked_id"] = linked_id
        if link_precedence is not None:
            changes["link_precedence"] = link_precedence.value
        if not changes:
            return contact
        return self.update(contact, **changes)

    def count_active(self) -> int:
        stmt = select(func.count()).select_from(models.Contact).where(models.Contact.deleted_at.is_(None))
        return int(self.db.execute(stmt).scalar_one())

    def list_page(self, limit: int, offset: int = 0) -> list[models.Contact]:
        """Return one page of active contacts, newest first."""
        stmt = (
            self._active()
            .order_by(models.Contact.created_at.desc(), models.Contact.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())
