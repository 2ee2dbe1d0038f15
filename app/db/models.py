from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkPrecedence(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class Contact(Base):
    """One observed (email, phone) pairing and its place in an identity.

    A ``primary`` row is the root of an identity; every ``secondary`` row
    points at its primary through ``linked_id``.  Chains are never deeper
    than one level.
    """

    __tablename__ = "contacts"
    __table_args__ = (
        CheckConstraint(
            "link_precedence IN ('primary', 'secondary')",
            name="ck_contacts_link_precedence",
        ),
        Index("ix_contacts_email", "email"),
        Index("ix_contacts_phone_number", "phone_number"),
        Index("ix_contacts_linked_id", "linked_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    phone_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    linked_id: Mapped[int | None] = mapped_column(ForeignKey("contacts.id"), nullable=True)
    link_precedence: Mapped[str] = mapped_column(String(16), nullable=False)
    # Set in Python so that rows created within the same second still order.
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_primary(self) -> bool:
        return self.link_precedence == LinkPrecedence.PRIMARY.value

    def __repr__(self) -> str:
        return f"Contact(id={self.id}, link_precedence={self.link_precedence!r}, linked_id={self.linked_id})"
