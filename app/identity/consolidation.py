"""Consolidated identity view.

Collapses the members of one identity (a primary and its secondaries) into
the response shape clients see: one primary id, the distinct emails and
phone numbers with the primary's values first, and the secondary ids in
creation order.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from app.db.models import Contact


class IdentityGraphError(RuntimeError):
    """The stored contact graph violates the primary/secondary invariants."""


@dataclass(frozen=True)
class ConsolidatedContact:
    primary_contact_id: int
    emails: list[str] = field(default_factory=list)
    phone_numbers: list[str] = field(default_factory=list)
    secondary_contact_ids: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "primaryContactId": self.primary_contact_id,
            "emails": list(self.emails),
            "phoneNumbers": list(self.phone_numbers),
            "secondaryContactIds": list(self.secondary_contact_ids),
        }


def creation_order(contact: Contact) -> tuple:
    """Sort key: oldest first, ties broken by the smaller id."""
    return (contact.created_at, contact.id)


def _append_unique(values: list[str], value: str | None) -> None:
    if value and value not in values:
        values.append(value)


def build_consolidated_contact(members: Iterable[Contact]) -> ConsolidatedContact:
    """Build the consolidated view for one identity.

    *members* may arrive in any order.  Raises ``IdentityGraphError`` unless
    exactly one member is primary.
    """
    ordered = sorted(members, key=creation_order)
    primaries = [c for c in ordered if c.is_primary]
    if not primaries:
        raise IdentityGraphError("No primary contact found among identity members")
    if len(primaries) > 1:
        raise IdentityGraphError(
            f"Identity has {len(primaries)} primary contacts: {[c.id for c in primaries]}"
        )

    primary = primaries[0]
    secondaries = [c for c in ordered if not c.is_primary]

    emails: list[str] = []
    phone_numbers: list[str] = []
    _append_unique(emails, primary.email)
    _append_unique(phone_numbers, primary.phone_number)
    for contact in secondaries:
        _append_unique(emails, contact.email)
        _append_unique(phone_numbers, contact.phone_number)

    return ConsolidatedContact(
        primary_contact_id=primary.id,
        emails=emails,
        phone_numbers=phone_numbers,
        secondary_contact_ids=[c.id for c in secondaries],
    )
