"""Identity reconciler.

Decides, for one ``(email, phone)`` observation, whether to

1. create a new primary contact (nothing matched),
2. attach a secondary to the single identity that matched, or
3. merge several previously separate identities into the oldest one.

The contact graph is a depth-1 forest: primaries are roots, secondaries
point at their primary through ``linked_id``.  Every write made here keeps
it that way.

The reconciler issues reads and writes through ``ContactRepository`` and
never commits; ``ContactService`` owns the transaction and the lock that
serializes concurrent observations.

Safety rule: raw emails and phone numbers are never logged, only ids.
"""
from __future__ import annotations

import logging

from app.db.models import Contact, LinkPrecedence
from app.db.repositories import ContactRepository
from app.identity.consolidation import (
    ConsolidatedContact,
    IdentityGraphError,
    build_consolidated_contact,
    creation_order,
)

logger = logging.getLogger(__name__)


def needs_new_secondary(
    members: list[Contact],
    email: str | None,
    phone_number: str | None,
) -> bool:
    """Return True if the observation adds information to *members*.

    No new record is needed when a member already carries exactly this
    ``(email, phone)`` pair, or when neither value is previously unseen in
    the membership.
    """
    if any(c.email == email and c.phone_number == phone_number for c in members):
        return False

    has_new_email = email is not None and all(c.email != email for c in members)
    has_new_phone = phone_number is not None and all(c.phone_number != phone_number for c in members)
    return has_new_email or has_new_phone


def governing_primary_ids(candidates: list[Contact]) -> set[int]:
    """Return the ids of the primaries that own *candidates*."""
    ids: set[int] = set()
    for contact in candidates:
        if contact.is_primary:
            ids.add(contact.id)
        elif contact.linked_id is not None:
            ids.add(contact.linked_id)

    if candidates and not ids:
        raise IdentityGraphError(
            f"Contacts {[c.id for c in candidates]} have no resolvable primary"
        )
    return ids


class IdentityReconciler:
    """Link an observation into the contact graph and return its identity."""

    def __init__(self, contacts: ContactRepository) -> None:
        self.contacts = contacts

    # -- entry point --------------------------------------------------------

    def identify(self, email: str | None, phone_number: str | None) -> ConsolidatedContact:
        candidates = self.gather_candidates(email, phone_number)

        if not candidates:
            contact = self.contacts.create_record(
                email=email,
                phone_number=phone_number,
                link_precedence=LinkPrecedence.PRIMARY,
            )
            logger.info("Created primary contact id=%s", contact.id)
            return build_consolidated_contact([contact])

        primary_ids = governing_primary_ids(candidates)
        if len(primary_ids) == 1:
            (primary_id,) = primary_ids
            return self._extend(primary_id, email, phone_number)

        return self.merge(primary_ids, email, phone_number)

    def gather_candidates(self, email: str | None, phone_number: str | None) -> list[Contact]:
        """Every active contact sharing the email or the phone number."""
        if email is None and phone_number is None:
            return []
        return self.contacts.find_by_email_or_phone(email, phone_number)

    # -- single identity ----------------------------------------------------

    def _extend(self, primary_id: int, email: str | None, phone_number: str | None) -> ConsolidatedContact:
        members = self.contacts.find_identity_members(primary_id)
        self._add_secondary_if_new(members, primary_id, email, phone_number)
        return build_consolidated_contact(members)

    def _add_secondary_if_new(
        self,
        members: list[Contact],
        primary_id: int,
        email: str | None,
        phone_number: str | None,
    ) -> None:
        if not needs_new_secondary(members, email, phone_number):
            return
        contact = self.contacts.create_record(
            email=email,
            phone_number=phone_number,
            link_precedence=LinkPrecedence.SECONDARY,
            linked_id=primary_id,
        )
        members.append(contact)
        logger.info("Linked secondary contact id=%s to primary id=%s", contact.id, primary_id)

    # -- merge --------------------------------------------------------------

    def merge(
        self,
        primary_ids: set[int],
        email: str | None,
        phone_number: str | None,
    ) -> ConsolidatedContact:
        """Fold the identities rooted at *primary_ids* into the oldest one."""
        members: list[Contact] = []
        seen: set[int] = set()
        for primary_id in sorted(primary_ids):
            for contact in self.contacts.find_identity_members(primary_id):
                if contact.id not in seen:
                    seen.add(contact.id)
                    members.append(contact)

        primaries = sorted((c for c in members if c.is_primary), key=creation_order)
        if not primaries:
            raise IdentityGraphError(f"No primary contact found for ids {sorted(primary_ids)}")
        survivor = primaries[0]

        demoted = []
        for contact in primaries[1:]:
            self.contacts.update_record(
                contact,
                linked_id=survivor.id,
                link_precedence=LinkPrecedence.SECONDARY,
            )
            demoted.append(contact.id)

        repointed = []
        for contact in members:
            if contact.is_primary or contact.linked_id == survivor.id:
                continue
            self.contacts.update_record(contact, linked_id=survivor.id)
            repointed.append(contact.id)

        logger.info(
            "Merged identities into primary id=%s (demoted=%s, repointed=%s)",
            survivor.id,
            demoted,
            repointed,
        )

        self._add_secondary_if_new(members, survivor.id, email, phone_number)
        return build_consolidated_contact(members)
