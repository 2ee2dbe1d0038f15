"""Paged listing of stored contacts, newest first."""
from __future__ import annotations

import math
from dataclasses import dataclass

from app.db.models import Contact


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total_contacts: int
    limit: int
    has_next: bool
    has_previous: bool

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.limit

    def to_dict(self) -> dict:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "totalContacts": self.total_contacts,
            "limit": self.limit,
            "hasNext": self.has_next,
            "hasPrevious": self.has_previous,
        }


@dataclass
class ContactPage:
    contacts: list[Contact]
    pagination: Pagination


def paginate(total: int, limit: int, page: int) -> Pagination:
    """Compute page metadata for *total* rows split into pages of *limit*."""
    if limit < 1:
        raise ValueError(f"limit must be positive, got {limit}")
    if page < 1:
        raise ValueError(f"page must be positive, got {page}")

    total_pages = math.ceil(total / limit)
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_contacts=total,
        limit=limit,
        has_next=page < total_pages,
        has_previous=page > 1,
    )


def serialize_contact(contact: Contact) -> dict:
    return {
        "id": contact.id,
        "email": contact.email,
        "phoneNumber": contact.phone_number,
        "linkedId": contact.linked_id,
        "linkPrecedence": contact.link_precedence,
        "createdAt": contact.created_at.isoformat() if contact.created_at else None,
        "updatedAt": contact.updated_at.isoformat() if contact.updated_at else None,
        "deletedAt": contact.deleted_at.isoformat() if contact.deleted_at else None,
    }
