"""Tests for app/identity/listing.py - pagination metadata."""
from __future__ import annotations

from datetime import datetime

import pytest

from app.db.models import Contact
from app.identity.listing import ContactPage, paginate, serialize_contact


class TestPaginate:
    def test_first_of_several_pages(self):
        p = paginate(total=25, limit=10, page=1)

        assert p.total_pages == 3
        assert p.has_next is True
        assert p.has_previous is False
        assert p.offset == 0

    def test_last_page(self):
        p = paginate(total=25, limit=10, page=3)

        assert p.has_next is False
        assert p.has_previous is True
        assert p.offset == 20

    def test_exact_multiple(self):
        assert paginate(total=20, limit=10, page=1).total_pages == 2

    def test_empty_store(self):
        p = paginate(total=0, limit=50, page=1)

        assert p.total_pages == 0
        assert p.has_next is False
        assert p.has_previous is False

    def test_page_past_the_end(self):
        p = paginate(total=5, limit=10, page=4)

        assert p.has_next is False
        assert p.has_previous is True

    @pytest.mark.parametrize(("limit", "page"), [(0, 1), (10, 0)])
    def test_rejects_non_positive_arguments(self, limit, page):
        with pytest.raises(ValueError):
            paginate(total=5, limit=limit, page=page)

    def test_to_dict_uses_camel_case(self):
        assert paginate(total=3, limit=2, page=1).to_dict() == {
            "currentPage": 1,
            "totalPages": 2,
            "totalContacts": 3,
            "limit": 2,
            "hasNext": True,
            "hasPrevious": False,
        }


def test_serialize_contact():
    stamp = datetime(2023, 4, 1, 0, 0, 0)
    contact = Contact(
        id=2,
        email="mcfly@hillvalley.edu",
        phone_number="123456",
        linked_id=1,
        link_precedence="secondary",
        created_at=stamp,
        updated_at=stamp,
        deleted_at=None,
    )

    assert serialize_contact(contact) == {
        "id": 2,
        "email": "mcfly@hillvalley.edu",
        "phoneNumber": "123456",
        "linkedId": 1,
        "linkPrecedence": "secondary",
        "createdAt": "2023-04-01T00:00:00",
        "updatedAt": "2023-04-01T00:00:00",
        "deletedAt": None,
    }


def test_contact_page_requires_pagination():
    with pytest.raises(TypeError):
        ContactPage(contacts=[])

    page = ContactPage(contacts=[], pagination=paginate(total=0, limit=10, page=1))
    assert page.pagination.to_dict()["totalContacts"] == 0
