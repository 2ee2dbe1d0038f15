"""Identity routes.

POST /identify reconciles one purchase's contact details and returns the
consolidated identity.
GET /contacts lists stored contact records, newest first.

Both are also served under the /api/v1 prefix.
"""
from __future__ import annotations

import logging
import re

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator, model_validator

from app.api.deps import get_contact_service
from app.core.settings import get_settings
from app.identity.listing import serialize_contact
from app.identity.service import ContactService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["identity"])

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Digits, spaces, hyphens, parentheses and plus signs only
_PHONE_RE = re.compile(r"^[\d\s\-()+]+$")
_MIN_PHONE_DIGITS = 6


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def is_valid_phone_number(phone_number: str) -> bool:
    digits = sum(ch.isdigit() for ch in phone_number)
    return bool(_PHONE_RE.match(phone_number)) and digits >= _MIN_PHONE_DIGITS


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class IdentifyBody(BaseModel):
    email: str | None = None
    phoneNumber: str | None = None

    @field_validator("phoneNumber", mode="before")
    @classmethod
    def numeric_phone_as_text(cls, value):
        # Clients commonly send phone numbers as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("email", "phoneNumber")
    @classmethod
    def blank_as_missing(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def check_contact_fields(self):
        if self.email is None and self.phoneNumber is None:
            raise ValueError("At least one of email or phoneNumber must be provided")
        if self.email is not None and not is_valid_email(self.email):
            raise ValueError("Invalid email format")
        if self.phoneNumber is not None and not is_valid_phone_number(self.phoneNumber):
            raise ValueError("Invalid phone number format")
        return self


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/identify", summary="Reconcile contact details into one identity")
@router.post("/api/v1/identify", include_in_schema=False)
def identify(body: IdentifyBody, service: ContactService = Depends(get_contact_service)):
    contact = service.identify(body.email, body.phoneNumber)
    return {"contact": contact.to_dict()}


@router.get("/contacts", summary="List stored contact records")
@router.get("/api/v1/contacts", include_in_schema=False)
def list_contacts(
    limit: int | None = None,
    page: int = 1,
    service: ContactService = Depends(get_contact_service),
):
    settings = get_settings()
    if limit is None:
        limit = settings.default_page_size
    if limit < 1 or limit > settings.max_page_size:
        raise HTTPException(status_code=400, detail=f"Limit must be between 1 and {settings.max_page_size}")
    if page < 1:
        raise HTTPException(status_code=400, detail="Page must be greater than 0")

    result = service.list_contacts(limit, page)
    return {
        "success": True,
        "data": [serialize_contact(c) for c in result.contacts],
        "pagination": result.pagination.to_dict(),
    }
