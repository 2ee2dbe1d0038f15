#!/usr/bin/env python3
"""Seed demo data by replaying a sequence of purchases through /identify logic.

Usage:
    python scripts/seed_demo.py          # uses DATABASE_URL from env / .env
    DATABASE_URL=... python scripts/seed_demo.py
"""
from __future__ import annotations

import json
import sys

# Ensure project root is on sys.path
sys.path.insert(0, ".")

from app.core.logging import setup_logging
from app.core.settings import get_settings
from app.db.base import Base
from app.db.session import dispose_engine, get_engine, get_session_factory
from app.identity.service import ContactService

# (email, phone_number) in purchase order
DEMO_PURCHASES: list[tuple[str | None, str | None]] = [
    ("lorraine@hillvalley.edu", "123456"),
    ("mcfly@hillvalley.edu", "123456"),
    (None, "123456"),
    ("lorraine@hillvalley.edu", None),
    ("george@hillvalley.edu", "919191"),
    ("biffsucks@hillvalley.edu", "717171"),
    ("george@hillvalley.edu", "717171"),
]


def seed(service: ContactService) -> None:
    """Replay ``DEMO_PURCHASES`` and print each consolidated identity."""
    for step, (email, phone_number) in enumerate(DEMO_PURCHASES, start=1):
        contact = service.identify(email, phone_number)
        print(f"{step}. email={email!r} phoneNumber={phone_number!r}")
        print(json.dumps({"contact": contact.to_dict()}, indent=2))


def main() -> None:
    setup_logging()
    settings = get_settings()
    print(f"Seeding {settings.database_url}")

    Base.metadata.create_all(bind=get_engine())
    try:
        seed(ContactService(get_session_factory()))
    finally:
        dispose_engine()
    print("Done.")


if __name__ == "__main__":
    main()
