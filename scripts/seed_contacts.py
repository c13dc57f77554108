#!/usr/bin/env python3
"""Insert sample contact requests for local development.

Usage:
    python scripts/seed_contacts.py
    python scripts/seed_contacts.py --count 3

Writes through ContactRepository.create_contact, the same path the public
contact form uses, so seeded rows go through the same validation.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.dashboard
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

SAMPLE_CONTACTS = [
    {"name": "Camila Soto", "email": "camila.soto@example.com", "phone": "+56 9 5555 0101"},
    {"name": "Diego Fuentes", "email": "Diego.Fuentes@Example.com", "phone": "+56 9 5555 0102"},
    {"name": "Valentina Rojas", "email": "vrojas@example.org", "phone": "(2) 2555 0103"},
    {"name": "Matias Herrera", "email": "matias@herrera.cl", "phone": "+56 2 2555 0104"},
    {"name": "Fernanda Diaz", "email": "fdiaz@example.net", "phone": "+56 9 5555 0105"},
]


async def seed(count: int) -> None:
    from src.dashboard.contacts.repository import ContactRepository
    from src.dashboard.contacts.schemas import ContactCreate
    from src.dashboard.core.database import close_db, get_session, init_db

    await init_db()
    repository = ContactRepository(session_factory=get_session)

    for sample in SAMPLE_CONTACTS[:count]:
        contact = await repository.create_contact(ContactCreate(**sample))
        print(f"  {contact.id}  {contact.name} <{contact.email}>")

    await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed sample contact requests")
    parser.add_argument(
        "--count",
        type=int,
        default=len(SAMPLE_CONTACTS),
        help=f"Number of contacts to insert (max {len(SAMPLE_CONTACTS)})",
    )
    args = parser.parse_args()

    print(f"Seeding {min(args.count, len(SAMPLE_CONTACTS))} contacts")
    asyncio.run(seed(args.count))


if __name__ == "__main__":
    main()
