#!/usr/bin/env python3
"""CLI script to provision a dashboard administrator.

Usage:
    python scripts/provision_admin.py create --email admin@example.com --name "Admin"
    python scripts/provision_admin.py reset-password --email admin@example.com

Connects directly to the database using DATABASE_URL from environment or .env file.
Administrators are only ever created here; the API has no registration endpoint.
The password is prompted for when --password is omitted.
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import os
import sys

# Ensure project root is on sys.path so we can import src.dashboard
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def provision(command: str, email: str, name: str | None, password: str) -> int:
    """Create an administrator or replace its password."""
    from pydantic import ValidationError as SchemaError

    from src.dashboard.auth.repository import AdminRepository
    from src.dashboard.auth.schemas import AdminCreate
    from src.dashboard.core.database import close_db, get_session, init_db
    from src.dashboard.core.errors import DashboardError

    await init_db()
    repository = AdminRepository(session_factory=get_session)

    try:
        if command == "create":
            try:
                data = AdminCreate(name=name, email=email, password=password)
            except SchemaError as exc:
                print(f"Invalid administrator: {exc.errors()[0]['msg']}")
                return 1
            admin = await repository.create(data)
            print("Administrator created:")
        else:
            admin = await repository.set_password(email, password)
            print("Password updated:")
        print(f"  ID:    {admin.id}")
        print(f"  Name:  {admin.name}")
        print(f"  Email: {admin.email}")
        return 0
    except DashboardError as exc:
        print(f"Error: {exc.message}")
        return 1
    finally:
        await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Provision a dashboard administrator")
    parser.add_argument("command", choices=["create", "reset-password"])
    parser.add_argument("--email", required=True, help="Administrator email")
    parser.add_argument("--name", default=None, help="Display name (required for create)")
    parser.add_argument("--password", default=None, help="Password (prompted when omitted)")
    args = parser.parse_args()

    if args.command == "create" and not args.name:
        parser.error("--name is required for create")

    password = args.password
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            parser.error("passwords do not match")

    sys.exit(asyncio.run(provision(args.command, args.email, args.name, password)))


if __name__ == "__main__":
    main()
