"""``dashboard`` terminal front-end.

Usage:
    dashboard login --email admin@example.com
    dashboard whoami
    dashboard contacts list
    dashboard contacts contacted <id> [--not-contacted]
    dashboard contacts delete <id>
    dashboard deals list
    dashboard deals create --name "Ana Ruiz" --company "Ruiz SA" --phone "+56 9 1234" \
        --address "Av. Uno 123" --description "Mantencion anual" --start-date 2024-01-10
    dashboard deals update <id> --address "New Addr"
    dashboard deals delete <id>
    dashboard logout

Reads DASHBOARD_API_URL and DASHBOARD_SESSION_FILE from the environment or .env.
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys
from typing import Any, TextIO

from src.dashboard.client.http import ApiError, DashboardClient
from src.dashboard.client.session import SessionStore
from src.dashboard.client.storage import FileSessionStorage
from src.dashboard.client.views import ContactsView, DealContactsView
from src.dashboard.config import get_client_settings

SESSION_EXPIRED_MESSAGE = "Session expired, please log in again"
NOT_LOGGED_IN_MESSAGE = "Not logged in. Run 'dashboard login' first."

# CLI flag -> wire field
DEAL_FIELDS = {
    "name": "nombre",
    "company": "nombreEmpresa",
    "phone": "telefono",
    "address": "direccion",
    "description": "descripcionServicio",
    "start_date": "fechaInicio",
    "end_date": "fechaTermino",
}


def _add_deal_field_options(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required, help="Contact name")
    parser.add_argument("--company", required=required, help="Company name")
    parser.add_argument("--phone", required=required, help="Phone number")
    parser.add_argument("--address", required=required, help="Address")
    parser.add_argument("--description", required=required, help="Service description")
    parser.add_argument("--start-date", help="Contract start date (YYYY-MM-DD, '' clears)")
    parser.add_argument("--end-date", help="Contract end date (YYYY-MM-DD, '' clears)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dashboard", description="Admin dashboard client")
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Sign in as an administrator")
    login.add_argument("--email", required=True)
    login.add_argument("--password", help="Prompted for when omitted")

    commands.add_parser("logout", help="Forget the stored session")
    commands.add_parser("whoami", help="Show the signed-in administrator")

    contacts = commands.add_parser("contacts", help="Contact requests")
    contact_actions = contacts.add_subparsers(dest="action", required=True)
    contact_actions.add_parser("list", help="List contact requests")
    contact_delete = contact_actions.add_parser("delete", help="Delete a contact request")
    contact_delete.add_argument("id")
    contact_flag = contact_actions.add_parser("contacted", help="Set the contacted flag")
    contact_flag.add_argument("id")
    contact_flag.add_argument(
        "--not-contacted", dest="contacted", action="store_false", help="Clear the flag instead"
    )

    deals = commands.add_parser("deals", help="Deal contacts")
    deal_actions = deals.add_subparsers(dest="action", required=True)
    deal_actions.add_parser("list", help="List deal contacts")
    deal_create = deal_actions.add_parser("create", help="Create a deal contact")
    _add_deal_field_options(deal_create, required=True)
    deal_update = deal_actions.add_parser("update", help="Update fields of a deal contact")
    deal_update.add_argument("id")
    _add_deal_field_options(deal_update, required=False)
    deal_delete = deal_actions.add_parser("delete", help="Delete a deal contact")
    deal_delete.add_argument("id")

    return parser


def deal_payload(args: argparse.Namespace) -> dict[str, Any]:
    """Wire payload holding only the fields given on the command line."""
    payload = {}
    for option, field in DEAL_FIELDS.items():
        value = getattr(args, option, None)
        if value is not None:
            payload[field] = value
    return payload


def _print_contacts(items: list[dict], out: TextIO) -> None:
    if not items:
        print("No contacts.", file=out)
        return
    for item in items:
        mark = "x" if item.get("contacted") else " "
        print(
            f"[{mark}] {item['id']}  {item['name']}  <{item['email']}>  {item['phone']}  {item.get('createdAt', '')}",
            file=out,
        )


def _print_deals(items: list[dict], out: TextIO) -> None:
    if not items:
        print("No deal contacts.", file=out)
        return
    for item in items:
        period = ""
        if item.get("fechaInicio") or item.get("fechaTermino"):
            period = f"  {item.get('fechaInicio') or '?'} -> {item.get('fechaTermino') or '?'}"
        print(
            f"{item['id']}  {item['nombre']} ({item['nombreEmpresa']})  {item['telefono']}  {item['direccion']}{period}",
            file=out,
        )


async def run(
    args: argparse.Namespace,
    client: DashboardClient,
    out: TextIO = sys.stdout,
    err: TextIO = sys.stderr,
) -> int:
    """Execute a parsed command. Returns the process exit code."""
    session = client.session

    if args.command == "login":
        password = args.password if args.password is not None else getpass.getpass("Password: ")
        try:
            data = await client.login(args.email, password)
        except ApiError as exc:
            print(f"Login failed: {exc.message}", file=err)
            return 1
        print(f"Logged in as {data['user']['name']} <{data['user']['email']}>", file=out)
        return 0

    if args.command == "logout":
        session.logout()
        print("Logged out.", file=out)
        return 0

    if not session.state.is_authenticated:
        print(NOT_LOGGED_IN_MESSAGE, file=err)
        return 1

    if args.command == "whoami":
        user = session.user or {}
        print(f"{user.get('name')} <{user.get('email')}> ({user.get('id')})", file=out)
        return 0

    try:
        if args.command == "contacts":
            view = ContactsView(client)
            if args.action == "list":
                _print_contacts(await view.load(), out)
            elif args.action == "delete":
                await view.remove(args.id)
                print(f"Deleted contact {args.id}", file=out)
            elif args.action == "contacted":
                contact = await view.mark_contacted(args.id, args.contacted)
                print(f"Contact {contact['id']} contacted={contact['contacted']}", file=out)
        elif args.command == "deals":
            view = DealContactsView(client)
            if args.action == "list":
                _print_deals(await view.load(), out)
            elif args.action == "create":
                created = await view.create(deal_payload(args))
                print(f"Created deal contact {created['id']}", file=out)
            elif args.action == "update":
                patch = deal_payload(args)
                if not patch:
                    print("Nothing to update.", file=err)
                    return 1
                updated = await view.update(args.id, patch)
                print(f"Updated deal contact {updated['id']}", file=out)
            elif args.action == "delete":
                await view.remove(args.id)
                print(f"Deleted deal contact {args.id}", file=out)
    except ApiError as exc:
        if exc.status_code == 401:
            print(SESSION_EXPIRED_MESSAGE, file=err)
        else:
            print(f"Error: {exc.message}", file=err)
        return 1

    return 0


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    settings = get_client_settings()
    session = SessionStore(FileSessionStorage(settings.DASHBOARD_SESSION_FILE))
    session.hydrate()
    client = DashboardClient(
        session,
        base_url=settings.DASHBOARD_API_URL,
        timeout=settings.DASHBOARD_TIMEOUT_SECONDS,
    )

    sys.exit(asyncio.run(run(args, client)))


if __name__ == "__main__":
    main()
