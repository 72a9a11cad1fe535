"""Command-line interface for SplitSheet."""

import argparse
import asyncio
import logging
import sys

import uvicorn

from .config import settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="SplitSheet - trip expense splitting backed by Google Sheets"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Auth command
    subparsers.add_parser("auth", help="Authenticate with Google and cache the token")

    # Workbook command
    workbook_parser = subparsers.add_parser(
        "create-workbook", help="Create a new workbook with all sheets and headers"
    )
    workbook_parser.add_argument("owner_name", help="Name used in the workbook title")

    # Balances command
    balances_parser = subparsers.add_parser(
        "balances", help="Print balances and settlements of a trip"
    )
    balances_parser.add_argument("workbook_id", help="Spreadsheet ID of the workbook")
    balances_parser.add_argument("trip_id", help="ID of the trip")

    args = parser.parse_args()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "auth":
        run_auth()
    elif args.command == "create-workbook":
        asyncio.run(run_create_workbook(args.owner_name))
    elif args.command == "balances":
        asyncio.run(run_balances(args.workbook_id, args.trip_id))
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "splitsheet.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def run_auth():
    """Run the Google authentication flow."""
    from .auth import load_credentials

    print("Authenticating with Google...")
    try:
        load_credentials()
        print("Authentication successful!")
        print(f"Token saved to {settings.google_token_path}.")
    except Exception as e:
        print(f"Authentication failed: {e}")
        sys.exit(1)


def _cached_session():
    from .auth import load_credentials, session_from_credentials
    from .sheets import NotAuthenticatedError

    try:
        return session_from_credentials(load_credentials(interactive=False))
    except NotAuthenticatedError as e:
        print(f"Error: {e}")
        sys.exit(1)


async def run_create_workbook(owner_name: str):
    """Create a workbook for the cached user."""
    from .sheets import SheetsStoreClient, SheetsAPIError

    client = SheetsStoreClient(_cached_session())
    try:
        workbook_id = await client.create_workbook(owner_name)
    except SheetsAPIError as e:
        print(f"Error [{e.code}]: {e.message}")
        sys.exit(1)
    print(f"Created workbook: {workbook_id}")


async def run_balances(workbook_id: str, trip_id: str):
    """Print the balances and settlements of a trip."""
    from .ledger import RecordNotFoundError, TripLedger
    from .sheets import SheetsStoreClient, SheetsAPIError

    ledger = TripLedger(SheetsStoreClient(_cached_session()), workbook_id)
    try:
        await ledger.load()
        summary = ledger.summary(trip_id)
    except SheetsAPIError as e:
        print(f"Error [{e.code}]: {e.message}")
        sys.exit(1)
    except RecordNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    names = {p.id: p.name for p in ledger.people}
    print(f"{summary.trip.name}: {summary.expense_count} expenses, total {summary.total_amount:.2f}")
    print("=" * 40)
    for balance in summary.balances:
        name = names.get(balance.person_id, balance.person_id)
        print(
            f"{name:20} paid {balance.total_paid:10.2f}  owes {balance.total_owed:10.2f}"
            f"  balance {balance.balance:+10.2f}"
        )
    if summary.settlements:
        print()
        for settlement in summary.settlements:
            debtor = names.get(settlement.from_person, settlement.from_person)
            creditor = names.get(settlement.to_person, settlement.to_person)
            print(f"{debtor} pays {creditor} {settlement.amount:.2f}")


if __name__ == "__main__":
    main()
