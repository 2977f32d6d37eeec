"""CLI entry point for inbox-relay."""

import argparse
import logging
import sys

from inbox_relay.config import get_settings_eager
from inbox_relay.exceptions import ConfigError


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="inbox-relay",
        description="Inbox Relay - shared access to delegated Gmail accounts",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")

    subparsers.add_parser("init-db", help="Create the accounts table")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        if args.command == "serve":
            return _handle_serve(args.host, args.port)
        if args.command == "init-db":
            return _handle_init_db()
    except ConfigError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2

    return 1


def _handle_serve(host: str, port: int) -> int:
    """Handle serve subcommand."""
    import uvicorn

    from inbox_relay.web import create_app

    app = create_app(get_settings_eager())
    uvicorn.run(app, host=host, port=port)
    return 0


def _handle_init_db() -> int:
    """Handle init-db subcommand."""
    from inbox_relay.accounts.store.sql import SqlAccountStore
    from inbox_relay.exceptions import StoreError

    settings = get_settings_eager(require_session_secret=False)
    store = SqlAccountStore.from_url(settings.database_url, timeout=settings.store_timeout)
    try:
        store.create_schema()
    except StoreError as e:
        print(f"✗ Could not create schema: {e}", file=sys.stderr)
        return 1
    finally:
        store.dispose()

    print("✓ Accounts table ready")
    return 0


if __name__ == "__main__":
    sys.exit(main())
