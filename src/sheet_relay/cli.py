"""CLI for sheet-relay.

Usage:
    sheet-relay serve [--host H] [--port P]   # Run the web service
    sheet-relay status                        # Show configuration status
    sheet-relay import-key <path>             # Import service account key
"""

from __future__ import annotations

import argparse
import json
import logging
import shutil
import sys
from pathlib import Path


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Reducing noise from third-party libraries
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def cmd_serve(host: str | None, port: int | None, reload: bool = False) -> int:
    """Run the web service with uvicorn."""
    import uvicorn

    from sheet_relay.config import get_settings

    settings = get_settings()
    _configure_logging(settings.log_level)

    uvicorn.run(
        "sheet_relay.web.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )
    return 0


def cmd_status() -> int:
    """Show status of the service configuration."""
    from sheet_relay.config import get_credential_status

    status = get_credential_status()

    print("=" * 60)
    print("SHEET-RELAY CONFIGURATION STATUS")
    print("=" * 60)
    print()
    print(f"Repository: {status['repo_root']}")
    print(f"  .env file:              {'[x]' if status['env_file'] else '[ ]'}")
    print()

    print("Google:")
    print(f"  client id:              {'[x]' if status['google']['client_id'] else '[ ]'}")
    print(f"  client secret:          {'[x]' if status['google']['client_secret'] else '[ ]'}")
    print(f"  service account key:    {'[x]' if status['google']['service_account'] else '[ ]'}")
    print(f"  callback URL:           {status['google']['callback_url']}")
    print()

    print("Service:")
    print(f"  session secret:         {'[x]' if status['session_secret'] else '[ ] (default)'}")
    print(f"  webhook token:          {'[x]' if status['webhook_token'] else '[ ]'}")
    print(f"  n8n webhook URL:        {status['n8n_webhook_url'] or '[ ]'}")
    print()

    return 0


def cmd_import_key(source_path: str) -> int:
    """Import service account key from a file."""
    from sheet_relay.config import get_settings

    source = Path(source_path).expanduser()

    if not source.exists():
        print(f"Error: File not found: {source}")
        return 1

    # Validate JSON format
    try:
        with open(source) as f:
            data = json.load(f)

        if data.get("type") != "service_account":
            print("Error: Invalid service account key format")
            print(f"Expected type 'service_account', got '{data.get('type')}'")
            return 1

        email = data.get("client_email", "unknown")

    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}")
        return 1

    target = get_settings().service_account_file
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, target)

    print("Imported service account key")
    print(f"  From:  {source}")
    print(f"  To:    {target}")
    print(f"  Email: {email}")
    print()
    print("Share the spreadsheets read by /webhook/sheet with the service account email!")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="sheet-relay",
        description="Upload spreadsheets to Google Drive and relay them to n8n",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    serve_parser = subparsers.add_parser("serve", help="Run the web service")
    serve_parser.add_argument("--host", type=str, default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes (development only)",
    )

    subparsers.add_parser("status", help="Show configuration status")

    import_key_parser = subparsers.add_parser(
        "import-key", help="Import service account key"
    )
    import_key_parser.add_argument("path", help="Path to service account JSON key file")

    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "serve":
        return cmd_serve(args.host, args.port, args.reload)

    if args.command == "status":
        return cmd_status()

    if args.command == "import-key":
        return cmd_import_key(args.path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
