"""
Command line front end for the blob admin service.

    blob-admin upload --records records.json --users users.json
    blob-admin create-session --id 1 --username admin --role admin
    blob-admin stores
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from blob_admin.config import get_settings
from blob_admin.dependencies import get_session_store
from blob_admin.orchestrator import (
    LocalFile,
    UploadOrchestrator,
    create_upload_client,
)
from blob_admin.sessions import InMemorySessionStore
from blob_admin.stores import STORE_CONFIGS

logger = logging.getLogger(__name__)


def _render_results(orchestrator: UploadOrchestrator) -> None:
    for config in STORE_CONFIGS:
        result = orchestrator.result_for(config.name)
        if result is None:
            continue
        if result.success:
            print(
                f"[ok]     {config.label:<10} {config.hint:<24} "
                f"{result.data_size} bytes  {result.message or ''}"
            )
        else:
            print(f"[failed] {config.label:<10} {config.hint:<24} {result.error}")
    if orchestrator.error:
        print(f"Error: {orchestrator.error}", file=sys.stderr)


async def _run_upload(args: argparse.Namespace) -> int:
    settings = get_settings()
    base_url = args.base_url or (
        settings.client_base_url.rstrip("/") + settings.api_prefix
    )
    async with create_upload_client(base_url, token=args.token) as client:
        orchestrator = UploadOrchestrator(client=client)
        for config in STORE_CONFIGS:
            path = getattr(args, config.name)
            if path and not orchestrator.select_file(config.name, LocalFile(path)):
                print(f"Error: {orchestrator.error} ({path})", file=sys.stderr)
                return 1
        if not args.yes:
            print("Uploading will overwrite existing data in the selected stores.")
        await orchestrator.upload_all()

    _render_results(orchestrator)
    if orchestrator.error or not all(r.success for r in orchestrator.results):
        return 1
    return 0


def _create_session(args: argparse.Namespace) -> int:
    store = get_session_store()
    if isinstance(store, InMemorySessionStore):
        logger.warning("REDIS_URL is not set; the session only lives in this process")
    token = store.create(
        {"id": args.id, "username": args.username, "role": args.role}
    )
    print(token)
    return 0


def _list_stores(args: argparse.Namespace) -> int:
    for config in STORE_CONFIGS:
        print(f"{config.name:<8} {config.key:<12} {config.hint:<24} {config.description}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blob-admin", description="Upload and restore JSON snapshots"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    subparsers = parser.add_subparsers(dest="command", required=True)

    upload = subparsers.add_parser("upload", help="Upload snapshots to the blob store")
    for config in STORE_CONFIGS:
        upload.add_argument(
            f"--{config.name}",
            metavar="PATH",
            default=None,
            help=f"{config.description} ({config.hint})",
        )
    upload.add_argument(
        "--base-url",
        default=None,
        help="Functions base URL (defaults to CLIENT_BASE_URL + API_PREFIX)",
    )
    upload.add_argument("--token", default=None, help="Session token")
    upload.add_argument(
        "-y", "--yes", action="store_true", help="Skip the overwrite notice"
    )
    upload.set_defaults(func=lambda args: asyncio.run(_run_upload(args)))

    session = subparsers.add_parser(
        "create-session", help="Issue a session token in the session store"
    )
    session.add_argument("--id", required=True)
    session.add_argument("--username", required=True)
    session.add_argument("--role", default="admin")
    session.set_defaults(func=_create_session)

    stores = subparsers.add_parser("stores", help="List the configured stores")
    stores.set_defaults(func=_list_stores)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
