#!/usr/bin/env python
"""
Run periodic maintenance against the configured store.

Expires open requests whose needed-by time has passed and deletes
unredeemed invites past their expiry. Meant to be run from cron or a
scheduled job; with the in-memory backend it only affects this process.

Usage:
    python run_maintenance.py
    python run_maintenance.py --skip-invites
"""

import argparse
import asyncio
import logging

from rich.console import Console

from shared.config import get_settings
from modules.groups.service import get_group_service
from modules.help_requests.service import get_request_service

console = Console()


async def run(skip_requests: bool = False, skip_invites: bool = False) -> tuple[int, int]:
    """Run the sweeps. Returns (requests expired, invites deleted)."""
    expired = []
    removed = 0
    if not skip_requests:
        expired = await get_request_service().expire_overdue_requests()
    if not skip_invites:
        removed = await get_group_service().cleanup_expired_invites()
    return len(expired), removed


def main():
    parser = argparse.ArgumentParser(description="Run Cup of Sugar maintenance sweeps")
    parser.add_argument("--skip-requests", action="store_true", help="Do not expire requests")
    parser.add_argument("--skip-invites", action="store_true", help="Do not delete invites")
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    expired, removed = asyncio.run(run(args.skip_requests, args.skip_invites))
    console.print(
        f"[green]Done[/green] ({settings.storage_backend} storage): "
        f"{expired} request(s) expired, {removed} invite(s) deleted"
    )


if __name__ == "__main__":
    main()
