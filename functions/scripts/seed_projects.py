"""
CLI helper to seed the hosted store with the static projects and create an admin user.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lightberry.auth import PASSWORD_MIN_LENGTH, hash_password
from lightberry.config import get_settings
from lightberry.db import SqlProjectStore
from lightberry.static_projects import static_projects

logger = logging.getLogger(__name__)


def seed_projects(store: SqlProjectStore, *, force: bool = False) -> int:
    """Insert the static projects; skipped when the store already has rows."""
    if store.count_projects() and not force:
        logger.info("Store already has projects; pass --force to seed anyway")
        return 0
    existing = {project.id for project in store.list_projects()}
    inserted = 0
    for project in static_projects():
        if project.id in existing:
            continue
        store.insert_project(project)
        inserted += 1
    return inserted


def create_admin(store: SqlProjectStore, email: str, password: str) -> None:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    store.save_admin_user(email, hash_password(password))


def main() -> int:
    parser = argparse.ArgumentParser(description="Lightberry store setup")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed = subparsers.add_parser("seed", help="Insert the static projects")
    seed.add_argument(
        "--force",
        action="store_true",
        help="Seed even when the store already has projects",
    )

    admin = subparsers.add_parser("create-admin", help="Create or update an admin user")
    admin.add_argument("email", type=str)
    admin.add_argument(
        "--password",
        type=str,
        default=None,
        help="Password (prompted when omitted)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    database_url = args.database_url or get_settings().database_url
    if not database_url:
        logger.error("DATABASE_URL is not configured")
        return 1
    store = SqlProjectStore(database_url)

    if args.command == "seed":
        inserted = seed_projects(store, force=args.force)
        logger.info("Inserted %d projects", inserted)
        return 0

    password = args.password or getpass.getpass("Admin password: ")
    try:
        create_admin(store, args.email, password)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    logger.info("Admin user %s saved", args.email)
    return 0


if __name__ == "__main__":
    sys.exit(main())
