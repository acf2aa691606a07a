"""Create an admin account, or print a password hash for seeding by hand.

    python -m gs_portfolio.scripts.create_admin admin 's3cret-pass' admin@example.com
    python -m gs_portfolio.scripts.create_admin --hash-only 's3cret-pass'
"""
import argparse
import asyncio
import sys
from typing import Optional

from sqlalchemy import select

from gs_portfolio.core.database import Base, SessionLocal, engine
from gs_portfolio.core.security import hash_password
from gs_portfolio.models import AdminUser

MIN_PASSWORD_LENGTH = 8


async def create_admin(username: str, password: str, email: str, session_factory=SessionLocal) -> Optional[AdminUser]:
    """Insert an active admin; returns None when the username is taken."""
    async with session_factory() as db:
        res = await db.execute(select(AdminUser).where(AdminUser.username == username))
        if res.scalars().first() is not None:
            return None

        admin = AdminUser(
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        return admin


async def _run(args) -> int:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        admin = await create_admin(args.username, args.password, args.email)
    finally:
        await engine.dispose()

    if admin is None:
        print(f"[create-admin] Admin '{args.username}' already exists", file=sys.stderr)
        return 1
    print(f"[create-admin] Created admin '{admin.username}' (id={admin.id})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a GS Portfolio admin account")
    parser.add_argument("--hash-only", action="store_true", help="only print the password hash")
    parser.add_argument("username", nargs="?")
    parser.add_argument("password", nargs="?")
    parser.add_argument("email", nargs="?")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.hash_only:
        # a lone positional is the password
        password = args.password or args.username
        if not password:
            parser.error("a password is required")
        print(hash_password(password))
        return 0

    if not (args.username and args.password):
        parser.error("username and password are required")
    if len(args.password) < MIN_PASSWORD_LENGTH:
        print(f"[create-admin] Password must be at least {MIN_PASSWORD_LENGTH} characters", file=sys.stderr)
        return 1
    if not args.email:
        args.email = f"{args.username}@localhost"

    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
