#!/usr/bin/env python3
"""Grant (or revoke) the admin role.

Admins can call ``POST /api/admin/reset-users``. The user must have logged in
at least once so their row exists.

Usage:
    python scripts/promote_admin.py USER_ID [--revoke]
    python scripts/promote_admin.py --github-login LOGIN [--revoke]

Options:
    --github-login  Find the user by their cached GitHub username instead of id
    --revoke        Set the role back to ``user``
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from src.db.database import async_session_maker
from src.models.user import User, UserRole


async def set_role(user_id: str | None, github_login: str | None, revoke: bool) -> int:
    """Update the user's role. Returns a process exit code."""
    role = UserRole.USER if revoke else UserRole.ADMIN

    async with async_session_maker() as db:
        if user_id:
            user = await db.get(User, user_id)
        else:
            result = await db.execute(select(User).where(User.github_username == github_login))
            user = result.scalar_one_or_none()

        if user is None:
            print(f"No user found for {user_id or github_login}")
            return 1

        if user.role == role:
            print(f"{user.username} ({user.id}) already has role '{role.value}'")
            return 0

        user.role = role
        await db.commit()
        print(f"{user.username} ({user.id}) now has role '{role.value}'")
        return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Grant or revoke the admin role")
    parser.add_argument("user_id", nargs="?", help="Local user id")
    parser.add_argument("--github-login", help="Cached GitHub username of the user")
    parser.add_argument("--revoke", action="store_true", help="Demote to a regular user")
    args = parser.parse_args()

    if not args.user_id and not args.github_login:
        parser.error("give a USER_ID or --github-login")

    sys.exit(asyncio.run(set_role(args.user_id, args.github_login, args.revoke)))
