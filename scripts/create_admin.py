#!/usr/bin/env python3
"""Promote (or create) an admin profile.

Accounts live with the auth provider, so this only writes the local profile
keyed by the provider's user id.
"""

import asyncio
from uuid import UUID

from sqlalchemy import select

from inhalestays.database import get_db_context
from inhalestays.models.user import User


async def create_admin(user_id: UUID, email: str, full_name: str | None = None) -> None:
    """Create an admin profile if it doesn't exist, else promote it."""
    async with get_db_context() as session:
        result = await session.execute(
            select(User).where((User.id == user_id) | (User.email == email))
        )
        existing = result.scalar_one_or_none()

        if existing:
            existing.role = "admin"
            existing.is_active = True
            if full_name:
                existing.full_name = full_name
            print(f"Promoted existing user to admin: {existing.email}")
        else:
            session.add(
                User(
                    id=user_id,
                    email=email,
                    full_name=full_name,
                    role="admin",
                    is_active=True,
                )
            )
            print(f"Created admin profile: {email}")

        print(f"User ID: {user_id}")
        print("Role: admin")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create an admin profile")
    parser.add_argument("--user-id", required=True, type=UUID, help="Auth provider user id (sub)")
    parser.add_argument("--email", required=True, help="Admin email")
    parser.add_argument("--full-name", default=None, help="Display name")

    args = parser.parse_args()

    asyncio.run(create_admin(user_id=args.user_id, email=args.email, full_name=args.full_name))
