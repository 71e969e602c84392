"""API dependencies for authentication and common operations."""

import logging
from datetime import UTC, datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.core.exceptions import AuthenticationError, AuthorizationError
from inhalestays.core.security import verify_token
from inhalestays.database import get_db
from inhalestays.models.user import User

logger = logging.getLogger(__name__)

# Security scheme; missing credentials are reported as 401 by get_current_user
security = HTTPBearer(auto_error=False)

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_current_admin",
    "get_current_vendor_or_admin",
]


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current user from the auth provider's JWT.

    A first request from a valid token without a profile row creates a
    student profile from the token's claims.
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token")

    payload = verify_token(credentials.credentials)
    try:
        user_id = UUID(payload["sub"])
    except (ValueError, TypeError, AttributeError):
        raise AuthenticationError("Invalid token subject")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        email = payload.get("email")
        if not email:
            raise AuthenticationError("User not found")
        user = User(
            id=user_id,
            email=email,
            phone=payload.get("phone"),
            role="student",
            created_at=datetime.now(UTC),
        )
        db.add(user)
        await db.flush()
        logger.info("Provisioned profile for user %s", user_id)

    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are active."""
    if not current_user.is_active:
        raise AuthorizationError("User account is deactivated")
    return current_user


async def get_current_admin(
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> User:
    """Get current user and verify they are an admin."""
    if current_user.role != "admin":
        raise AuthorizationError("Admin access required")
    return current_user


async def get_current_vendor_or_admin(
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> User:
    """Get current user and verify they are a vendor or an admin."""
    if current_user.role not in ("vendor", "admin"):
        raise AuthorizationError("Vendor access required")
    return current_user

