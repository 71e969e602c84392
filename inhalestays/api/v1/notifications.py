"""Notification endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.api.deps import get_current_active_user, get_db
from inhalestays.models.user import User
from inhalestays.schemas.user import PushTokenUpdate

router = APIRouter()


@router.post("/token", status_code=status.HTTP_204_NO_CONTENT)
async def register_push_token(
    token_data: PushTokenUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Register the caller's device push token."""
    current_user.push_token = token_data.token
    await db.flush()


@router.delete("/token", status_code=status.HTTP_204_NO_CONTENT)
async def unregister_push_token(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Remove the caller's device push token."""
    current_user.push_token = None
    await db.flush()
