"""User CRUD operations.

Users are never edited through the API: they mirror the identity provider and
are written only by the identity sync pipeline.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from taskdeck.service.db.tables import User


class DuplicateUserError(ValueError):
    """Raised when a user with the given ID already exists."""


class UserNotFoundError(LookupError):
    """Raised when a user is not found."""


async def create_user(
    db: AsyncSession,
    user_id: str,
    *,
    email: str | None = None,
    display_name: str = "",
    avatar_url: str | None = None,
) -> User:
    """Insert a user.  Raises ``DuplicateUserError`` if the ID exists."""
    existing = await db.get(User, user_id)
    if existing is not None:
        raise DuplicateUserError(user_id)

    user = User(id=user_id, email=email, display_name=display_name, avatar_url=avatar_url)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user(db: AsyncSession, user_id: str) -> User:
    """Get a user by ID.  Raises ``UserNotFoundError`` if missing."""
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def update_user(db: AsyncSession, user_id: str, changes: dict) -> User:
    """Apply *changes* (column -> value).  Raises ``UserNotFoundError`` if missing."""
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    if not changes:
        return user

    for key, value in changes.items():
        setattr(user, key, value)

    await db.commit()
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user_id: str) -> None:
    """Delete a user.  Raises ``UserNotFoundError`` if missing."""
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    await db.delete(user)
    await db.commit()
