"""
Typed accessors over the identity-owned users table.

Everything that needs a user's inbox setting or public profile goes through
here so the default for an unset ``inbox_enabled`` lives in one place.
"""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from .models.users import User

INBOX_ENABLED_DEFAULT = True


def inbox_enabled(user: User) -> bool:
    """Resolve the optional inbox flag: an unset value means enabled."""
    if user.inbox_enabled is None:
        return INBOX_ENABLED_DEFAULT
    return bool(user.inbox_enabled)


async def get_user(session: AsyncSession, user_id: int, for_update: bool = False) -> Optional[User]:
    q = select(User).where(User.id == user_id)
    if for_update:
        q = q.with_for_update()
    res = await session.execute(q)
    return res.scalars().first()


async def get_users(session: AsyncSession, user_ids) -> dict:
    ids = set(user_ids)
    if not ids:
        return {}
    res = await session.execute(select(User).where(User.id.in_(ids)))
    return {u.id: u for u in res.scalars().all()}


def public_profile(user: User) -> dict:
    return {
        'id': user.id,
        'name': user.name,
        'username': user.username,
        'image_url': user.image_url,
    }


def participant_profile(user: User) -> dict:
    profile = public_profile(user)
    profile['inbox_enabled'] = inbox_enabled(user)
    return profile
