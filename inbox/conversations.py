"""
Conversation store.

A conversation is identified by its canonical participant pair, so
``get_or_create(a, b)`` and ``get_or_create(b, a)`` always resolve to the same
row. This module knows nothing about inbox settings or deletion markers;
callers compose those in.
"""
import logging
from typing import List, Optional, Tuple
from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession
from .models.conversations import Conversation
from .sql import dialect_insert

logger = logging.getLogger(__name__)


def canonical_pair(user_a: int, user_b: int) -> Tuple[int, int]:
    a, b = sorted([user_a, user_b])
    return a, b


async def get(session: AsyncSession, conversation_id: int) -> Optional[Conversation]:
    res = await session.execute(select(Conversation).where(Conversation.id == conversation_id))
    return res.scalars().first()


async def find(session: AsyncSession, user_a: int, user_b: int) -> Optional[Conversation]:
    low, high = canonical_pair(user_a, user_b)
    res = await session.execute(
        select(Conversation).where(Conversation.user_low_id == low, Conversation.user_high_id == high)
    )
    return res.scalars().first()


async def get_or_create(session: AsyncSession, user_a: int, user_b: int, now: int) -> Tuple[Conversation, bool]:
    """Return (conversation, created). Safe under concurrent first contact."""
    existing = await find(session, user_a, user_b)
    if existing:
        return existing, False
    low, high = canonical_pair(user_a, user_b)
    stmt = dialect_insert(session, Conversation).values(
        user_low_id=low,
        user_high_id=high,
        last_activity_time=now,
        creation_time=now,
    ).on_conflict_do_nothing(index_elements=['user_low_id', 'user_high_id'])
    res = await session.execute(stmt)
    created = res.rowcount == 1
    conversation = await find(session, low, high)
    if created:
        logger.info({'msg': 'dm_conversation_created', 'conversation_id': conversation.id})
    return conversation, created


async def touch(session: AsyncSession, conversation_id: int, last_message_id: int, now: int):
    await session.execute(
        update(Conversation)
        .where(Conversation.id == conversation_id)
        .values(last_message_id=last_message_id, last_activity_time=now)
    )


async def list_for_user(session: AsyncSession, user_id: int) -> List[Conversation]:
    """Every conversation the user takes part in, most recent activity first."""
    res = await session.execute(
        select(Conversation)
        .where(or_(Conversation.user_low_id == user_id, Conversation.user_high_id == user_id))
        .order_by(Conversation.last_activity_time.desc(), Conversation.id.desc())
    )
    return list(res.scalars().all())
