"""
Per-user hiding of conversations and messages.

Two kinds of record live here. A conversation marker hides a conversation
from one user's inbox list and can be removed again (reopen, or a new
incoming message). A message hide adds the user to that message's
hidden-for set and is never removed, so history a user deleted stays
deleted for them even after the conversation comes back.
"""
import logging
from typing import Set
from sqlalchemy import select, delete, exists, literal
from sqlalchemy.ext.asyncio import AsyncSession
from .models.deletion_markers import DeletionMarker
from .models.message_hides import MessageHide
from .models.messages import Message
from . import conversations
from .sql import dialect_insert

logger = logging.getLogger(__name__)


def not_hidden_for(user_id: int):
    """SQL filter on Message: the user is not in the message's hidden-for set."""
    return ~exists().where(MessageHide.message_id == Message.id, MessageHide.user_id == user_id)


async def is_hidden(session: AsyncSession, conversation_id: int, user_id: int) -> bool:
    res = await session.execute(
        select(DeletionMarker.id).where(
            DeletionMarker.conversation_id == conversation_id,
            DeletionMarker.user_id == user_id,
        )
    )
    return res.first() is not None


async def hidden_conversation_ids(session: AsyncSession, user_id: int) -> Set[int]:
    res = await session.execute(select(DeletionMarker.conversation_id).where(DeletionMarker.user_id == user_id))
    return set(res.scalars().all())


async def _hide_messages(session: AsyncSession, conversation_id: int, user_id: int):
    rows = select(Message.id, literal(user_id)).where(
        Message.conversation_id == conversation_id,
        not_hidden_for(user_id),
    )
    stmt = dialect_insert(session, MessageHide).from_select(['message_id', 'user_id'], rows)
    await session.execute(stmt.on_conflict_do_nothing())


async def hide(session: AsyncSession, conversation_id: int, user_id: int) -> bool:
    """Hide a conversation and all of its current messages for one user.

    Returns True when the conversation was newly hidden, False when the
    marker already existed (in which case nothing changes).
    """
    stmt = dialect_insert(session, DeletionMarker).values(
        conversation_id=conversation_id,
        user_id=user_id,
    ).on_conflict_do_nothing(index_elements=['conversation_id', 'user_id'])
    res = await session.execute(stmt)
    if res.rowcount != 1:
        return False
    await _hide_messages(session, conversation_id, user_id)
    return True


async def unhide(session: AsyncSession, conversation_id: int, user_id: int) -> bool:
    """Remove the conversation marker only. Message hides are left alone."""
    res = await session.execute(
        delete(DeletionMarker).where(
            DeletionMarker.conversation_id == conversation_id,
            DeletionMarker.user_id == user_id,
        )
    )
    removed = res.rowcount > 0
    if removed:
        logger.info({'msg': 'dm_conversation_resurrected', 'conversation_id': conversation_id, 'user_id': user_id})
    return removed


async def hide_all_for_user(session: AsyncSession, user_id: int) -> int:
    hidden = await hidden_conversation_ids(session, user_id)
    count = 0
    for conversation in await conversations.list_for_user(session, user_id):
        if conversation.id in hidden:
            continue
        if await hide(session, conversation.id, user_id):
            count += 1
    return count


async def hide_message(session: AsyncSession, message_id: int, user_id: int) -> bool:
    stmt = dialect_insert(session, MessageHide).values(
        message_id=message_id,
        user_id=user_id,
    ).on_conflict_do_nothing(index_elements=['message_id', 'user_id'])
    res = await session.execute(stmt)
    return res.rowcount == 1
