"""
Direct-messaging operations.

Every mutating operation runs in one transaction: the reads that authorize
it and every write it makes commit together or not at all. Side effects that
leave the database (alerts, moderation events) run after commit.

Reads used while a page is loading (conversation and message lists, unread
state, mark-read) degrade to an empty result or a no-op when the caller is
unknown instead of raising.
"""
import logging
from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from . import models, clock, conversations, deletion_ledger, rate_limiter
from .alerts import create_alert, publish_report
from .config import MAX_MESSAGE_LENGTH, PAGE_SIZE, MAX_PAGE_SIZE
from .core import DM_MESSAGES_SENT, DM_SEND_DENIED
from .errors import (
    Unauthenticated, Forbidden, NotFound, RecipientNotFound, InvalidContent,
    InvalidRequest, Conflict, InboxDisabled, RateLimited,
)
from .models.blocks import BlockedUser
from .models.conversations import Conversation
from .models.messages import Message
from .models.reactions import Reaction, ALLOWED_EMOJIS
from .models.read_receipts import ReadReceipt
from .models.reports import DMReport
from .models.users import User
from .sql import dialect_insert
from .users import get_user, get_users, inbox_enabled, public_profile, participant_profile

logger = logging.getLogger(__name__)


# helpers

async def _require_user(session: AsyncSession, user_id: Optional[int], for_update: bool = False) -> User:
    if user_id is None:
        raise Unauthenticated()
    user = await get_user(session, user_id, for_update=for_update)
    if not user:
        raise NotFound('User not found')
    return user


async def _require_participant(session: AsyncSession, conversation_id: int, user_id: int,
                               action: str = 'access') -> Conversation:
    conversation = await conversations.get(session, conversation_id)
    if not conversation:
        raise NotFound('Conversation not found')
    if not conversation.has_participant(user_id):
        raise Forbidden(f'Not authorized to {action} this conversation')
    return conversation


async def _participant_or_none(session: AsyncSession, conversation_id: int,
                               user_id: Optional[int]) -> Optional[Conversation]:
    if user_id is None or not await get_user(session, user_id):
        return None
    conversation = await conversations.get(session, conversation_id)
    if not conversation or not conversation.has_participant(user_id):
        return None
    return conversation


def validate_content(content: Optional[str]) -> str:
    text = (content or '').strip()
    if not text:
        raise InvalidContent('Message cannot be empty')
    if len(text) > MAX_MESSAGE_LENGTH:
        raise InvalidContent(f'Message too long (max {MAX_MESSAGE_LENGTH} characters)')
    return content


async def _is_blocked(session: AsyncSession, blocker_id: int, blocked_id: int) -> bool:
    res = await session.execute(
        select(BlockedUser.id).where(BlockedUser.blocker_id == blocker_id, BlockedUser.blocked_user_id == blocked_id)
    )
    return res.first() is not None


async def _last_read_times(session: AsyncSession, user_id: int) -> dict:
    res = await session.execute(
        select(ReadReceipt.conversation_id, ReadReceipt.last_read_time).where(ReadReceipt.user_id == user_id)
    )
    return {conversation_id: last_read for conversation_id, last_read in res.all()}


async def _unread_count(session: AsyncSession, conversation_id: int, user_id: int, last_read_time: int) -> int:
    res = await session.execute(
        select(func.count(Message.id)).where(
            Message.conversation_id == conversation_id,
            Message.creation_time > last_read_time,
            Message.sender_id != user_id,
            deletion_ledger.not_hidden_for(user_id),
        )
    )
    return int(res.scalar_one())


async def _latest_visible_message(session: AsyncSession, conversation_id: int, user_id: int) -> Optional[Message]:
    res = await session.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id, deletion_ledger.not_hidden_for(user_id))
        .order_by(Message.creation_time.desc(), Message.id.desc())
        .limit(1)
    )
    return res.scalars().first()


async def _visible_conversations(session: AsyncSession, user_id: int) -> List[Conversation]:
    hidden = await deletion_ledger.hidden_conversation_ids(session, user_id)
    return [c for c in await conversations.list_for_user(session, user_id) if c.id not in hidden]


async def _upsert_read(session: AsyncSession, conversation_id: int, user_id: int, now: int):
    stmt = dialect_insert(session, ReadReceipt).values(
        conversation_id=conversation_id,
        user_id=user_id,
        last_read_time=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=['conversation_id', 'user_id'],
        set_={'last_read_time': stmt.excluded.last_read_time},
    )
    await session.execute(stmt)


def resolve_other_participant(conversation: Conversation, viewer_id: int, users: dict) -> Optional[dict]:
    other = users.get(conversation.other_participant(viewer_id))
    return participant_profile(other) if other else None


def resolve_sender(message: Message, users: dict) -> Optional[dict]:
    sender = users.get(message.sender_id)
    return public_profile(sender) if sender else None


def _message_out(message: Message, sender: dict) -> dict:
    return {
        'id': message.id,
        'conversation_id': message.conversation_id,
        'sender_id': message.sender_id,
        'content': message.content,
        'parent_message_id': message.parent_message_id,
        'creation_time': message.creation_time,
        'sender': sender,
    }


# inbox settings

async def toggle_inbox(current_user_id: Optional[int]) -> bool:
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            user = await _require_user(session, current_user_id, for_update=True)
            user.inbox_enabled = not inbox_enabled(user)
            value = user.inbox_enabled
    logger.info({'msg': 'dm_inbox_toggled', 'user_id': current_user_id, 'inbox_enabled': value})
    return value


async def get_inbox_enabled(user_id: int) -> bool:
    async with models.AsyncSessionLocal() as session:
        user = await get_user(session, user_id)
        if not user:
            return False
        return inbox_enabled(user)


# conversations

async def open_conversation(current_user_id: Optional[int], other_user_id: int) -> int:
    """Get or create the conversation with another user and make it visible to both."""
    now = clock.now_ms()
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            user = await _require_user(session, current_user_id)
            if other_user_id == user.id:
                raise InvalidRequest('You cannot message yourself')
            other = await get_user(session, other_user_id)
            if not other:
                raise RecipientNotFound()
            if not inbox_enabled(other):
                raise InboxDisabled()
            conversation, _ = await conversations.get_or_create(session, user.id, other.id, now)
            # reopening restores visibility for both sides
            await deletion_ledger.unhide(session, conversation.id, user.id)
            await deletion_ledger.unhide(session, conversation.id, other.id)
            return conversation.id


async def get_conversation(current_user_id: Optional[int], conversation_id: int) -> Optional[dict]:
    async with models.AsyncSessionLocal() as session:
        conversation = await _participant_or_none(session, conversation_id, current_user_id)
        if not conversation:
            return None
        if await deletion_ledger.is_hidden(session, conversation.id, current_user_id):
            return None
        users = await get_users(session, [conversation.other_participant(current_user_id)])
        other = resolve_other_participant(conversation, current_user_id, users)
        if not other:
            return None
        return {'id': conversation.id, 'other_user': other}


async def list_conversations(current_user_id: Optional[int]) -> List[dict]:
    if current_user_id is None:
        return []
    async with models.AsyncSessionLocal() as session:
        if not await get_user(session, current_user_id):
            return []
        visible = await _visible_conversations(session, current_user_id)
        reads = await _last_read_times(session, current_user_id)
        users = await get_users(session, [c.other_participant(current_user_id) for c in visible])

        result = []
        for conversation in visible:
            other = resolve_other_participant(conversation, current_user_id, users)
            if not other:
                continue
            latest = await _latest_visible_message(session, conversation.id, current_user_id)
            last_message = None
            if latest:
                last_message = {
                    'content': latest.content,
                    'sender_id': latest.sender_id,
                    'creation_time': latest.creation_time,
                }
            unread = await _unread_count(session, conversation.id, current_user_id, reads.get(conversation.id, 0))
            result.append({
                'id': conversation.id,
                'creation_time': conversation.creation_time,
                'last_activity_time': conversation.last_activity_time,
                'other_user': other,
                'last_message': last_message,
                'unread_count': unread,
            })
        return result


async def delete_conversation(current_user_id: Optional[int], conversation_id: int) -> bool:
    """Hide a conversation for the caller. Returns False if it was already hidden."""
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            user = await _require_user(session, current_user_id)
            conversation = await _require_participant(session, conversation_id, user.id, 'delete')
            hidden = await deletion_ledger.hide(session, conversation.id, user.id)
    if hidden:
        logger.info({'msg': 'dm_conversation_deleted', 'conversation_id': conversation_id, 'user_id': current_user_id})
    return hidden


async def clear_inbox(current_user_id: Optional[int]) -> int:
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            user = await _require_user(session, current_user_id)
            count = await deletion_ledger.hide_all_for_user(session, user.id)
    logger.info({'msg': 'dm_inbox_cleared', 'user_id': current_user_id, 'deleted_count': count})
    return count


# messages

async def send_message(current_user_id: Optional[int], conversation_id: int, content: str,
                       parent_message_id: Optional[int] = None) -> dict:
    now = clock.now_ms()
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            # row lock serializes concurrent sends from one sender through the rate check
            sender = await _require_user(session, current_user_id, for_update=True)
            conversation = await _require_participant(session, conversation_id, sender.id, 'send in')
            validate_content(content)

            recipient_id = conversation.other_participant(sender.id)
            recipient = await get_user(session, recipient_id)
            if not recipient:
                raise RecipientNotFound('Recipient not found')
            if not inbox_enabled(recipient):
                DM_SEND_DENIED.labels('inbox_disabled').inc()
                raise InboxDisabled('This user has disabled their inbox and cannot receive messages')
            if await _is_blocked(session, recipient_id, sender.id):
                DM_SEND_DENIED.labels('blocked').inc()
                raise Forbidden('You have been blocked by this user')

            if parent_message_id is not None:
                parent = await session.get(Message, parent_message_id)
                if not parent:
                    raise NotFound('Parent message not found')
                if parent.conversation_id != conversation.id:
                    raise InvalidRequest('Parent message belongs to another conversation')

            decision = await rate_limiter.check_and_record(session, sender.id, recipient_id, now)
            if not decision.allowed:
                DM_SEND_DENIED.labels(decision.scope).inc()
                raise RateLimited(decision.scope, decision.reason)

            message = Message(
                conversation_id=conversation.id,
                sender_id=sender.id,
                content=content,
                parent_message_id=parent_message_id,
                creation_time=now,
            )
            session.add(message)
            await session.flush()

            await conversations.touch(session, conversation.id, message.id, now)
            # a new message brings the conversation back for the recipient only
            await deletion_ledger.unhide(session, conversation.id, recipient_id)
            result = _message_out(message, public_profile(sender))

    DM_MESSAGES_SENT.inc()
    logger.info({'msg': 'dm_sent', 'conversation_id': conversation_id, 'message_id': result['id'],
                 'sender_id': current_user_id})
    await create_alert(recipient_id, current_user_id, 'message')
    return result


async def list_messages(current_user_id: Optional[int], conversation_id: int,
                        page_size: int = PAGE_SIZE) -> List[dict]:
    """Latest ``page_size`` messages visible to the caller, oldest first."""
    page_size = max(1, min(page_size, MAX_PAGE_SIZE))
    async with models.AsyncSessionLocal() as session:
        conversation = await _participant_or_none(session, conversation_id, current_user_id)
        if not conversation:
            return []
        res = await session.execute(
            select(Message)
            .where(Message.conversation_id == conversation.id, deletion_ledger.not_hidden_for(current_user_id))
            .order_by(Message.creation_time.desc(), Message.id.desc())
            .limit(page_size)
        )
        messages = list(res.scalars().all())
        users = await get_users(session, [m.sender_id for m in messages])
        result = []
        for message in reversed(messages):
            sender = resolve_sender(message, users)
            if sender:
                result.append(_message_out(message, sender))
        return result


async def delete_message(current_user_id: Optional[int], message_id: int) -> bool:
    """Hide a message for its sender. Permanent; returns False if already hidden."""
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            user = await _require_user(session, current_user_id)
            message = await session.get(Message, message_id)
            if not message:
                raise NotFound('Message not found')
            if message.sender_id != user.id:
                raise Forbidden('You can only delete your own messages')
            return await deletion_ledger.hide_message(session, message.id, user.id)


# read receipts

async def mark_read(current_user_id: Optional[int], conversation_id: int):
    now = clock.now_ms()
    if current_user_id is None:
        return
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            if not await get_user(session, current_user_id):
                return
            await _require_participant(session, conversation_id, current_user_id)
            await _upsert_read(session, conversation_id, current_user_id, now)


async def mark_all_read(current_user_id: Optional[int]):
    now = clock.now_ms()
    if current_user_id is None:
        return
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            if not await get_user(session, current_user_id):
                return
            for conversation in await _visible_conversations(session, current_user_id):
                await _upsert_read(session, conversation.id, current_user_id, now)


async def has_unread_messages(current_user_id: Optional[int]) -> bool:
    if current_user_id is None:
        return False
    async with models.AsyncSessionLocal() as session:
        if not await get_user(session, current_user_id):
            return False
        reads = await _last_read_times(session, current_user_id)
        for conversation in await _visible_conversations(session, current_user_id):
            if await _unread_count(session, conversation.id, current_user_id, reads.get(conversation.id, 0)):
                return True
        return False


# moderation

async def report(current_user_id: Optional[int], reported_user_id: int, conversation_id: int,
                 reason: str, message_id: Optional[int] = None) -> int:
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            user = await _require_user(session, current_user_id)
            if not reason or not reason.strip():
                raise InvalidRequest('Reason cannot be empty')
            if reported_user_id == user.id:
                raise InvalidRequest('You cannot report yourself')
            if not await get_user(session, reported_user_id):
                raise NotFound('Reported user not found')
            if not await conversations.get(session, conversation_id):
                raise NotFound('Conversation not found')
            if message_id is not None:
                message = await session.get(Message, message_id)
                if not message:
                    raise NotFound('Message not found')
                if message.conversation_id != conversation_id:
                    raise InvalidRequest('Message belongs to another conversation')
            row = DMReport(
                reporter_id=user.id,
                reported_user_id=reported_user_id,
                conversation_id=conversation_id,
                message_id=message_id,
                reason=reason,
                status='pending',
            )
            session.add(row)
            await session.flush()
            report_id = row.id
    logger.info({'msg': 'dm_reported', 'report_id': report_id, 'reporter_id': current_user_id,
                 'reported_user_id': reported_user_id})
    await publish_report({
        'id': report_id,
        'reporter_id': current_user_id,
        'reported_user_id': reported_user_id,
        'conversation_id': conversation_id,
        'message_id': message_id,
        'reason': reason,
        'status': 'pending',
    })
    return report_id


# blocking

async def block_user(current_user_id: Optional[int], blocked_user_id: int):
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            user = await _require_user(session, current_user_id)
            if blocked_user_id == user.id:
                raise InvalidRequest('You cannot block yourself')
            if not await get_user(session, blocked_user_id):
                raise NotFound('User not found')
            if await _is_blocked(session, user.id, blocked_user_id):
                raise Conflict('User is already blocked')
            session.add(BlockedUser(blocker_id=user.id, blocked_user_id=blocked_user_id))
    logger.info({'msg': 'dm_user_blocked', 'blocker_id': current_user_id, 'blocked_user_id': blocked_user_id})


async def unblock_user(current_user_id: Optional[int], blocked_user_id: int):
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            user = await _require_user(session, current_user_id)
            res = await session.execute(
                select(BlockedUser).where(BlockedUser.blocker_id == user.id,
                                          BlockedUser.blocked_user_id == blocked_user_id)
            )
            row = res.scalars().first()
            if not row:
                raise Conflict('User is not blocked')
            await session.delete(row)


async def is_user_blocked(current_user_id: Optional[int], user_id: int) -> bool:
    if current_user_id is None:
        return False
    async with models.AsyncSessionLocal() as session:
        return await _is_blocked(session, current_user_id, user_id)


# reactions

async def _message_for_participant(session: AsyncSession, message_id: int, user_id: int) -> Message:
    message = await session.get(Message, message_id)
    if not message:
        raise NotFound('Message not found')
    await _require_participant(session, message.conversation_id, user_id, 'react in')
    return message


async def react(current_user_id: Optional[int], message_id: int, emoji: str) -> int:
    """Add the caller's reaction to a message, replacing any previous one."""
    if emoji not in ALLOWED_EMOJIS:
        raise InvalidRequest('Unsupported reaction')
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            user = await _require_user(session, current_user_id)
            message = await _message_for_participant(session, message_id, user.id)
            res = await session.execute(
                select(Reaction).where(Reaction.user_id == user.id, Reaction.message_id == message.id)
            )
            reaction = res.scalars().first()
            if reaction:
                reaction.emoji = emoji
            else:
                reaction = Reaction(message_id=message.id, user_id=user.id, emoji=emoji)
                session.add(reaction)
            await session.flush()
            return reaction.id


async def unreact(current_user_id: Optional[int], message_id: int):
    async with models.AsyncSessionLocal() as session:
        async with session.begin():
            user = await _require_user(session, current_user_id)
            res = await session.execute(
                select(Reaction).where(Reaction.user_id == user.id, Reaction.message_id == message_id)
            )
            reaction = res.scalars().first()
            if reaction:
                await session.delete(reaction)


async def list_reactions(current_user_id: Optional[int], message_id: int) -> List[dict]:
    """Reactions on a message grouped by emoji, in order of first use."""
    async with models.AsyncSessionLocal() as session:
        if current_user_id is None:
            return []
        message = await session.get(Message, message_id)
        if not message or not await _participant_or_none(session, message.conversation_id, current_user_id):
            return []
        res = await session.execute(
            select(Reaction).where(Reaction.message_id == message_id).order_by(Reaction.id)
        )
        reactions = res.scalars().all()
        users = await get_users(session, [r.user_id for r in reactions])
        groups = {}
        for reaction in reactions:
            user = users.get(reaction.user_id)
            if not user:
                continue
            group = groups.setdefault(reaction.emoji, {'emoji': reaction.emoji, 'count': 0, 'users': []})
            group['users'].append({'user_id': user.id, 'name': user.name})
            group['count'] += 1
        return list(groups.values())
