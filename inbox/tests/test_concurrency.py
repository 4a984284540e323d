import asyncio

import pytest
from sqlalchemy import select, func

from inbox import service
from inbox.errors import InboxDisabled, RateLimited
from inbox.models.messages import Message
from inbox.models.rate_limits import RateLimitBucket, HOURLY_PER_RECIPIENT
from inbox.models.users import User


async def add_user(file_db, name):
    async with file_db() as session:
        user = User(name=name, username=name.lower())
        session.add(user)
        await session.commit()
        return user.id


async def message_count(file_db):
    async with file_db() as session:
        return (await session.execute(select(func.count(Message.id)))).scalar_one()


@pytest.mark.asyncio
async def test_concurrent_sends_share_last_hourly_slot(file_db, fake_clock):
    alice = await add_user(file_db, 'Alice')
    bob = await add_user(file_db, 'Bob')
    conv = await service.open_conversation(alice, bob)
    for i in range(9):
        await service.send_message(alice, conv, f'm{i}')

    results = await asyncio.gather(
        *[service.send_message(alice, conv, f'race {i}') for i in range(3)],
        return_exceptions=True,
    )

    sent = [r for r in results if isinstance(r, dict)]
    denied = [r for r in results if isinstance(r, RateLimited)]
    assert len(sent) == 1
    assert len(denied) == 2
    assert all(e.scope == 'hourly' for e in denied)
    assert await message_count(file_db) == 10
    async with file_db() as session:
        total = (await session.execute(
            select(func.sum(RateLimitBucket.message_count)).where(
                RateLimitBucket.user_id == alice,
                RateLimitBucket.limit_type == HOURLY_PER_RECIPIENT,
            )
        )).scalar_one()
    assert total == 10


@pytest.mark.asyncio
async def test_rejected_send_does_not_undo_concurrent_send(file_db, fake_clock):
    alice = await add_user(file_db, 'Alice')
    bob = await add_user(file_db, 'Bob')
    carol = await add_user(file_db, 'Carol')
    with_bob = await service.open_conversation(alice, bob)
    with_carol = await service.open_conversation(alice, carol)
    await service.toggle_inbox(carol)

    kept, dropped = await asyncio.gather(
        service.send_message(alice, with_bob, 'kept'),
        service.send_message(alice, with_carol, 'dropped'),
        return_exceptions=True,
    )

    assert isinstance(dropped, InboxDisabled)
    assert kept['content'] == 'kept'
    assert await message_count(file_db) == 1
    assert [m['content'] for m in await service.list_messages(bob, with_bob)] == ['kept']
    async with file_db() as session:
        res = await session.execute(select(RateLimitBucket.recipient_id).where(
            RateLimitBucket.limit_type == HOURLY_PER_RECIPIENT))
        assert res.scalars().all() == [bob]
