import pytest

from inbox import conversations, deletion_ledger
from inbox.models.messages import Message


@pytest.mark.asyncio
async def test_get_or_create_is_order_independent(db, make_user):
    alice = await make_user('Alice')
    bob = await make_user('Bob')
    async with db() as session:
        async with session.begin():
            first, created = await conversations.get_or_create(session, bob, alice, 1000)
            second, created_again = await conversations.get_or_create(session, alice, bob, 2000)
    assert created and not created_again
    assert first.id == second.id
    assert (first.user_low_id, first.user_high_id) == (min(alice, bob), max(alice, bob))
    assert first.last_activity_time == 1000


@pytest.mark.asyncio
async def test_touch_and_list_for_user(db, make_user):
    alice = await make_user('Alice')
    bob = await make_user('Bob')
    carol = await make_user('Carol')
    async with db() as session:
        async with session.begin():
            ab, _ = await conversations.get_or_create(session, alice, bob, 1000)
            ac, _ = await conversations.get_or_create(session, carol, alice, 2000)
            await conversations.touch(session, ab.id, 77, 3000)
    async with db() as session:
        listed = await conversations.list_for_user(session, alice)
        assert [c.id for c in listed] == [ab.id, ac.id]
        assert listed[0].last_message_id == 77
        assert [c.id for c in await conversations.list_for_user(session, carol)] == [ac.id]
        assert listed[1].other_participant(alice) == carol


@pytest.mark.asyncio
async def test_hide_unhide_keeps_message_hides(db, make_user):
    alice = await make_user('Alice')
    bob = await make_user('Bob')
    async with db() as session:
        async with session.begin():
            conv, _ = await conversations.get_or_create(session, alice, bob, 1000)
            session.add(Message(conversation_id=conv.id, sender_id=alice, content='a', creation_time=1001))
            session.add(Message(conversation_id=conv.id, sender_id=bob, content='b', creation_time=1002))
            await session.flush()
            conv_id = conv.id

    async with db() as session:
        async with session.begin():
            assert await deletion_ledger.hide(session, conv_id, bob) is True
            assert await deletion_ledger.hide(session, conv_id, bob) is False
            assert await deletion_ledger.is_hidden(session, conv_id, bob)
            assert not await deletion_ledger.is_hidden(session, conv_id, alice)

    async with db() as session:
        async with session.begin():
            assert await deletion_ledger.unhide(session, conv_id, bob) is True
            assert await deletion_ledger.unhide(session, conv_id, bob) is False
            assert not await deletion_ledger.is_hidden(session, conv_id, bob)

    from sqlalchemy import select
    async with db() as session:
        visible_to_bob = await session.execute(
            select(Message.id).where(deletion_ledger.not_hidden_for(bob))
        )
        visible_to_alice = await session.execute(
            select(Message.id).where(deletion_ledger.not_hidden_for(alice))
        )
        assert visible_to_bob.scalars().all() == []
        assert len(visible_to_alice.scalars().all()) == 2


@pytest.mark.asyncio
async def test_hide_all_for_user_counts_new_hides(db, make_user):
    alice = await make_user('Alice')
    bob = await make_user('Bob')
    carol = await make_user('Carol')
    async with db() as session:
        async with session.begin():
            ab, _ = await conversations.get_or_create(session, alice, bob, 1000)
            await conversations.get_or_create(session, alice, carol, 1000)
            await deletion_ledger.hide(session, ab.id, alice)
    async with db() as session:
        async with session.begin():
            assert await deletion_ledger.hide_all_for_user(session, alice) == 1
            assert await deletion_ledger.hide_all_for_user(session, alice) == 0
            assert await deletion_ledger.hidden_conversation_ids(session, bob) == set()
