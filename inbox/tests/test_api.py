import pytest

from inbox.auth import create_access_token


def auth_headers(user_id):
    return {'Authorization': f"Bearer {create_access_token({'id': user_id})}"}


async def open_conversation(client, user_id, other_id):
    r = await client.post('/api/conversations/', json={'other_user_id': other_id}, headers=auth_headers(user_id))
    assert r.status_code == 200, r.text
    return r.json()['conversation_id']


@pytest.mark.asyncio
async def test_healthz(client):
    r = await client.get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok'}


@pytest.mark.asyncio
async def test_strict_routes_require_auth(client, make_user):
    r = await client.post('/api/inbox/toggle')
    assert r.status_code == 401
    assert r.json()['code'] == 'unauthenticated'

    r = await client.post('/api/conversations/1/messages', json={'content': 'hi'},
                          headers={'Authorization': 'Bearer not-a-token'})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_tolerant_routes_without_auth(client):
    r = await client.get('/api/conversations/')
    assert r.status_code == 200
    assert r.json() == []
    r = await client.get('/api/conversations/1/messages')
    assert r.json() == []
    r = await client.post('/api/conversations/1/read')
    assert r.status_code == 200
    r = await client.get('/api/inbox/unread')
    assert r.json() == {'has_unread': False}


@pytest.mark.asyncio
async def test_conversation_flow(client, make_user, fake_clock):
    alice = await make_user('Alice')
    bob = await make_user('Bob')
    conv = await open_conversation(client, alice, bob)
    assert await open_conversation(client, bob, alice) == conv

    r = await client.post(f'/api/conversations/{conv}/messages', json={'content': 'hello'},
                          headers=auth_headers(alice))
    assert r.status_code == 200, r.text
    message = r.json()
    assert message['sender']['username'] == 'alice'

    r = await client.get('/api/conversations/', headers=auth_headers(bob))
    listed = r.json()
    assert listed[0]['unread_count'] == 1
    assert listed[0]['other_user']['inbox_enabled'] is True

    r = await client.post(f'/api/conversations/{conv}/read', headers=auth_headers(bob))
    assert r.status_code == 200
    r = await client.get('/api/inbox/unread', headers=auth_headers(bob))
    assert r.json() == {'has_unread': False}

    r = await client.get(f'/api/conversations/{conv}/messages', params={'page_size': 10}, headers=auth_headers(bob))
    assert [m['content'] for m in r.json()] == ['hello']

    r = await client.delete(f"/api/messages/{message['id']}", headers=auth_headers(bob))
    assert r.status_code == 403
    assert r.json()['code'] == 'forbidden'

    r = await client.delete(f'/api/conversations/{conv}', headers=auth_headers(bob))
    assert r.json() == {'ok': True, 'message': None}
    r = await client.delete(f'/api/conversations/{conv}', headers=auth_headers(bob))
    assert r.json()['message'] == 'already deleted'
    r = await client.get(f'/api/conversations/{conv}', headers=auth_headers(bob))
    assert r.json() is None


@pytest.mark.asyncio
async def test_error_codes(client, make_user, fake_clock):
    alice = await make_user('Alice')
    bob = await make_user('Bob')
    conv = await open_conversation(client, alice, bob)

    r = await client.post(f'/api/conversations/{conv}/messages', json={'content': 'x' * 2001},
                          headers=auth_headers(alice))
    assert r.status_code == 400
    assert r.json()['code'] == 'invalid_content'

    for i in range(10):
        r = await client.post(f'/api/conversations/{conv}/messages', json={'content': f'm{i}'},
                              headers=auth_headers(alice))
        assert r.status_code == 200
    r = await client.post(f'/api/conversations/{conv}/messages', json={'content': 'spam'},
                          headers=auth_headers(alice))
    assert r.status_code == 429
    assert r.json()['code'] == 'rate_limited'
    assert r.json()['scope'] == 'hourly'

    r = await client.post('/api/inbox/toggle', headers=auth_headers(bob))
    assert r.json() == {'inbox_enabled': False}
    r = await client.get(f'/api/inbox/users/{bob}/enabled')
    assert r.json() == {'inbox_enabled': False}
    r = await client.post(f'/api/conversations/{conv}/messages', json={'content': 'hi'},
                          headers=auth_headers(alice))
    assert r.status_code == 403
    assert r.json()['code'] == 'inbox_disabled'

    r = await client.post('/api/conversations/', json={'other_user_id': 9999}, headers=auth_headers(alice))
    assert r.status_code == 404
    assert r.json()['code'] == 'recipient_not_found'


@pytest.mark.asyncio
async def test_clear_inbox_route(client, make_user, fake_clock):
    alice = await make_user('Alice')
    bob = await make_user('Bob')
    await open_conversation(client, alice, bob)
    r = await client.post('/api/inbox/clear', headers=auth_headers(alice))
    assert r.json() == {'deleted_count': 1}
    r = await client.post('/api/inbox/clear', headers=auth_headers(alice))
    assert r.json() == {'deleted_count': 0}


@pytest.mark.asyncio
async def test_report_block_and_reactions_routes(client, make_user, fake_clock):
    alice = await make_user('Alice')
    bob = await make_user('Bob')
    conv = await open_conversation(client, alice, bob)
    r = await client.post(f'/api/conversations/{conv}/messages', json={'content': 'hey'},
                          headers=auth_headers(bob))
    message_id = r.json()['id']

    r = await client.put(f'/api/messages/{message_id}/reactions', json={'emoji': '❤️'}, headers=auth_headers(alice))
    assert r.status_code == 200
    r = await client.get(f'/api/messages/{message_id}/reactions', headers=auth_headers(bob))
    assert r.json() == [{'emoji': '❤️', 'count': 1, 'users': [{'user_id': alice, 'name': 'Alice'}]}]

    r = await client.post('/api/reports/', json={
        'reported_user_id': bob,
        'conversation_id': conv,
        'message_id': message_id,
        'reason': 'harassment',
    }, headers=auth_headers(alice))
    assert r.status_code == 200
    assert r.json()['status'] == 'pending'

    r = await client.post(f'/api/blocks/{bob}', headers=auth_headers(alice))
    assert r.status_code == 200
    r = await client.get(f'/api/blocks/{bob}', headers=auth_headers(alice))
    assert r.json() == {'blocked': True}
    r = await client.post(f'/api/blocks/{bob}', headers=auth_headers(alice))
    assert r.status_code == 409
    r = await client.post(f'/api/conversations/{conv}/messages', json={'content': 'still?'},
                          headers=auth_headers(bob))
    assert r.status_code == 403
