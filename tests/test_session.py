"""Tests for session handling and view preferences."""

import httpx
import pytest

from client.exceptions import ForbiddenError, NotAuthenticatedError, ValidationError
from client.preferences import ViewPreference
from client.session import AUTH_ME_KEY


def me_handler(user, calls=None):
    def handler(request):
        if calls is not None:
            calls.append((request.method, request.url.path, request.headers.get('cookie')))
        if request.url.path == '/api/auth/logout':
            return httpx.Response(200, json={'success': True})
        return httpx.Response(200, json={'user': user})
    return handler


ALICE = {'id': 'u1', 'steamId64': '76561198000000001', 'username': 'alice', 'isAdmin': False}


@pytest.mark.asyncio
async def test_login_stores_cookie_and_fetches_user(make_client, temp_config):
    calls = []
    client = make_client(me_handler(ALICE, calls))

    client.session.login('sess-1')
    user = await client.session.require_user()

    assert user.username == 'alice'
    assert temp_config.get_session_cookie() == 'sess-1'
    assert 'session=sess-1' in calls[0][2]


@pytest.mark.asyncio
async def test_current_user_is_cached(make_client):
    calls = []
    client = make_client(me_handler(ALICE, calls))

    await client.session.current_user()
    await client.session.current_user()

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_require_user_when_signed_out(make_client):
    client = make_client(me_handler(None))
    with pytest.raises(NotAuthenticatedError):
        await client.session.require_user()


@pytest.mark.asyncio
async def test_require_admin_rejects_regular_user(make_client):
    client = make_client(me_handler(ALICE))
    with pytest.raises(ForbiddenError):
        await client.session.require_admin()


@pytest.mark.asyncio
async def test_logout_forgets_cookie_and_user(make_client, temp_config):
    calls = []
    client = make_client(me_handler(ALICE, calls))
    client.session.login('sess-1')
    await client.session.current_user()

    await client.session.logout()

    assert ('POST', '/api/auth/logout') in [(m, p) for m, p, _ in calls]
    assert temp_config.get_session_cookie() is None
    assert client.cache.get(AUTH_ME_KEY) is None


def test_view_preference_defaults_and_persists(temp_config):
    preference = ViewPreference(temp_config)
    assert preference.mode == 'list'
    assert not preference.is_grid

    assert preference.toggle() == 'grid'
    assert ViewPreference(temp_config).is_grid

    preference.set_mode('list')
    assert temp_config.get('view_mode') == 'list'


def test_view_preference_rejects_unknown_mode(temp_config):
    preference = ViewPreference(temp_config)
    with pytest.raises(ValidationError):
        preference.set_mode('table')

    temp_config.set('view_mode', 'table')
    assert preference.mode == 'list'
