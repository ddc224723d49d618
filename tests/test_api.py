"""Tests for the typed endpoint helpers."""

import json

import httpx
import pytest

from client.api import SoundboardApi
from client.exceptions import NetworkError
from client.schemas import Settings
from client.transport import Transport

from conftest import make_admin_user, make_listing, make_settings, make_sound


def make_api(config, handler):
    return SoundboardApi(Transport(config, transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_get_sounds_sends_only_set_parameters(temp_config):
    """Search text goes out as 'q'; unset parameters are omitted."""
    seen = []

    def handler(request):
        seen.append(dict(request.url.params))
        return httpx.Response(200, json=make_listing([make_sound()]))

    api = make_api(temp_config, handler)
    listing = await api.get_sounds(page=1, limit=20, search='horn')
    await api.get_sounds(page=2, limit=20, search=None)

    assert seen[0] == {'page': '1', 'limit': '20', 'q': 'horn'}
    assert seen[1] == {'page': '2', 'limit': '20'}
    assert listing.sounds[0].name == 'Air horn'
    assert listing.total_count == 1
    assert listing.max_sounds == 25


@pytest.mark.asyncio
async def test_get_me_returns_none_when_signed_out(temp_config):
    api = make_api(temp_config, lambda request: httpx.Response(200, json={'user': None}))
    assert await api.get_me() is None


@pytest.mark.asyncio
async def test_get_me_parses_user(temp_config):
    def handler(request):
        return httpx.Response(200, json={'user': {
            'id': 'u1', 'steamId64': '76561198000000001', 'username': 'alice',
            'avatarUrl': None, 'isAdmin': True,
        }})

    api = make_api(temp_config, handler)
    user = await api.get_me()

    assert user.username == 'alice'
    assert user.steam_id64 == '76561198000000001'
    assert user.is_admin is True


@pytest.mark.asyncio
async def test_rename_sound_patches_name(temp_config):
    seen = {}

    def handler(request):
        seen['method'] = request.method
        seen['path'] = request.url.path
        seen['body'] = json.loads(request.content)
        return httpx.Response(200, json={'sound': make_sound(name='New name')})

    api = make_api(temp_config, handler)
    sound = await api.rename_sound('s1', 'New name')

    assert seen == {'method': 'PATCH', 'path': '/api/sounds/s1', 'body': {'name': 'New name'}}
    assert sound.name == 'New name'


@pytest.mark.asyncio
async def test_admin_get_users_maps_sort_and_filter_parameters(temp_config):
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json={
            'users': [make_admin_user()], 'count': 1, 'page': 1, 'limit': 20, 'totalPages': 1,
        })

    api = make_api(temp_config, handler)
    users_page = await api.admin_get_users(
        page=1, limit=20, search='bob', sort_by='soundCount', sort_order='desc', filter='banned'
    )

    assert seen == {
        'page': '1', 'limit': '20', 'q': 'bob',
        'sortBy': 'soundCount', 'sortOrder': 'desc', 'filter': 'banned',
    }
    assert users_page.users[0].sound_count == 3


@pytest.mark.asyncio
async def test_admin_update_user_sends_camel_case_flags(temp_config):
    seen = {}

    def handler(request):
        seen['body'] = json.loads(request.content)
        return httpx.Response(200, json={'user': make_admin_user(isBanned=True)})

    api = make_api(temp_config, handler)
    user = await api.admin_update_user('u2', is_banned=True)

    assert seen['body'] == {'isBanned': True}
    assert user.is_banned is True


@pytest.mark.asyncio
async def test_admin_update_settings_puts_camel_case_record(temp_config):
    seen = {}

    def handler(request):
        seen['method'] = request.method
        seen['body'] = json.loads(request.content)
        return httpx.Response(200, json={'settings': seen['body']})

    api = make_api(temp_config, handler)
    settings = Settings.model_validate(make_settings(cooldownSeconds=60))
    updated = await api.admin_update_settings(settings)

    assert seen['method'] == 'PUT'
    assert seen['body'] == make_settings(cooldownSeconds=60)
    assert updated.cooldown_seconds == 60


@pytest.mark.asyncio
async def test_admin_delete_user_reports_deleted_sounds(temp_config):
    def handler(request):
        assert request.method == 'DELETE'
        return httpx.Response(200, json={'success': True, 'deletedSoundsCount': 4})

    api = make_api(temp_config, handler)
    result = await api.admin_delete_user('u2')

    assert result.success is True
    assert result.deleted_sounds_count == 4


@pytest.mark.asyncio
async def test_unexpected_response_shape_raises_network_error(temp_config):
    api = make_api(temp_config, lambda request: httpx.Response(200, json={'sound': {'id': 's1'}}))
    with pytest.raises(NetworkError, match='Invalid response'):
        await api.rename_sound('s1', 'x')


def test_stream_and_login_urls(temp_config):
    api = make_api(temp_config, lambda request: httpx.Response(200))
    assert api.sound_stream_url('s1') == 'http://soundboard.test/api/sounds/s1/stream'
    assert api.steam_login_url() == 'http://soundboard.test/api/auth/steam'
