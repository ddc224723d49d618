"""Tests for the admin directory and settings editor."""

import asyncio
import json

import httpx
import pytest

from client.admin import DEFAULT_SORT, SORTABLE_COLUMNS, USER_FILTERS, SortState, next_sort
from client.exceptions import TransportError, ValidationError
from client.schemas import AdminUser

from conftest import error_response, make_admin_user, make_settings


def users_page(users, page=1, total_pages=1):
    return {'users': users, 'count': len(users), 'page': page, 'limit': 20, 'totalPages': total_pages}


class FakeAdminServer:
    def __init__(self):
        self.user_requests = []
        self.mutations = []
        self.settings = make_settings()
        self.users = [make_admin_user('u1', 'alice', isAdmin=True), make_admin_user('u2', 'bob')]
        self.total_pages = 1
        self.page_users = None

    def __call__(self, request):
        path = request.url.path
        if request.method == 'GET' and path == '/api/admin/users':
            self.user_requests.append(dict(request.url.params))
            users = self.page_users if self.page_users is not None else self.users
            page = int(request.url.params.get('page', 1))
            return httpx.Response(200, json=users_page(users, page=page, total_pages=self.total_pages))
        if request.method == 'GET' and path == '/api/admin/settings':
            return httpx.Response(200, json={'settings': self.settings})

        body = json.loads(request.content) if request.content else None
        self.mutations.append((request.method, path, body))
        if request.method == 'PUT' and path == '/api/admin/settings':
            self.settings = body
            return httpx.Response(200, json={'settings': body})
        if request.method == 'PATCH':
            user_id = path.rsplit('/', 1)[-1]
            user = next(u for u in self.users if u['id'] == user_id)
            user.update(body)
            return httpx.Response(200, json={'user': user})
        if request.method == 'DELETE' and path.startswith('/api/admin/users/'):
            return httpx.Response(200, json={'success': True, 'deletedSoundsCount': 3})
        if request.method == 'DELETE' and path.startswith('/api/admin/sounds/'):
            return httpx.Response(200, json={'success': True})
        return error_response(404, 'NOT_FOUND', 'Not found')


def test_sort_cycle_ascending_descending_none():
    first = next_sort(None, 'username')
    assert first == SortState('username', descending=False)
    second = next_sort(first, 'username')
    assert second == SortState('username', descending=True)
    assert next_sort(second, 'username') is None


def test_sorting_a_different_column_starts_ascending():
    assert next_sort(DEFAULT_SORT, 'soundCount') == SortState('soundCount', descending=False)


def test_default_sort_is_newest_first(make_client):
    client = make_client(FakeAdminServer())
    key = client.admin.query_key()
    assert (key.sort_by, key.sort_order, key.filter) == ('createdAt', 'desc', 'all')


@pytest.mark.asyncio
async def test_filter_and_sort_reset_page_and_reach_the_server(make_client):
    server = FakeAdminServer()
    client = make_client(server)

    client.admin.set_page(3)
    client.admin.set_filter('banned')
    assert client.admin.page == 1

    client.admin.set_page(2)
    client.admin.toggle_sort('username')
    assert client.admin.page == 1

    await client.admin.refresh()

    assert server.user_requests[-1] == {
        'page': '1', 'limit': '20', 'sortBy': 'username', 'sortOrder': 'asc', 'filter': 'banned',
    }


def test_unknown_filter_and_sort_column_are_rejected(make_client):
    client = make_client(FakeAdminServer())
    with pytest.raises(ValidationError):
        client.admin.set_filter('everyone')
    with pytest.raises(ValidationError):
        client.admin.toggle_sort('email')


@pytest.mark.asyncio
async def test_search_is_debounced(make_client, clock):
    server = FakeAdminServer()
    client = make_client(server)

    client.admin.set_search('bo')
    clock.advance(0.1)
    client.admin.set_search('bob')
    clock.advance(0.5)
    await client.admin.refresh()

    assert len(server.user_requests) == 1
    assert server.user_requests[0]['q'] == 'bob'


@pytest.mark.asyncio
async def test_ban_invalidates_directory(make_client):
    server = FakeAdminServer()
    client = make_client(server)
    client.admin.current_user_id = 'u1'
    await client.admin.refresh()
    bob = client.admin.find('u2')

    updated = await client.admin.ban(bob)

    assert updated.is_banned is True
    assert server.mutations == [('PATCH', '/api/admin/users/u2', {'isBanned': True})]
    assert not client.cache.is_fresh(client.admin.query_key())


@pytest.mark.asyncio
async def test_toggle_admin_flips_current_flag(make_client):
    server = FakeAdminServer()
    client = make_client(server)
    await client.admin.refresh()

    await client.admin.toggle_admin(client.admin.find('u2'))

    assert server.mutations[-1][2] == {'isAdmin': True}


@pytest.mark.asyncio
async def test_actions_on_own_account_are_refused(make_client):
    server = FakeAdminServer()
    client = make_client(server)
    client.admin.current_user_id = 'u1'
    await client.admin.refresh()
    me = client.admin.find('u1')

    with pytest.raises(ValidationError):
        await client.admin.ban(me)
    with pytest.raises(ValidationError):
        await client.admin.delete_user(me)
    assert server.mutations == []


@pytest.mark.asyncio
async def test_delete_last_user_on_page_steps_back(make_client):
    server = FakeAdminServer()
    server.total_pages = 3
    server.page_users = [make_admin_user('u9', 'zed')]
    server.users.append(server.page_users[0])
    client = make_client(server)
    client.admin.set_page(3)
    await client.admin.refresh()

    result = await client.admin.delete_user(client.admin.find('u9'))

    assert result.deleted_sounds_count == 3
    assert client.admin.page == 2


@pytest.mark.asyncio
async def test_admin_delete_sound_invalidates_both_kinds(make_client):
    server = FakeAdminServer()
    client = make_client(server)
    await client.admin.refresh()

    async def listing():
        return 'cached'
    await client.cache.fetch(client.library.query_key(), listing)

    assert await client.admin.delete_sound('s7') is True
    assert not client.cache.is_fresh(client.library.query_key())
    assert not client.cache.is_fresh(client.admin.query_key())


@pytest.mark.asyncio
async def test_failed_action_records_error(make_client):
    def handler(request):
        if request.method == 'GET':
            return httpx.Response(200, json=users_page([make_admin_user()]))
        return error_response(403, 'FORBIDDEN', 'Admins only')

    client = make_client(handler)
    await client.admin.refresh()

    with pytest.raises(TransportError):
        await client.admin.unban(client.admin.find('u2'))
    assert client.admin.error.code == 'FORBIDDEN'


@pytest.mark.asyncio
async def test_settings_toggle_format_and_save(make_client):
    server = FakeAdminServer()
    client = make_client(server)

    await client.settings.load()
    assert not client.settings.is_dirty

    assert client.settings.toggle_format('audio/wav') is True
    client.settings.set_value('cooldown_seconds', '45')
    assert client.settings.is_dirty

    saved = await client.settings.save()

    assert saved.allowed_formats == ['audio/ogg', 'audio/mpeg']
    assert saved.cooldown_seconds == 45
    assert server.mutations[-1][0] == 'PUT'
    assert server.mutations[-1][2]['allowedFormats'] == ['audio/ogg', 'audio/mpeg']
    assert not client.settings.is_dirty


@pytest.mark.asyncio
async def test_removing_last_format_is_a_no_op(make_client):
    server = FakeAdminServer()
    server.settings = make_settings(allowedFormats=['audio/ogg'])
    client = make_client(server)
    await client.settings.load()

    assert client.settings.toggle_format('audio/ogg') is False
    assert client.settings.draft.allowed_formats == ['audio/ogg']


@pytest.mark.asyncio
async def test_empty_allowed_formats_rejected_before_request(make_client):
    server = FakeAdminServer()
    client = make_client(server)
    await client.settings.load()
    client.settings.draft.allowed_formats = []

    with pytest.raises(ValidationError, match='Invalid settings'):
        await client.settings.save()
    assert server.mutations == []


@pytest.mark.asyncio
async def test_out_of_range_limit_rejected_before_request(make_client):
    server = FakeAdminServer()
    client = make_client(server)
    await client.settings.load()
    client.settings.set_value('max_sounds_per_user', 0)

    with pytest.raises(ValidationError, match='Invalid settings'):
        await client.settings.save()
    assert server.mutations == []


@pytest.mark.asyncio
async def test_settings_editor_input_checks(make_client):
    client = make_client(FakeAdminServer())
    with pytest.raises(ValidationError):
        client.settings.toggle_format('audio/ogg')

    await client.settings.load()
    with pytest.raises(ValidationError):
        client.settings.set_value('unknown', 1)
    with pytest.raises(ValidationError):
        client.settings.set_value('max_duration', 'ten')
    with pytest.raises(ValidationError):
        client.settings.toggle_format('audio/flac')

    assert client.settings.set_max_file_size_mb(1.5) == 1572864
    client.settings.reset()
    assert client.settings.draft.max_file_size == 1048576


def test_admin_user_schema_parses_camel_case():
    user = AdminUser.model_validate(make_admin_user(isBanned=True, soundCount=7))
    assert user.steam_id64 == '76561198000000002'
    assert user.is_banned is True
    assert user.sound_count == 7


@pytest.mark.asyncio
async def test_outdated_fetch_does_not_replace_current_page(make_client):
    """A directory page that resolves after the filter changed is not shown."""
    server = FakeAdminServer()
    release = asyncio.Event()

    async def handler(request):
        if request.url.params.get('filter') == 'all':
            await release.wait()
        if request.url.params.get('filter') == 'banned':
            server.page_users = [make_admin_user('u3', 'carol', isBanned=True)]
        return server(request)

    client = make_client(handler)
    outdated = asyncio.ensure_future(client.admin.refresh())
    await asyncio.sleep(0.01)

    client.admin.set_filter('banned')
    current = await client.admin.refresh()
    assert [u.id for u in current.users] == ['u3']

    release.set()
    shown = await outdated

    assert shown is current
    assert client.admin.users_page is current
    assert client.admin.error is None


def test_filters_and_sort_columns_follow_schema_literals():
    assert USER_FILTERS == ('all', 'admins', 'banned')
    assert SORTABLE_COLUMNS == ('username', 'createdAt', 'soundCount')
