"""Shared pytest fixtures for all tests."""

import httpx
import pytest

from client.app import SoundboardClient
from client.config import Config


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_sound(sound_id='s1', name='Air horn', **overrides):
    """Build a sound payload as returned by the API."""
    payload = {
        'id': sound_id,
        'name': name,
        'filename': f'{sound_id}.mp3',
        'duration': 3.4,
        'size': 48_000,
        'createdAt': '2024-05-01T10:00:00.000Z',
    }
    payload.update(overrides)
    return payload


def make_listing(sounds, page=1, total_pages=1, total_count=None, max_sounds=25, limit=20):
    """Build a sound listing payload as returned by the API."""
    return {
        'sounds': sounds,
        'count': len(sounds),
        'totalCount': len(sounds) if total_count is None else total_count,
        'page': page,
        'limit': limit,
        'totalPages': total_pages,
        'maxSounds': max_sounds,
    }


def make_admin_user(user_id='u2', username='bob', **overrides):
    """Build an admin directory user payload."""
    payload = {
        'id': user_id,
        'steamId64': '76561198000000002',
        'username': username,
        'avatarUrl': None,
        'isAdmin': False,
        'isBanned': False,
        'createdAt': '2024-01-01T00:00:00.000Z',
        'soundCount': 3,
    }
    payload.update(overrides)
    return payload


def make_settings(**overrides):
    payload = {
        'maxSoundsPerUser': 25,
        'maxFileSize': 1048576,
        'maxDuration': 10,
        'cooldownSeconds': 30,
        'allowedFormats': ['audio/ogg', 'audio/mpeg', 'audio/wav'],
    }
    payload.update(overrides)
    return payload


def error_response(status, code, message, retry_after=None, headers=None):
    """Build a structured error response."""
    error = {'code': code, 'message': message}
    if retry_after is not None:
        error['retryAfter'] = retry_after
    return httpx.Response(status, json={'error': error}, headers=headers)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .soundboard directory
    """
    config_dir = tmp_path / '.soundboard'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    config = Config(temp_config_dir / 'config.json')
    config.set('api_url', 'http://soundboard.test/api')
    return config


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_audio(tmp_path):
    """
    Create a small valid .mp3 file.

    Returns:
        Path to the sample file
    """
    file_path = tmp_path / 'Air Horn.mp3'
    file_path.write_bytes(b'ID3' + b'\x00' * 20_000)
    return file_path


@pytest.fixture
def oversized_audio(tmp_path):
    """An .mp3 one byte over the 1 MiB limit."""
    file_path = tmp_path / 'huge.mp3'
    file_path.write_bytes(b'\x00' * (1024 * 1024 + 1))
    return file_path


@pytest.fixture
def sample_file(tmp_path):
    """A text file with an unsupported extension."""
    file_path = tmp_path / 'notes.txt'
    file_path.write_text('Sample content for testing')
    return file_path


@pytest.fixture
def make_client(temp_config, clock):
    """
    Factory building a SoundboardClient backed by an httpx MockTransport.

    Args:
        temp_config: Temporary config fixture
        clock: Fake clock used for both the wall clock and the monotonic clock

    Returns:
        Function taking a request handler and returning the client
    """
    def factory(handler):
        return SoundboardClient(
            temp_config,
            transport=httpx.MockTransport(handler),
            wall_clock=clock,
            monotonic_clock=clock,
        )
    return factory
