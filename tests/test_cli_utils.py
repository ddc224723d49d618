"""Tests for CLI formatting helpers."""

from cli.utils import (
    format_date,
    format_duration,
    format_file_size,
    format_listing,
    format_pagination,
    format_settings,
    page_numbers,
    quota_level,
    quota_percentage,
)
from client.schemas import Settings, SoundListing

from conftest import make_listing, make_settings, make_sound


def test_format_file_size():
    assert format_file_size(512) == "512 B"
    assert format_file_size(1536) == "1.50 KiB"
    assert format_file_size(1048576) == "1.00 MiB"


def test_format_duration_is_minutes_and_padded_seconds():
    assert format_duration(0) == "0:00"
    assert format_duration(3.4) == "0:03"
    assert format_duration(65) == "1:05"
    assert format_duration(600.9) == "10:00"


def test_format_date():
    assert format_date('2024-05-01T10:00:00.000Z') == '2024-05-01'
    assert format_date('yesterday') == 'yesterday'


def test_quota_percentage_and_levels():
    assert quota_percentage(5, 25) == 20
    assert quota_percentage(30, 25) == 100
    assert quota_level(59) == 'ok'
    assert quota_level(60) == 'warning'
    assert quota_level(84) == 'warning'
    assert quota_level(85) == 'critical'


def test_page_numbers_lists_small_ranges_in_full():
    assert page_numbers(1, 1) == [1]
    assert page_numbers(3, 5) == [1, 2, 3, 4, 5]


def test_page_numbers_windows_large_ranges():
    assert page_numbers(1, 10) == [1, 2, '...', 10]
    assert page_numbers(5, 10) == [1, '...', 4, 5, 6, '...', 10]
    assert page_numbers(10, 10) == [1, '...', 9, 10]
    assert page_numbers(3, 10) == [1, 2, 3, 4, '...', 10]


def test_format_pagination_marks_current_page():
    assert format_pagination(2, 3) == "Pages: 1 [2] 3"


def test_format_listing_list_mode():
    listing = SoundListing.model_validate(make_listing([make_sound('s1', 'Air horn')], max_sounds=25))
    output = format_listing(listing, 'list')

    assert 'Sounds: 1 / 25' in output
    assert 'Air horn (ID: s1)' in output
    assert 'Duration: 0:03' in output
    assert 'Pages:' not in output


def test_format_listing_grid_mode_and_pagination():
    sounds = [make_sound(f's{i}', f'Clip {i}') for i in range(6)]
    listing = SoundListing.model_validate(make_listing(sounds, page=2, total_pages=3, total_count=46))
    output = format_listing(listing, 'grid')

    assert 'Clip 0 (0:03)' in output
    assert '(ID:' not in output
    assert 'Pages: 1 [2] 3' in output


def test_format_listing_empty_states():
    empty = SoundListing.model_validate(make_listing([]))
    assert 'No sounds yet' in format_listing(empty, 'list')
    assert 'No sounds found matching: horn' in format_listing(empty, 'list', search='horn')


def test_format_listing_reports_quota_reached():
    sounds = [make_sound(f's{i}') for i in range(20)]
    listing = SoundListing.model_validate(make_listing(sounds, total_count=25, max_sounds=25))
    assert 'quota reached' in format_listing(listing, 'list')


def test_format_settings():
    settings = Settings.model_validate(make_settings())
    output = format_settings(settings, dirty=True)

    assert 'unsaved changes' in output
    assert 'max_file_size:       1048576 (1.00 MiB)' in output
    assert 'audio/ogg, audio/mpeg, audio/wav' in output
