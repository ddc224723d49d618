"""Tests for SoundboardCompleter."""

import pytest

from prompt_toolkit.document import Document

from cli.completer import SoundboardCompleter
from cli.constants import COMMANDS


@pytest.fixture
def audio_dir(tmp_path):
    """
    Create a temporary directory with audio and non-audio files.

    Returns:
        Path to the temporary directory
    """
    (tmp_path / "horn.mp3").write_bytes(b"\x00")
    (tmp_path / "HELLO.WAV").write_bytes(b"\x00")
    (tmp_path / "drums.ogg").write_bytes(b"\x00")
    (tmp_path / "notes.txt").write_text("content")
    (tmp_path / "clips").mkdir()
    (tmp_path / "clips" / "boom.ogg").write_bytes(b"\x00")
    return tmp_path


@pytest.fixture
def completer(audio_dir):
    return SoundboardCompleter(base_dir=audio_dir)


def get_completions_list(completer, text):
    """Helper to get list of completion texts from completer."""
    doc = Document(text, len(text))
    return [c.text for c in completer.get_completions(doc, None)]


def get_completions_display(completer, text):
    """Helper to get list of completion display texts from completer."""
    doc = Document(text, len(text))
    return [c.display for c in completer.get_completions(doc, None)]


class TestCommandCompletion:
    """Tests for command name completion."""

    def test_empty_input_shows_all_commands(self, completer):
        """Empty input should suggest all commands."""
        completions = get_completions_list(completer, "")
        for cmd in COMMANDS:
            assert cmd in completions

    def test_partial_command_filters(self, completer):
        """Partial command should filter to matching commands."""
        completions = get_completions_list(completer, "user")
        assert "users" in completions
        assert "user-sort" in completions
        assert "upload" not in completions

    def test_command_completion_case_insensitive(self, completer):
        completions = get_completions_list(completer, "SUB")
        assert "submit" in completions


class TestFileCompletion:
    """Tests for audio file completion in the upload command."""

    def test_upload_shows_audio_files_and_directories(self, completer):
        completions = get_completions_list(completer, "upload ")
        assert "horn.mp3" in completions
        assert "HELLO.WAV" in completions
        assert "drums.ogg" in completions
        assert "clips/" in completions

    def test_filters_unsupported_extensions(self, completer):
        completions = get_completions_list(completer, "upload ")
        assert "notes.txt" not in completions

    def test_partial_name_filters_files(self, completer):
        completions = get_completions_list(completer, "upload h")
        assert sorted(completions) == ["HELLO.WAV", "horn.mp3"]

    def test_descends_into_directories(self, completer):
        completions = get_completions_list(completer, "upload clips/")
        assert completions == ["clips/boom.ogg"]

    def test_only_first_argument_is_a_path(self, completer):
        assert get_completions_list(completer, "upload horn.mp3 ") == []

    def test_other_commands_have_no_file_completion(self, completer):
        assert get_completions_list(completer, "delete ") == []

    def test_empty_directory_shows_message(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        displays = get_completions_display(SoundboardCompleter(base_dir=empty), "upload ")
        assert any("no audio files found" in str(d) for d in displays)
