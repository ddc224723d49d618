"""Custom completer for Soundboard CLI with audio file autocompletion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, SUPPORTED_FILE_EXTENSIONS


class SoundboardCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Audio file path completion for the 'upload' command
    """

    def __init__(self, base_dir: Path | None = None):
        self.base_dir = base_dir

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on cursor position and context.

        For the first token, completes command names.
        For the first 'upload' argument, completes directories and audio files.
        """
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        if command != "upload":
            return

        argument_index = len(tokens) if is_typing_new_token else len(tokens) - 1
        if argument_index != 1:
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        yield from self._complete_audio_files(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_audio_files(self, partial: str) -> Iterable[Completion]:
        """
        Complete paths to audio files and directories.

        Only files with a supported extension are offered; directories are
        offered with a trailing slash so completion can descend into them.
        """
        base = self.base_dir or Path.cwd()
        directory_part, _, name_part = partial.rpartition("/")
        search_dir = base / directory_part if directory_part else base
        if partial.startswith("/"):
            search_dir = Path(directory_part or "/")

        if not search_dir.is_dir():
            return

        prefix = f"{directory_part}/" if directory_part or partial.startswith("/") else ""
        candidates = []
        for item in search_dir.iterdir():
            if item.name.startswith(".") and not name_part.startswith("."):
                continue
            if item.is_dir():
                candidates.append(f"{prefix}{item.name}/")
            elif item.is_file() and item.name.lower().endswith(SUPPORTED_FILE_EXTENSIONS):
                candidates.append(f"{prefix}{item.name}")

        if not candidates and not name_part:
            yield Completion(
                "",
                start_position=0,
                display="(no audio files found - .mp3, .wav, .ogg)",
            )
            return

        partial_lower = partial.lower()
        for candidate in sorted(candidates):
            if candidate.lower().startswith(partial_lower):
                yield Completion(candidate, start_position=-len(partial))
