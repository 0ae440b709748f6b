"""Punctuation maps: which full width text a typed character turns into."""

from __future__ import annotations

import os
import re
import tempfile
from dataclasses import dataclass
from os import PathLike
from typing import Iterable, Union

_WHITESPACE = " \t\r\n\v\f"
_SPLIT = re.compile(f"[{re.escape(_WHITESPACE)}]+")
_EMPTY_PAIR = ("", "")


def _is_valid_text(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


@dataclass(frozen=True)
class PunctuationEntry:
    """One mapping: a key character, its mapping and an optional alternative.

    The alternative is used for paired punctuation such as quotes, where
    typing the key again closes the pair.
    """

    key: str
    mapping: str
    alt_mapping: str = ""


class PunctuationProfile:
    """The punctuation map of one language.

    Entries keep the order in which they were added; for a key that occurs
    more than once, the first mapping wins.
    """

    def __init__(self) -> None:
        self._map: dict[int, tuple[str, str]] = {}
        self._entries: list[PunctuationEntry] = []
        self._default_entries: list[PunctuationEntry] = []

    @property
    def entries(self) -> list[PunctuationEntry]:
        """The current entries, in order."""
        return list(self._entries)

    @property
    def default_entries(self) -> list[PunctuationEntry]:
        """The entries that count as the defaults for this profile."""
        return list(self._default_entries)

    def _clear(self) -> None:
        self._map.clear()
        self._entries.clear()

    def _add_entry(self, code: int, mapping: str, alt_mapping: str) -> None:
        if code in self._map:
            return
        self._map[code] = (mapping, alt_mapping)
        self._entries.append(PunctuationEntry(chr(code), mapping, alt_mapping))

    def load(self, lines: Iterable[str]) -> None:
        """Replace the map with ``<key> <mapping> [<alternative>]`` lines.

        Lines that do not have that form are skipped. ``#`` is an ordinary
        key, not a comment.
        """
        self._clear()
        for line in lines:
            line = line.strip(_WHITESPACE)
            if not line:
                continue
            tokens = [token for token in _SPLIT.split(line) if token]
            if len(tokens) not in (2, 3):
                continue
            if not any(_is_valid_text(token) for token in tokens):
                continue
            key = tokens[0]
            if len(key) != 1 or not _is_valid_text(key):
                continue
            self._add_entry(ord(key), tokens[1], tokens[2] if len(tokens) > 2 else "")

    def load_system(self, lines: Iterable[str]) -> None:
        """Load lines and make the result the profile's defaults."""
        self.load(lines)
        self._default_entries = list(self._entries)

    def reset_default_value(self) -> None:
        """Empty the profile and its defaults."""
        self._clear()
        self._default_entries = []

    def set_entries(self, entries: Iterable[PunctuationEntry]) -> None:
        """Replace the map with entries, skipping incomplete or invalid ones."""
        self._clear()
        for entry in entries:
            if not entry.key or not entry.mapping:
                continue
            if len(entry.key) != 1 or not _is_valid_text(entry.key):
                continue
            self._add_entry(ord(entry.key), entry.mapping, entry.alt_mapping)

    def dumps(self) -> str:
        """Render the entries in the line format read by :meth:`load`."""
        lines = []
        for entry in self._entries:
            fields = [entry.key, entry.mapping]
            if entry.alt_mapping:
                fields.append(entry.alt_mapping)
            lines.append(" ".join(fields) + "\n")
        return "".join(lines)

    def save(self, path: Union[str, PathLike]) -> None:
        """Write the entries to path, replacing it atomically."""
        target = os.fspath(path)
        directory = os.path.dirname(target) or "."
        os.makedirs(directory, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".punc-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as out:
                out.write(self.dumps())
            os.replace(temp_path, target)
        except BaseException:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def get_punctuation(self, code: Union[int, str]) -> tuple[str, str]:
        """Return (mapping, alternative) for a character, or two empty strings."""
        if isinstance(code, str):
            if len(code) != 1:
                return _EMPTY_PAIR
            code = ord(code)
        return self._map.get(code, _EMPTY_PAIR)