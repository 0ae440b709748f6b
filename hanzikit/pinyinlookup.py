"""Pinyin readings of single Chinese characters."""

from __future__ import annotations

import io
from os import PathLike
from typing import NamedTuple, Optional, Union

MAX_UTF8_LENGTH = 6

_VOWELS: tuple[tuple[str, str, str, str, str], ...] = (
    ("", "", "", "", ""),
    ("a", "ā", "á", "ǎ", "à"),
    ("ai", "āi", "ái", "ǎi", "ài"),
    ("an", "ān", "án", "ǎn", "àn"),
    ("ang", "āng", "áng", "ǎng", "àng"),
    ("ao", "āo", "áo", "ǎo", "ào"),
    ("e", "ē", "é", "ě", "è"),
    ("ei", "ēi", "éi", "ěi", "èi"),
    ("en", "ēn", "én", "ěn", "èn"),
    ("eng", "ēng", "éng", "ěng", "èng"),
    ("er", "ēr", "ér", "ěr", "èr"),
    ("i", "ī", "í", "ǐ", "ì"),
    ("ia", "iā", "iá", "iǎ", "ià"),
    ("ian", "iān", "ián", "iǎn", "iàn"),
    ("iang", "iāng", "iáng", "iǎng", "iàng"),
    ("iao", "iāo", "iáo", "iǎo", "iào"),
    ("ie", "iē", "ié", "iě", "iè"),
    ("in", "īn", "ín", "ǐn", "ìn"),
    ("ing", "īng", "íng", "ǐng", "ìng"),
    ("iong", "iōng", "ióng", "iǒng", "iòng"),
    ("iu", "iū", "iú", "iǔ", "iù"),
    ("m", "m", "m", "m", "m"),
    ("n", "n", "ń", "ň", "ǹ"),
    ("ng", "ng", "ńg", "ňg", "ǹg"),
    ("o", "ō", "ó", "ǒ", "ò"),
    ("ong", "ōng", "óng", "ǒng", "òng"),
    ("ou", "ōu", "óu", "ǒu", "òu"),
    ("u", "ū", "ú", "ǔ", "ù"),
    ("ua", "uā", "uá", "uǎ", "uà"),
    ("uai", "uāi", "uái", "uǎi", "uài"),
    ("uan", "uān", "uán", "uǎn", "uàn"),
    ("uang", "uāng", "uáng", "uǎng", "uàng"),
    ("ue", "uē", "ué", "uě", "uè"),
    ("ueng", "uēng", "uéng", "uěng", "uèng"),
    ("ui", "uī", "uí", "uǐ", "uì"),
    ("un", "ūn", "ún", "ǔn", "ùn"),
    ("uo", "uō", "uó", "uǒ", "uò"),
    ("ü", "ǖ", "ǘ", "ǚ", "ǜ"),
    ("üan", "üān", "üán", "üǎn", "üàn"),
    ("üe", "üē", "üé", "üě", "üè"),
    ("ün", "ǖn", "ǘn", "ǚn", "ǜn"),
)

_CONSONANTS: tuple[str, ...] = (
    "", "b", "c", "ch", "d", "f", "g", "h", "j", "k", "l", "m", "n",
    "ng", "p", "q", "r", "s", "sh", "t", "w", "x", "y", "z", "zh",
)


def vowel(index: int, tone: int) -> str:
    """Return the final for index with a tone mark; bad tones mean no mark."""
    if not 0 <= index < len(_VOWELS):
        return ""
    if not 0 <= tone <= 4:
        tone = 0
    return _VOWELS[index][tone]


def consonant(index: int) -> str:
    """Return the initial for index, or an empty string."""
    if not 0 <= index < len(_CONSONANTS):
        return ""
    return _CONSONANTS[index]


class _Reading(NamedTuple):
    consonant: int
    vowel: int
    tone: int


class PinyinLookup:
    """Table of pinyin readings, read from a binary table file.

    Each record is a length byte, that many UTF-8 bytes holding one
    character, a count byte and count triples of (initial, final, tone).
    """

    def __init__(self, path: Union[str, PathLike, None] = None) -> None:
        self.path = path
        self._data: dict[int, list[_Reading]] = {}
        self._loaded = False
        self._load_result = False

    def load(self) -> bool:
        """Load the table file once; return whether it succeeded."""
        if self._loaded:
            return self._load_result
        self._loaded = True
        if self.path is None:
            return False
        try:
            with open(self.path, "rb") as table:
                data = table.read()
        except OSError:
            return False
        try:
            self.load_bytes(data)
        except ValueError:
            return False
        return True

    def load_bytes(self, data: bytes) -> None:
        """Parse table data; raise ValueError if it is malformed.

        Records read before an error stay available.
        """
        self._loaded = True
        self._load_result = False
        stream = io.BytesIO(data)

        def take(size: int) -> bytes:
            chunk = stream.read(size)
            if len(chunk) != size:
                raise ValueError("truncated pinyin table")
            return chunk

        while True:
            head = stream.read(1)
            if not head:
                break
            word_len = head[0]
            if word_len > MAX_UTF8_LENGTH:
                raise ValueError("word too long in pinyin table")
            word = take(word_len).split(b"\0", 1)[0]
            try:
                text = word.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ValueError("invalid UTF-8 in pinyin table") from exc
            if len(text) != 1:
                raise ValueError("pinyin table entry is not a single character")
            count = take(1)[0]
            if count == 0:
                continue
            readings = self._data.setdefault(ord(text), [])
            for _ in range(count):
                readings.append(_Reading(*take(3)))
        self._load_result = True

    def lookup(self, char: Union[str, int]) -> list[str]:
        """Return the readings of a character (given as str or code point)."""
        code = ord(char) if isinstance(char, str) else char
        result = []
        for reading in self._data.get(code, ()):
            initial = consonant(reading.consonant)
            final = vowel(reading.vowel, reading.tone)
            if initial or final:
                result.append(initial + final)
        return result

    @property
    def loaded(self) -> Optional[bool]:
        return self._load_result if self._loaded else None