"""Pinyin and stroke helpers for Chinese input."""

from __future__ import annotations

from typing import Iterable, Optional, Union

from .pinyinlookup import PinyinLookup
from .stroke import Stroke

DUYIN_LIMIT = 20

_STROKE_DIGITS = frozenset("12345")
_STROKE_LETTERS = {"h": "1", "s": "2", "p": "3", "n": "4", "z": "5"}


def _is_valid_utf8(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class PinyinHelper:
    """Reading and stroke lookups backed by lazily loaded tables."""

    def __init__(
        self,
        pinyin_lookup: Optional[PinyinLookup] = None,
        stroke: Optional[Stroke] = None,
    ) -> None:
        self.pinyin_lookup = pinyin_lookup if pinyin_lookup is not None else PinyinLookup()
        self.stroke = stroke if stroke is not None else Stroke()

    def lookup(self, char: Union[str, int]) -> list[str]:
        """Return the pinyin readings of a character."""
        if self.pinyin_lookup.load():
            return self.pinyin_lookup.lookup(char)
        return []

    def lookup_stroke(self, text: str, limit: int) -> list[tuple[str, str]]:
        """Look characters up by strokes, as digits 1-5 or letters h, s, p, n, z."""
        if not text or not self.stroke.load():
            return []
        if text[0] in _STROKE_DIGITS:
            if not set(text) <= _STROKE_DIGITS:
                return []
            return self.stroke.lookup(text, limit)
        if text[0] in _STROKE_LETTERS:
            if not set(text) <= _STROKE_LETTERS.keys():
                return []
            return self.stroke.lookup("".join(_STROKE_LETTERS[c] for c in text), limit)
        return []

    def reverse_lookup_stroke(self, hanzi: str) -> str:
        if not self.stroke.load():
            return ""
        return self.stroke.reverse_lookup(hanzi)

    def pretty_stroke_string(self, strokes: str) -> str:
        if not self.stroke.load():
            return ""
        return self.stroke.pretty_string(strokes)

    def duyin_candidates(self, texts: Iterable[str]) -> list[str]:
        """Describe the readings of the characters in each distinct text.

        At most 21 characters of each text are looked at.
        """
        candidates = []
        for text in dict.fromkeys(texts):
            if not _is_valid_utf8(text):
                continue
            for counter, char in enumerate(text):
                readings = self.lookup(char)
                if readings:
                    candidates.append(f"{char} ({', '.join(readings)})")
                if counter >= DUYIN_LIMIT:
                    break
        return candidates