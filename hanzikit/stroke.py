"""Looking up Chinese characters by stroke sequence."""

from __future__ import annotations

import bisect
import heapq
import itertools
import re
from os import PathLike
from typing import Iterable, Optional, Union

DELETION_WEIGHT = 5
INSERTION_WEIGHT = 5
SUBSTITUTION_WEIGHT = 5
TRANSPOSITION_WEIGHT = 5
MAX_WEIGHT = 10

STROKE_DIGITS = "12345"
_STROKE_NAMES = {"1": "一", "2": "丨", "3": "丿", "4": "㇏", "5": "𠃍"}
_SPACE = " \n\t\r\v\f"
_SPLIT = re.compile("[ \n\t\r\v\f]")


class Stroke:
    """Stroke table with fuzzy lookup.

    A stroke sequence is a string of the digits 1 to 5. Lookup results are
    ``(hanzi, strokes)`` pairs; a stroke sequence appears at most once.
    """

    def __init__(self, path: Union[str, PathLike, None] = None) -> None:
        self.path = path
        self._loaded = False
        self._load_result = False
        self._entries: dict[str, set[str]] = {}
        self._prefixes: set[str] = {""}
        self._keys: list[str] = []
        self._reverse: dict[str, str] = {}

    def load(self) -> bool:
        """Load the table file once; return whether it succeeded."""
        if self._loaded:
            return self._load_result
        self._loaded = True
        if self.path is None:
            return False
        try:
            with open(self.path, "rb") as table:
                raw_lines = table.read().split(b"\n")
        except OSError:
            return False
        lines = []
        for raw in raw_lines:
            try:
                lines.append(raw.decode("utf-8"))
            except UnicodeDecodeError:
                continue
        self.load_lines(lines)
        return True

    def load_lines(self, lines: Iterable[str]) -> None:
        """Add ``<strokes> <hanzi>`` lines; other lines are ignored."""
        for line in lines:
            line = line.strip(_SPACE)
            if not line or line.startswith("#"):
                continue
            tokens = _SPLIT.split(line)
            if len(tokens) != 2:
                continue
            strokes, hanzi = tokens
            if len(hanzi) != 1 or strokes.strip(STROKE_DIGITS):
                continue
            self._entries.setdefault(strokes, set()).add(hanzi)
            self._prefixes.update(strokes[:end] for end in range(len(strokes) + 1))
            self._reverse[hanzi] = strokes
        self._keys = sorted(
            f"{strokes}|{hanzi}"
            for strokes, chars in self._entries.items()
            for hanzi in chars
        )
        self._loaded = True
        self._load_result = True

    def _unique_prefix_match(self, prefix: str) -> Optional[str]:
        start = bisect.bisect_left(self._keys, prefix)
        matches = [key for key in self._keys[start:start + 2] if key.startswith(prefix)]
        return matches[0] if len(matches) == 1 else None

    def lookup(self, strokes: str, limit: int) -> list[tuple[str, str]]:
        """Find characters whose strokes are close to the given ones.

        A negative limit means no limit. If exactly one entry starts with
        the given strokes, it comes first.
        """
        result: list[tuple[str, str]] = []
        seen: set[str] = set()

        def add(hanzi: str, found: str) -> None:
            if found not in seen:
                seen.add(found)
                result.append((hanzi, found))

        only = self._unique_prefix_match(strokes)
        if only is not None:
            idx = only.rfind("|")
            if idx >= 0:
                add(only[idx + 1:], only[:idx])
        if limit >= 0 and len(result) >= limit:
            return result

        heap: list[tuple[int, int, str, str]] = []
        order = itertools.count()

        def push(path: str, remain: str, weight: int) -> None:
            if weight < MAX_WEIGHT:
                heapq.heappush(heap, (weight, next(order), path, remain))

        push("", strokes, 0)
        while heap:
            weight, _, path, remain = heapq.heappop(heap)
            if not remain:
                for hanzi in sorted(self._entries.get(path, ())):
                    add(hanzi, path)
                    if limit > 0 and len(result) >= limit:
                        return result
            else:
                push(path, remain[1:], weight + DELETION_WEIGHT)

            for digit in STROKE_DIGITS:
                child = path + digit
                if child not in self._prefixes:
                    continue
                if remain and remain[0] == digit:
                    push(child, remain[1:], weight)
                else:
                    push(child, remain, weight + INSERTION_WEIGHT)
                    if remain:
                        push(child, remain[1:], weight + SUBSTITUTION_WEIGHT)
                if len(remain) >= 2 and remain[1] == digit:
                    grandchild = child + remain[0]
                    if grandchild in self._prefixes:
                        push(grandchild, remain[2:], weight + TRANSPOSITION_WEIGHT)
        return result

    def reverse_lookup(self, hanzi: str) -> str:
        """Return the strokes of a character, or an empty string."""
        return self._reverse.get(hanzi, "")

    @staticmethod
    def pretty_string(strokes: str) -> str:
        """Render digit strokes as stroke glyphs; empty if any digit is invalid."""
        if any(char not in _STROKE_NAMES for char in strokes):
            return ""
        return "".join(_STROKE_NAMES[char] for char in strokes)