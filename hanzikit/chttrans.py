"""Conversion between Simplified and Traditional Chinese."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from os import PathLike
from typing import Iterable, Mapping, Optional, Sequence, Union


class ChttransIMType(enum.Enum):
    SIMP = "simp"
    TRAD = "trad"
    OTHER = "other"


class ChttransEngine(enum.Enum):
    NATIVE = "Native"
    OPENCC = "OpenCC"


def input_method_type(language_code: Optional[str]) -> ChttransIMType:
    """Classify an input method by its language code."""
    if language_code == "zh_CN":
        return ChttransIMType.SIMP
    if language_code in ("zh_HK", "zh_TW"):
        return ChttransIMType.TRAD
    return ChttransIMType.OTHER


def convert_with_map(mapping: Mapping[str, str], text: str) -> str:
    """Replace every character found in mapping, keep the others."""
    return "".join(mapping.get(char, char) for char in text)


class ChttransBackend(ABC):
    """A conversion engine that is loaded lazily, at most once."""

    def __init__(self) -> None:
        self._loaded = False
        self._load_result = False

    def load(self) -> bool:
        """Load the backend on first use and return whether it succeeded."""
        if not self._loaded:
            self._load_result = self._load_once()
            self._loaded = True
        return self._load_result

    def loaded(self) -> bool:
        return self._loaded and self._load_result

    @abstractmethod
    def _load_once(self) -> bool:
        ...

    @abstractmethod
    def convert_simp_to_trad(self, text: str) -> str:
        ...

    @abstractmethod
    def convert_trad_to_simp(self, text: str) -> str:
        ...


def _is_valid_char(char: str) -> bool:
    code = ord(char)
    return code <= 0x10FFFF and not 0xD800 <= code <= 0xDFFF


class NativeBackend(ChttransBackend):
    """Backend driven by a table of ``<simplified><traditional>`` lines."""

    def __init__(self, table_path: Union[str, PathLike, None] = None) -> None:
        super().__init__()
        self.table_path = table_path
        self._s2t: dict[str, str] = {}
        self._t2s: dict[str, str] = {}

    def load_lines(self, lines: Iterable[str]) -> None:
        """Add mappings from table lines; the first mapping of a character wins."""
        for line in lines:
            line = line.rstrip("\n")
            if len(line) < 2:
                continue
            simp, trad = line[0], line[1]
            if not (_is_valid_char(simp) and _is_valid_char(trad)):
                continue
            self._s2t.setdefault(simp, trad)
            self._t2s.setdefault(trad, simp)
        self._loaded = True
        self._load_result = True

    def _load_once(self) -> bool:
        if self.table_path is None:
            return False
        try:
            with open(self.table_path, "rb") as table:
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

    def convert_simp_to_trad(self, text: str) -> str:
        return convert_with_map(self._s2t, text)

    def convert_trad_to_simp(self, text: str) -> str:
        return convert_with_map(self._t2s, text)


@dataclass(frozen=True)
class InputMethod:
    """The parts of an input method that matter for conversion."""

    unique_name: str
    language_code: str


class Chttrans:
    """Per input method toggling of Simplified/Traditional conversion."""

    def __init__(
        self,
        backends: Mapping[ChttransEngine, ChttransBackend],
        engine: ChttransEngine = ChttransEngine.NATIVE,
        enabled_im: Iterable[str] = (),
    ) -> None:
        self.backends = dict(backends)
        self.engine = engine
        self._enabled_im: set[str] = set(enabled_im)
        self._current_backend: Optional[ChttransBackend] = None
        self._populate()

    def _populate(self) -> None:
        backend = self.backends.get(self.engine)
        if backend is None and self.engine != ChttransEngine.NATIVE:
            backend = self.backends.get(ChttransEngine.NATIVE)
        self._current_backend = backend

    @property
    def current_backend(self) -> Optional[ChttransBackend]:
        return self._current_backend

    @property
    def enabled_im(self) -> list[str]:
        return sorted(self._enabled_im)

    def toggle(self, im: Optional[InputMethod]) -> None:
        """Switch conversion on or off for a Chinese input method."""
        if self._im_type(im) is ChttransIMType.OTHER:
            return
        assert im is not None
        if im.unique_name in self._enabled_im:
            self._enabled_im.discard(im.unique_name)
        else:
            self._enabled_im.add(im.unique_name)

    @staticmethod
    def _im_type(im: Optional[InputMethod]) -> ChttransIMType:
        if im is None:
            return ChttransIMType.OTHER
        return input_method_type(im.language_code)

    @staticmethod
    def _flip(im_type: ChttransIMType) -> ChttransIMType:
        return ChttransIMType.TRAD if im_type is ChttransIMType.SIMP else ChttransIMType.SIMP

    def convert_type(self, im: Optional[InputMethod]) -> ChttransIMType:
        """The target of conversion, or OTHER when nothing is converted."""
        im_type = self._im_type(im)
        if im_type is ChttransIMType.OTHER:
            return im_type
        assert im is not None
        if im.unique_name not in self._enabled_im:
            return ChttransIMType.OTHER
        return self._flip(im_type)

    def current_type(self, im: Optional[InputMethod]) -> ChttransIMType:
        """The language the user ends up typing."""
        im_type = self._im_type(im)
        if im_type is ChttransIMType.OTHER:
            return im_type
        assert im is not None
        if im.unique_name not in self._enabled_im:
            return im_type
        return self._flip(im_type)

    def convert(self, im_type: ChttransIMType, text: str) -> str:
        backend = self._current_backend
        if backend is None or not backend.load():
            return text
        if im_type is ChttransIMType.TRAD:
            return backend.convert_simp_to_trad(text)
        return backend.convert_trad_to_simp(text)

    def filter_commit(self, im: Optional[InputMethod], text: str) -> str:
        im_type = self.convert_type(im)
        if im_type is ChttransIMType.OTHER:
            return text
        return self.convert(im_type, text)

    def filter_output(
        self, im: Optional[InputMethod], segments: Sequence[str], cursor: int
    ) -> tuple[list[str], int]:
        """Convert formatted text, keeping segment boundaries and cursor.

        The cursor is a character offset; a value of zero or below is kept.
        """
        segments = list(segments)
        if not segments:
            return segments, cursor
        im_type = self.convert_type(im)
        if im_type is ChttransIMType.OTHER:
            return segments, cursor
        old = "".join(segments)
        new = self.convert(im_type, old)
        if len(segments) == 1:
            result = [new]
        else:
            result = []
            offset = 0
            remain = len(new)
            for segment in segments:
                length = min(len(segment), remain)
                remain -= length
                result.append(new[offset:offset + length])
                offset += length
        if cursor > 0:
            cursor = min(len(old[:cursor]), len(new))
        return result, cursor

    def short_text(self, im: Optional[InputMethod]) -> str:
        if self.current_type(im) is ChttransIMType.TRAD:
            return "Traditional Chinese"
        return "Simplified Chinese"

    def icon(self, im: Optional[InputMethod]) -> str:
        if self.current_type(im) is ChttransIMType.TRAD:
            return "fcitx-chttrans-active"
        return "fcitx-chttrans-inactive"