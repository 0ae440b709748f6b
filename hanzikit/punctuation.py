"""Full width punctuation with paired-punctuation tracking per input context."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from os import PathLike
from typing import Iterable, Mapping, Optional, Union

from .punctuation_profile import PunctuationEntry, PunctuationProfile

logger = logging.getLogger(__name__)

PROFILE_PREFIX = "punc.mb."
SUB_CONFIG_PREFIX = "punctuationmap/"
_EMPTY_PAIR = ("", "")
_HALF_WIDTH_AFTER_LATIN = (ord("."), ord(","))

Code = Union[int, str]
PathType = Union[str, PathLike]


def lang_by_path(path: str) -> str:
    """Return the language named by a sub configuration path, or ''."""
    if path.startswith(SUB_CONFIG_PREFIX):
        return path[len(SUB_CONFIG_PREFIX):]
    return ""


def _to_code(code: Code) -> int:
    if isinstance(code, str):
        if len(code) != 1:
            raise ValueError("expected a single character")
        return ord(code)
    return code


def _is_ascii_alnum(char: str) -> bool:
    return len(char) == 1 and char.isascii() and char.isalnum()


@dataclass
class PunctuationConfig:
    hotkey: tuple[str, ...] = ("Control+period",)
    half_width_punc_after_latin_or_number: bool = True
    type_paired_punctuation_together: bool = False
    enabled: bool = True


@dataclass
class PunctuationState:
    """Punctuation state of one input context."""

    last_punc_stack: dict[int, str] = field(default_factory=dict)
    last_is_eng_or_digit: str = ""
    not_converted: int = 0
    may_rebuild_state_from_surrounding_text: bool = False
    last_punc_stack_backup: dict[int, str] = field(default_factory=dict)
    not_converted_backup: int = 0


def _list_profiles(directory: Optional[PathType]) -> dict[str, str]:
    if directory is None or not os.path.isdir(directory):
        return {}
    found = {}
    for name in os.listdir(directory):
        path = os.path.join(directory, name)
        if name.startswith(PROFILE_PREFIX) and os.path.isfile(path):
            found[name] = path
    return found


def _read_lines(path: str) -> list[str]:
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as source:
        return source.read().splitlines()


class Punctuation:
    """Maps typed characters to punctuation of the current language."""

    def __init__(
        self,
        config: Optional[PunctuationConfig] = None,
        profiles: Optional[Mapping[str, PunctuationProfile]] = None,
    ) -> None:
        self.config = config if config is not None else PunctuationConfig()
        self.profiles: dict[str, PunctuationProfile] = dict(profiles or {})
        self._user_dir: Optional[PathType] = None

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def set_enabled(self, enabled: bool) -> None:
        self.config.enabled = bool(enabled)

    def load_profiles(self, system_dir: Optional[PathType], user_dir: Optional[PathType] = None) -> None:
        """Load ``punc.mb.<lang>`` files; user files are applied over system ones."""
        self._user_dir = user_dir
        system_files = _list_profiles(system_dir)
        user_files = _list_profiles(user_dir)
        all_names = set(system_files) | set(user_files)

        for lang in list(self.profiles):
            if PROFILE_PREFIX + lang not in all_names:
                del self.profiles[lang]

        for name in sorted(all_names):
            lang = name[len(PROFILE_PREFIX):]
            if not lang:
                continue
            system_path = system_files.get(name)
            user_path = user_files.get(name)
            if user_path is not None and system_path is not None and (
                os.path.realpath(user_path) == os.path.realpath(system_path)
            ):
                user_path = None
            profile = self.profiles.setdefault(lang, PunctuationProfile())
            try:
                if system_path is not None:
                    profile.load_system(_read_lines(system_path))
                else:
                    profile.reset_default_value()
                if user_path is not None:
                    profile.load(_read_lines(user_path))
            except OSError as exc:
                logger.warning("Error when load profile %s: %s", name, exc)

    def get_punctuation(self, language: str, code: Code) -> tuple[str, str]:
        """Return (mapping, alternative) for a character in a language."""
        if not self.config.enabled:
            return _EMPTY_PAIR
        profile = self.profiles.get(language)
        if profile is None:
            return _EMPTY_PAIR
        return profile.get_punctuation(_to_code(code))

    def _half_width_kept(self, state: PunctuationState, code: int) -> bool:
        if (state.last_is_eng_or_digit
                and self.config.half_width_punc_after_latin_or_number
                and code in _HALF_WIDTH_AFTER_LATIN):
            state.not_converted = code
            return True
        return False

    def push_punctuation(self, language: str, state: PunctuationState, code: Code) -> str:
        """Return the text for a typed character, alternating paired punctuation."""
        if not self.enabled:
            return ""
        code = _to_code(code)
        if self._half_width_kept(state, code):
            return ""
        if language not in self.profiles:
            return ""
        first, second = self.get_punctuation(language, code)
        state.not_converted = 0
        if not second:
            return first
        if code in state.last_punc_stack:
            del state.last_punc_stack[code]
            return second
        state.last_punc_stack[code] = first
        return first

    def push_punctuation_v2(self, language: str, state: PunctuationState, code: Code) -> tuple[str, str]:
        """Like push_punctuation, but may return both halves of a pair."""
        if not self.enabled:
            return _EMPTY_PAIR
        code = _to_code(code)
        if self._half_width_kept(state, code):
            return _EMPTY_PAIR
        if language not in self.profiles:
            return _EMPTY_PAIR
        first, second = self.get_punctuation(language, code)
        state.not_converted = 0
        if not second:
            return first, ""
        if self.config.type_paired_punctuation_together:
            return first, second
        if code in state.last_punc_stack:
            del state.last_punc_stack[code]
            return second, ""
        state.last_punc_stack[code] = first
        return first, ""

    def cancel_last(self, language: str, state: PunctuationState) -> str:
        """Return the full width form of a character that was left half width."""
        if not self.enabled:
            return ""
        if state.not_converted in _HALF_WIDTH_AFTER_LATIN:
            first, _ = self.get_punctuation(language, state.not_converted)
            state.not_converted = 0
            return first
        return ""

    def on_commit(self, state: PunctuationState, sentence: str) -> None:
        """Remember whether committed text ends with a latin letter or digit."""
        if sentence and _is_ascii_alnum(sentence[-1]):
            state.last_is_eng_or_digit = sentence[-1]
        else:
            state.last_is_eng_or_digit = ""

    def on_key(self, state: PunctuationState, char: str, accepted: bool = False, release: bool = False) -> None:
        """Track a key that the input method passed through."""
        if release or accepted:
            return
        state.last_is_eng_or_digit = char if _is_ascii_alnum(char) else ""

    def on_focus_in(self, state: PunctuationState, surrounding: bool) -> None:
        if surrounding:
            state.may_rebuild_state_from_surrounding_text = True

    def on_reset(self, state: PunctuationState, surrounding: bool) -> None:
        """Clear the state, keeping a backup to rebuild from surrounding text."""
        state.last_is_eng_or_digit = ""
        state.not_converted_backup = state.not_converted
        state.not_converted = 0
        state.last_punc_stack_backup = dict(state.last_punc_stack)
        state.last_punc_stack.clear()
        if surrounding:
            state.may_rebuild_state_from_surrounding_text = True

    def on_surrounding_text_updated(self, state: PunctuationState, text: Optional[str], cursor: int) -> None:
        """Rebuild state from the text before the cursor after a reset.

        ``text`` is None when the surrounding text is not available.
        """
        if state.may_rebuild_state_from_surrounding_text:
            state.may_rebuild_state_from_surrounding_text = False
        else:
            state.not_converted_backup = 0
            state.last_punc_stack_backup.clear()
            return
        if text is None:
            return
        try:
            text.encode("utf-8")
        except UnicodeEncodeError:
            return
        if not 0 < cursor <= len(text):
            return
        last = text[cursor - 1]
        if _is_ascii_alnum(last):
            state.last_is_eng_or_digit = last
        if ord(last) == state.not_converted_backup and state.not_converted == 0:
            state.not_converted = state.not_converted_backup
        state.not_converted_backup = 0
        if state.last_punc_stack_backup and not state.last_punc_stack:
            for char in text[:cursor]:
                match = next(
                    (item for item in state.last_punc_stack_backup.items() if item[1] == char),
                    None,
                )
                if match is not None:
                    state.last_punc_stack.setdefault(*match)
        state.last_punc_stack_backup.clear()

    def sub_config(self, path: str) -> Optional[list[PunctuationEntry]]:
        """Return the entries of the profile named by path, or None."""
        lang = lang_by_path(path)
        if not lang:
            return None
        profile = self.profiles.get(lang)
        return profile.entries if profile is not None else None

    def set_sub_config(
        self,
        path: str,
        entries: Iterable[PunctuationEntry],
        directory: Optional[PathType] = None,
    ) -> None:
        """Replace a profile's entries and save it to the user directory."""
        lang = lang_by_path(path)
        profile = self.profiles.get(lang)
        if profile is None:
            return
        profile.set_entries(entries)
        target_dir = directory if directory is not None else self._user_dir
        if target_dir is not None:
            profile.save(os.path.join(target_dir, PROFILE_PREFIX + lang))