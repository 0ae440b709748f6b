"""Full width character conversion."""

from __future__ import annotations

from typing import Iterable, Optional

_CORNER_TRANS = {code: chr(code + 0xFEE0) for code in range(33, 127)}
_CORNER_TRANS[32] = "\u3000"
_CORNER_TRANS[ord("$")] = "\uffe5"

# Committed text keeps plain spaces.
_COMMIT_TABLE = {code: value for code, value in _CORNER_TRANS.items() if code > 32}


def fullwidth_char(code: int) -> Optional[str]:
    """Return the full width form of a printable ASCII code, else None."""
    return _CORNER_TRANS.get(code)


def to_fullwidth(text: str) -> str:
    """Convert printable ASCII (except space) in text to full width."""
    return text.translate(_COMMIT_TABLE)


class Fullwidth:
    """Full width input state toggled by hotkeys.

    Hotkeys are ``(key, modifiers)`` pairs, where key is a key code and
    modifiers a bit mask.
    """

    def __init__(self, hotkeys: Iterable[tuple[int, int]] = ()) -> None:
        self.hotkeys = frozenset(hotkeys)
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    def handle_key(self, key: int, modifiers: int = 0, release: bool = False) -> Optional[str]:
        """Process a key event.

        Returns None if the key is not consumed, an empty string if it
        toggled the mode, or the full width text to commit.
        """
        if release:
            return None
        if (key, modifiers) in self.hotkeys:
            self.set_enabled(not self._enabled)
            return ""
        if not self._enabled or modifiers:
            return None
        return fullwidth_char(key)

    def filter_commit(self, text: str) -> str:
        return to_fullwidth(text) if self._enabled else text

    def short_text(self) -> str:
        return "Full width Character" if self._enabled else "Half width Character"

    def icon(self) -> str:
        return "fcitx-fullwidth-active" if self._enabled else "fcitx-fullwidth-inactive"