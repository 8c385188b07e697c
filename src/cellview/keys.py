"""Keyboard input parsing.

Turns one complete raw terminal sequence (as split off by
:class:`cellview.input_buffer.InputBuffer`) into a key identifier such as
``"a"``, ``"enter"``, ``"ctrl+c"``, ``"shift+tab"`` or ``"alt+up"``, and
wraps it in a :class:`KeyEvent`.

Legacy xterm, SS3 and rxvt sequences are recognised, including the
``CSI 1;<mod>X`` and ``CSI <n>;<mod>~`` modifier forms.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "Key",
    "KeyEvent",
    "parse_key",
    "LEGACY_KEY_SEQUENCES",
]

# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    backtab = "shift+tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    insert = "insert"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"
    paste = "paste"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


# ---------------------------------------------------------------------------
# Legacy escape sequences
# ---------------------------------------------------------------------------

# Unmodified sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[4~": "end",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1bOP": "f1",
    "\x1bOQ": "f2",
    "\x1bOR": "f3",
    "\x1bOS": "f4",
    "\x1b[11~": "f1",
    "\x1b[12~": "f2",
    "\x1b[13~": "f3",
    "\x1b[14~": "f4",
    "\x1b[15~": "f5",
    "\x1b[17~": "f6",
    "\x1b[18~": "f7",
    "\x1b[19~": "f8",
    "\x1b[20~": "f9",
    "\x1b[21~": "f10",
    "\x1b[23~": "f11",
    "\x1b[24~": "f12",
    "\x1b[E": "clear",
    "\x1b[Z": "shift+tab",
}

# CSI 1;<mod><final> : final byte -> key name
_CSI_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

# CSI <n>;<mod>~ : n -> key name
_CSI_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    15: "f5",
    17: "f6",
    18: "f7",
    19: "f8",
    20: "f9",
    21: "f10",
    23: "f11",
    24: "f12",
}

_CSI_MODIFIED_RE = re.compile(r"^\x1b\[1;(\d+)([ABCDFHPQRS])$")
_SS3_MODIFIED_RE = re.compile(r"^\x1bO(\d+)([PQRS])$")
_TILDE_MODIFIED_RE = re.compile(r"^\x1b\[(\d+);(\d+)~$")
_MODIFY_OTHER_KEYS_RE = re.compile(r"^\x1b\[27;(\d+);(\d+)~$")

_SHIFT = 1
_ALT = 2
_CTRL = 4


def _modifier_prefix(param: int) -> str:
    """Key-id prefix for an xterm modifier parameter (1 + bitmask)."""
    mod = max(0, param - 1)
    prefix = ""
    if mod & _CTRL:
        prefix += "ctrl+"
    if mod & _SHIFT:
        prefix += "shift+"
    if mod & _ALT:
        prefix += "alt+"
    return prefix


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


def parse_key(data: str) -> str | None:  # noqa: C901
    """Parse raw terminal input and return the key identifier, or ``None``.

    Returned ids look like ``"a"``, ``"A"``, ``"ctrl+a"``, ``"alt+x"``,
    ``"shift+tab"``, ``"ctrl+up"`` or ``"f5"``.
    """
    if not data:
        return None

    key = LEGACY_KEY_SEQUENCES.get(data)
    if key is not None:
        return key

    m = _CSI_MODIFIED_RE.match(data) or _SS3_MODIFIED_RE.match(data)
    if m:
        return _modifier_prefix(int(m.group(1))) + _CSI_LETTER_KEYS[m.group(2)]

    m = _MODIFY_OTHER_KEYS_RE.match(data)
    if m:
        ch = chr(int(m.group(2)))
        if ch == "\r":
            name = "enter"
        elif ch == "\t":
            name = "tab"
        elif ch == " ":
            name = "space"
        elif ch.isprintable():
            name = ch.lower()
        else:
            return None
        return _modifier_prefix(int(m.group(1))) + name

    m = _TILDE_MODIFIED_RE.match(data)
    if m:
        name = _CSI_TILDE_KEYS.get(int(m.group(1)))
        if name is None:
            return None
        return _modifier_prefix(int(m.group(2))) + name

    # --- Simple single-byte keys ---
    if data == "\x1b":
        return "escape"
    if data in ("\r", "\n"):
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data in ("\x7f", "\x08"):
        return "backspace"
    if data == "\x00":
        return "ctrl+space"

    # --- Ctrl + letter (0x01 - 0x1a) ---
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # --- Alt + key (ESC prefix) ---
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch == "\x1b":
            return "alt+escape"
        if ch in ("\r", "\n"):
            return "alt+enter"
        if ch == "\t":
            return "alt+tab"
        if ch == " ":
            return "alt+space"
        if ch in ("\x7f", "\x08"):
            return "alt+backspace"
        if 1 <= ord(ch) <= 26:
            return "ctrl+alt+" + chr(ord(ch) + ord("a") - 1)
        if ch.isupper():
            return "shift+alt+" + ch.lower()
        if ch.isprintable():
            return "alt+" + ch

    # --- Plain printable text (one grapheme, possibly several codepoints) ---
    if not data.startswith("\x1b") and data.isprintable():
        return data

    return None


# ---------------------------------------------------------------------------
# KeyEvent
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """A key press (or a bracketed paste) delivered to widgets.

    ``key`` is the identifier produced by :func:`parse_key`.  ``char`` is
    the text the key inserts: the character itself for printable keys, a
    space for ``"space"``, the pasted text for ``"paste"``, and empty for
    everything else.
    """

    key: str
    char: str = ""

    @classmethod
    def from_sequence(cls, data: str) -> KeyEvent | None:
        key = parse_key(data)
        if key is None:
            return None
        if key == "space":
            return cls(key, " ")
        if not data.startswith("\x1b") and data.isprintable():
            return cls(key, data)
        return cls(key)

    @classmethod
    def rune(cls, char: str) -> KeyEvent:
        return cls("space" if char == " " else char, char)

    @classmethod
    def paste(cls, text: str) -> KeyEvent:
        return cls(Key.paste, text)

    @property
    def is_rune(self) -> bool:
        """True for keys that insert text (printable characters and space)."""
        return bool(self.char) and self.key != Key.paste

    @property
    def ctrl(self) -> bool:
        return self.key.startswith("ctrl+")

    @property
    def alt(self) -> bool:
        return "alt+" in self.key

    def matches(self, *key_ids: str) -> bool:
        """Return ``True`` if this event is any of *key_ids*."""
        return self.key in key_ids
