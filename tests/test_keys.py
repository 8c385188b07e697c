"""Tests for cellview.keys -- key sequence parsing and key events."""

from __future__ import annotations

import pytest

from cellview.keys import Key, KeyEvent, parse_key


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


class TestParseKeySimple:
    """Single-byte and plain text input."""

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            ("\r", "enter"),
            ("\n", "enter"),
            ("\t", "tab"),
            (" ", "space"),
            ("\x7f", "backspace"),
            ("\x1b", "escape"),
            ("\x00", "ctrl+space"),
            ("\x01", "ctrl+a"),
            ("\x03", "ctrl+c"),
            ("a", "a"),
            ("Z", "Z"),
            ("中", "中"),
        ],
    )
    def test_simple(self, data: str, expected: str) -> None:
        assert parse_key(data) == expected

    def test_empty_input(self) -> None:
        assert parse_key("") is None


class TestParseKeyEscapeSequences:
    """Cursor, editing and function keys."""

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            ("\x1b[A", "up"),
            ("\x1bOB", "down"),
            ("\x1b[H", "home"),
            ("\x1b[4~", "end"),
            ("\x1b[5~", "pageUp"),
            ("\x1b[6~", "pageDown"),
            ("\x1b[3~", "delete"),
            ("\x1b[Z", "shift+tab"),
            ("\x1bOP", "f1"),
            ("\x1b[24~", "f12"),
        ],
    )
    def test_legacy(self, data: str, expected: str) -> None:
        assert parse_key(data) == expected

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            ("\x1b[1;5A", "ctrl+up"),
            ("\x1b[1;2C", "shift+right"),
            ("\x1b[1;3D", "alt+left"),
            ("\x1b[1;6H", "ctrl+shift+home"),
            ("\x1b[3;5~", "ctrl+delete"),
            ("\x1bO2P", "shift+f1"),
            ("\x1b[27;5;13~", "ctrl+enter"),
        ],
    )
    def test_modified(self, data: str, expected: str) -> None:
        assert parse_key(data) == expected

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            ("\x1bx", "alt+x"),
            ("\x1bX", "shift+alt+x"),
            ("\x1b\r", "alt+enter"),
            ("\x1b\x7f", "alt+backspace"),
            ("\x1b\x02", "ctrl+alt+b"),
        ],
    )
    def test_alt_prefix(self, data: str, expected: str) -> None:
        assert parse_key(data) == expected

    def test_unknown_sequence(self) -> None:
        assert parse_key("\x1b[99z") is None

    def test_unknown_tilde_code(self) -> None:
        assert parse_key("\x1b[99;5~") is None


# ---------------------------------------------------------------------------
# KeyEvent
# ---------------------------------------------------------------------------


class TestKeyEvent:
    """Events built from sequences."""

    def test_printable_carries_char(self) -> None:
        event = KeyEvent.from_sequence("a")
        assert event == KeyEvent("a", "a")
        assert event.is_rune

    def test_space_inserts_space(self) -> None:
        event = KeyEvent.from_sequence(" ")
        assert event == KeyEvent("space", " ")
        assert event.is_rune

    def test_special_key_has_no_char(self) -> None:
        event = KeyEvent.from_sequence("\x1b[A")
        assert event == KeyEvent("up")
        assert not event.is_rune

    def test_unparseable_sequence(self) -> None:
        assert KeyEvent.from_sequence("\x1b[99z") is None

    def test_rune_constructor(self) -> None:
        assert KeyEvent.rune("x") == KeyEvent("x", "x")
        assert KeyEvent.rune(" ") == KeyEvent("space", " ")

    def test_paste_is_not_a_rune(self) -> None:
        event = KeyEvent.paste("some text")
        assert event.key == Key.paste
        assert event.char == "some text"
        assert not event.is_rune

    def test_modifier_flags(self) -> None:
        event = KeyEvent("ctrl+alt+x")
        assert event.ctrl
        assert event.alt
        assert not KeyEvent("a", "a").ctrl

    def test_matches_any(self) -> None:
        event = KeyEvent(Key.backtab)
        assert event.matches("tab", "shift+tab")
        assert not event.matches("tab")

    def test_key_combinators(self) -> None:
        assert Key.ctrl("c") == "ctrl+c"
        assert Key.alt(Key.up) == "alt+up"
        assert Key.shift(Key.tab) == "shift+tab"
