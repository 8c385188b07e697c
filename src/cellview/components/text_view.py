"""TextView: a scrollable, optionally wrapped, tagged text area.

Text can be appended from any thread with :meth:`TextView.write`.  With
``dynamic_colors`` the text's style tags are interpreted; with ``regions``
``["id"]`` tags mark regions that can be highlighted and scrolled to.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable

from cellview.keys import KeyEvent
from cellview.mouse import MouseAction, MouseEvent
from cellview.primitive import Primitive, SetFocus, Widget
from cellview.screen import ScreenBuffer
from cellview.style import Attr, ColorLike, Theme
from cellview.tags import StyledRune, parse_tags
from cellview.utils import Align, char_width, wrap_runes

__all__ = ["TextView", "RegionInfo"]

_TAB_SIZE = 4


@dataclass(frozen=True)
class RegionInfo:
    """Position of a region in the wrapped text (end column exclusive)."""

    id: str
    start_row: int
    start_col: int
    end_row: int
    end_col: int


class TextView(Widget):
    def __init__(self, theme: Theme | None = None) -> None:
        super().__init__(theme)
        self._lock = threading.Lock()
        self._lines: list[str] = [""]

        self.dynamic_colors = False
        self.regions = False
        self.wrap = True
        self.word_wrap = False
        self.align = Align.LEFT
        self.scrollable = True
        self.max_lines = 0
        self.text_style = self.theme.text_style()

        self.row_offset = 0
        self.column_offset = 0
        self.track_end = False
        self._page_size = 0

        self.highlights: list[str] = []

        self.changed_func: Callable[[], None] | None = None
        self.done_func: Callable[[str], None] | None = None
        self.highlighted_func: Callable[[list[str], list[str], list[str]], None] | None = None

        # Wrapped rows of the last layout, keyed by (width, version).
        self._version = 0
        self._rows: list[list[StyledRune]] = []
        self._rows_key: tuple[int, int] | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_dynamic_colors(self, enabled: bool) -> None:
        self.dynamic_colors = enabled
        with self._lock:
            self._invalidate()

    def set_regions(self, enabled: bool) -> None:
        self.regions = enabled
        with self._lock:
            self._invalidate()

    def set_wrap(self, enabled: bool) -> None:
        self.wrap = enabled
        with self._lock:
            self._invalidate()

    def set_word_wrap(self, enabled: bool) -> None:
        self.word_wrap = enabled
        with self._lock:
            self._invalidate()

    def set_text_align(self, align: Align) -> None:
        self.align = align

    def set_scrollable(self, scrollable: bool) -> None:
        self.scrollable = scrollable
        if not scrollable:
            self.track_end = True

    def set_max_lines(self, max_lines: int) -> None:
        """Keep at most *max_lines* lines, dropping the oldest.  0 = no limit."""
        self.max_lines = max_lines
        with self._lock:
            self._trim()
            self._invalidate()

    def set_text_color(self, color: ColorLike) -> None:
        self.text_style = self.text_style.foreground(color)
        with self._lock:
            self._invalidate()

    def set_changed_func(self, fn: Callable[[], None] | None) -> None:
        """*fn* runs after every change of the text, on the writing thread."""
        self.changed_func = fn

    def set_done_func(self, fn: Callable[[str], None] | None) -> None:
        """*fn* receives the key (escape, enter, tab, shift+tab) that ended input."""
        self.done_func = fn

    def set_highlighted_func(
        self, fn: Callable[[list[str], list[str], list[str]], None] | None
    ) -> None:
        """*fn(added, removed, remaining)* runs when the highlights change."""
        self.highlighted_func = fn

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def write(self, data: str | bytes) -> int:
        """Append *data*.  Safe to call from any thread.

        Returns the number of characters (or bytes) consumed.
        """
        text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
        with self._lock:
            parts = text.replace("\r\n", "\n").split("\n")
            self._lines[-1] += parts[0]
            self._lines.extend(parts[1:])
            self._trim()
            self._invalidate()
        if self.changed_func is not None:
            self.changed_func()
        return len(data)

    def set_text(self, text: str) -> None:
        with self._lock:
            self._lines = [""]
            self._invalidate()
        self.write(text)

    def get_text(self, strip: bool = False) -> str:
        """The text, with tags removed when *strip* is ``True``."""
        with self._lock:
            text = "\n".join(self._lines)
        if not strip:
            return text
        runes = parse_tags(text, colors=self.dynamic_colors, regions=self.regions).runes
        return "".join(r.char for r in runes)

    def clear(self) -> None:
        with self._lock:
            self._lines = [""]
            self._invalidate()
        self.row_offset = 0
        self.column_offset = 0

    def get_line_count(self) -> int:
        with self._lock:
            return len(self._lines)

    def _trim(self) -> None:
        if self.max_lines > 0 and len(self._lines) > self.max_lines:
            del self._lines[: len(self._lines) - self.max_lines]

    def _invalidate(self) -> None:
        self._version += 1

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _parsed_lines(self) -> list[list[StyledRune]]:
        return self._parse(self._snapshot()[0])

    def _snapshot(self) -> tuple[list[str], int]:
        with self._lock:
            return list(self._lines), self._version

    def _parse(self, lines: list[str]) -> list[list[StyledRune]]:
        style = self.text_style
        region = ""
        result: list[list[StyledRune]] = []
        for line in lines:
            parsed = parse_tags(
                line.replace("\t", " " * _TAB_SIZE),
                style,
                region,
                colors=self.dynamic_colors,
                regions=self.regions,
            )
            style, region = parsed.style, parsed.region
            result.append(parsed.runes)
        return result

    def _wrapped(self, width: int) -> list[list[StyledRune]]:
        lines, version = self._snapshot()
        if self._rows_key == (width, version):
            return self._rows
        rows: list[list[StyledRune]] = []
        for runes in self._parse(lines):
            if self.wrap and width > 0:
                rows.extend(wrap_runes(runes, width, self.word_wrap))
            else:
                rows.append(runes)
        self._rows = rows
        self._rows_key = (width, version)
        return rows

    def get_wrapped_line_count(self, width: int | None = None) -> int:
        """Number of rows the text takes at *width* (default: current width)."""
        if width is None:
            width = self.box.inner_rect().width
        return len(self._wrapped(width))

    # ------------------------------------------------------------------
    # Regions and highlights
    # ------------------------------------------------------------------

    def get_regions(self) -> list[RegionInfo]:
        """Regions of the wrapped text at the current width, in text order.

        A region id that occurs several times yields one entry per
        occurrence.
        """
        rows = self._wrapped(self.box.inner_rect().width)
        result: list[RegionInfo] = []
        current: str = ""
        start = (0, 0)
        end = (0, 0)
        for row_index, row in enumerate(rows):
            col = 0
            for rune in row:
                if rune.region != current:
                    if current:
                        result.append(RegionInfo(current, start[0], start[1], end[0], end[1]))
                    current = rune.region
                    start = (row_index, col)
                col += char_width(rune.char)
                end = (row_index, col)
        if current:
            result.append(RegionInfo(current, start[0], start[1], end[0], end[1]))
        return result

    def get_region_ids(self) -> list[str]:
        """Distinct region ids in order of first appearance."""
        seen: dict[str, None] = {}
        for line in self._parsed_lines():
            for rune in line:
                if rune.region:
                    seen.setdefault(rune.region, None)
        return list(seen)

    def get_region_text(self, region_id: str) -> str:
        """Text of every occurrence of *region_id*, tags removed."""
        pieces: list[str] = []
        for line in self._parsed_lines():
            in_line = [rune.char for rune in line if rune.region == region_id]
            if in_line:
                pieces.append("".join(in_line))
        return "\n".join(pieces)

    def highlight(self, *region_ids: str) -> None:
        """Highlight exactly *region_ids*; no arguments clears the highlights."""
        new = list(dict.fromkeys(region_ids))
        added = [r for r in new if r not in self.highlights]
        removed = [r for r in self.highlights if r not in new]
        self.highlights = new
        if (added or removed) and self.highlighted_func is not None:
            self.highlighted_func(added, removed, list(new))

    def get_highlights(self) -> list[str]:
        return list(self.highlights)

    def highlight_next(self) -> str | None:
        """Move the highlight to the region after the current one (wrapping)."""
        return self._step_highlight(1)

    def highlight_previous(self) -> str | None:
        return self._step_highlight(-1)

    def _step_highlight(self, step: int) -> str | None:
        ids = self.get_region_ids()
        if not ids:
            return None
        if self.highlights and self.highlights[-1] in ids:
            index = (ids.index(self.highlights[-1]) + step) % len(ids)
        else:
            index = 0 if step > 0 else len(ids) - 1
        self.highlight(ids[index])
        self.scroll_to_highlight()
        return ids[index]

    def scroll_to_highlight(self) -> None:
        """Scroll so that the first highlighted region is visible."""
        if not self.highlights:
            return
        inner = self.box.inner_rect()
        for info in self.get_regions():
            if info.id not in self.highlights:
                continue
            self.track_end = False
            if info.start_row < self.row_offset or info.start_row >= self.row_offset + inner.height:
                self.row_offset = max(0, info.start_row - inner.height // 2)
            if not self.wrap:
                if info.start_col < self.column_offset or info.end_col > self.column_offset + inner.width:
                    self.column_offset = max(0, info.start_col)
            return

    # ------------------------------------------------------------------
    # Scrolling
    # ------------------------------------------------------------------

    def scroll_to(self, row: int, column: int) -> None:
        if not self.scrollable:
            return
        self.row_offset = max(0, row)
        self.column_offset = max(0, column)
        self.track_end = False

    def scroll_to_beginning(self) -> None:
        if not self.scrollable:
            return
        self.row_offset = 0
        self.column_offset = 0
        self.track_end = False

    def scroll_to_end(self) -> None:
        """Scroll to the bottom and keep following new text."""
        if not self.scrollable:
            return
        self.track_end = True
        self.column_offset = 0

    def get_scroll_offset(self) -> tuple[int, int]:
        return self.row_offset, self.column_offset

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self, screen: ScreenBuffer) -> None:
        super().draw(screen)
        inner = self.box.inner_rect()
        if inner.is_empty():
            return
        rows = self._wrapped(inner.width)
        self._page_size = inner.height

        last_offset = max(0, len(rows) - inner.height)
        if self.track_end or not self.scrollable:
            self.row_offset = last_offset
        else:
            self.row_offset = min(self.row_offset, last_offset)
        if self.wrap:
            self.column_offset = 0
        else:
            widest = max((sum(char_width(r.char) for r in row) for row in rows), default=0)
            self.column_offset = max(0, min(self.column_offset, widest - inner.width))

        highlighted = set(self.highlights)
        with screen.clip(inner):
            for line, row in enumerate(rows[self.row_offset : self.row_offset + inner.height]):
                if highlighted:
                    row = [
                        rune._replace(style=rune.style.add(Attr.REVERSE))
                        if rune.region in highlighted
                        else rune
                        for rune in row
                    ]
                screen.print_runes(
                    inner.x, inner.y + line, row, inner.width, self.align, self.column_offset
                )

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if event.matches("escape", "enter", "tab", "shift+tab"):
            if self.done_func is not None:
                self.done_func(event.key)
                return True
            return False
        if not self.scrollable:
            return False

        page = max(1, self._page_size)
        if event.matches("home", "g"):
            self.scroll_to_beginning()
        elif event.matches("end", "G"):
            self.scroll_to_end()
        elif event.matches("up", "k"):
            self.track_end = False
            self.row_offset = max(0, self.row_offset - 1)
        elif event.matches("down", "j"):
            self.row_offset += 1
        elif event.matches("left", "h"):
            self.column_offset = max(0, self.column_offset - 1)
        elif event.matches("right", "l"):
            self.column_offset += 1
        elif event.matches("pageUp", "ctrl+b"):
            self.track_end = False
            self.row_offset = max(0, self.row_offset - page)
        elif event.matches("pageDown", "ctrl+f"):
            self.row_offset += page
        else:
            return False
        return True

    def on_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        if not self.in_rect(event):
            return False, None
        if event.action is MouseAction.LEFT_DOWN:
            set_focus(self)
            return True, None
        if event.action is MouseAction.LEFT_CLICK and self.regions:
            inner = self.box.inner_rect()
            row = event.y - inner.y + self.row_offset
            col = event.x - inner.x + self.column_offset
            for info in self.get_regions():
                if info.start_row == row == info.end_row and info.start_col <= col < info.end_col:
                    self.highlight(info.id)
                    return True, None
            return False, None
        if event.action is MouseAction.WHEEL_UP and self.scrollable:
            self.track_end = False
            self.row_offset = max(0, self.row_offset - 1)
            return True, None
        if event.action is MouseAction.WHEEL_DOWN and self.scrollable:
            self.row_offset += 1
            return True, None
        return False, None
