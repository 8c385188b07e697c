"""Table content: the data source behind a :class:`~cellview.components.table.Table`.

A table never owns its data directly.  It asks a :class:`TableContent` for
individual cells and for the row and column counts, which may be
:data:`UNBOUNDED` for virtual sources (a spreadsheet, a log, a generated
sequence).  Only the cells that are about to be drawn are requested.

Editing is a separate capability: contents whose ``editable`` flag is
``True`` also implement :class:`EditableTableContent`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Union, runtime_checkable

from cellview.style import Style
from cellview.utils import Align

__all__ = [
    "Finite",
    "Unbounded",
    "UNBOUNDED",
    "Count",
    "count_value",
    "TableCell",
    "TableContent",
    "EditableTableContent",
    "TableContentReadOnly",
    "MemoryTableContent",
    "column_label",
]


# ---------------------------------------------------------------------------
# Counts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Finite:
    n: int


class Unbounded:
    """Marker for a row or column count with no upper limit."""

    _instance: Unbounded | None = None

    def __new__(cls) -> Unbounded:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNBOUNDED"


UNBOUNDED = Unbounded()
Count = Union[Finite, Unbounded]


def count_value(count: Count) -> int | None:
    """The integer value of a finite count, ``None`` when unbounded."""
    if isinstance(count, Finite):
        return count.n
    return None


# ---------------------------------------------------------------------------
# Cells
# ---------------------------------------------------------------------------


@dataclass
class TableCell:
    """One table cell.

    ``text`` may contain style tags.  ``max_width`` of 0 means no limit;
    ``expansion`` is the weight with which the column grows into spare
    width.  ``selected_style`` overrides the inverted style used when the
    cell is selected.
    """

    text: str = ""
    align: Align = Align.LEFT
    max_width: int = 0
    expansion: int = 0
    style: Style = field(default_factory=lambda: Style(fg="white"))
    selected_style: Style | None = None
    selectable: bool = True
    reference: Any = None


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class TableContent(Protocol):
    """Read access to a table's cells."""

    editable: bool

    def get_cell(self, row: int, column: int) -> TableCell | None: ...

    def get_row_count(self) -> Count: ...

    def get_column_count(self) -> Count: ...


@runtime_checkable
class EditableTableContent(TableContent, Protocol):
    """Table content that can be modified through the table."""

    def set_cell(self, row: int, column: int, cell: TableCell | None) -> None: ...

    def remove_row(self, row: int) -> None: ...

    def remove_column(self, column: int) -> None: ...

    def insert_row(self, row: int) -> None: ...

    def insert_column(self, column: int) -> None: ...

    def clear(self) -> None: ...


class TableContentReadOnly:
    """Base class for read-only, usually virtual, table contents.

    Subclasses implement :meth:`get_cell` and the two count methods.
    """

    editable = False

    def get_cell(self, row: int, column: int) -> TableCell | None:
        return None

    def get_row_count(self) -> Count:
        return Finite(0)

    def get_column_count(self) -> Count:
        return Finite(0)


class MemoryTableContent:
    """Editable in-memory table content, the default for a ``Table``."""

    editable = True

    def __init__(self) -> None:
        self._rows: list[list[TableCell | None]] = []
        self._columns = 0

    def get_cell(self, row: int, column: int) -> TableCell | None:
        if 0 <= row < len(self._rows) and 0 <= column < len(self._rows[row]):
            return self._rows[row][column]
        return None

    def set_cell(self, row: int, column: int, cell: TableCell | None) -> None:
        if row < 0 or column < 0:
            return
        while len(self._rows) <= row:
            self._rows.append([])
        cells = self._rows[row]
        if len(cells) <= column:
            cells.extend([None] * (column + 1 - len(cells)))
        cells[column] = cell
        self._columns = max(self._columns, column + 1)

    def get_row_count(self) -> Count:
        return Finite(len(self._rows))

    def get_column_count(self) -> Count:
        return Finite(self._columns)

    def remove_row(self, row: int) -> None:
        if 0 <= row < len(self._rows):
            del self._rows[row]

    def remove_column(self, column: int) -> None:
        if not 0 <= column < self._columns:
            return
        for cells in self._rows:
            if column < len(cells):
                del cells[column]
        self._columns -= 1

    def insert_row(self, row: int) -> None:
        """Insert an empty row before *row*.  Past the end, one row is appended."""
        if row < 0:
            return
        self._rows.insert(min(row, len(self._rows)), [])

    def insert_column(self, column: int) -> None:
        """Insert an empty column before *column*.  Past the end, one column is appended."""
        if column < 0:
            return
        for cells in self._rows:
            if column < len(cells):
                cells.insert(column, None)
        self._columns += 1

    def clear(self) -> None:
        self._rows = []
        self._columns = 0


def column_label(index: int) -> str:
    """Spreadsheet column label for a zero-based index: A..Z, AA..ZZ, AAA..."""
    label = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        label = chr(ord("A") + remainder) + label
    return label
