"""Generic table, statistics grid and slide show building blocks."""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


class Color(Enum):
    WHITE = "white"
    AQUA = "aqua"
    YELLOW = "yellow"
    GREEN = "green"
    RED = "red"
    BLUE = "blue"
    OLIVE = "olive"
    PURPLE = "purple"


@dataclass(frozen=True)
class Cell:
    """A single rendered table cell."""

    text: str
    color: Color = Color.WHITE
    selectable: bool = True
    expansion: int = 0


@dataclass(frozen=True)
class Column:
    """A named column that renders an item as text and picks its colour."""

    name: str
    data_fn: Callable[[Any], str]
    color_fn: Optional[Callable[[Any], Color]] = None

    def data(self, item):
        return self.data_fn(item)

    def color(self, item):
        if self.color_fn is None:
            return Color.WHITE
        return self.color_fn(item)


class DataTable:
    """Rows of items rendered through columns, with a header in row 0."""

    def __init__(self, columns):
        self._columns = list(columns)
        self._lock = threading.RLock()
        self._data = []

    def update(self, data):
        with self._lock:
            self._data = list(data)

    def get(self, row):
        """The item shown on ``row`` (rows start at 1 below the header)."""
        if row < 1:
            raise IndexError(f"row {row} is not a data row")
        with self._lock:
            return self._data[row - 1]

    def get_cell(self, row, column):
        col = self._columns[column]
        if row == 0:
            return Cell(
                text=col.name,
                color=Color.AQUA,
                selectable=False,
                expansion=1 if len(col.name) > 1 else 0,
            )
        item = self.get(row)
        return Cell(text=col.data(item), color=col.color(item))

    def row_count(self):
        with self._lock:
            return len(self._data) + 1

    def column_count(self):
        return len(self._columns)


class StatsGrid:
    """A grid of named statistics drawn from one data value.

    Each grid entry takes two table columns: its name, then its value.
    """

    def __init__(self, grid, data=None):
        self._grid = [list(row) for row in grid]
        self._lock = threading.RLock()
        self._data = data

    def update(self, data):
        with self._lock:
            self._data = data

    def get_cell(self, row, column):
        actual_col, part = divmod(column, 2)
        stat = self._grid[row][actual_col]
        if part == 0:
            return Cell(text=stat.name, color=Color.YELLOW, expansion=1)
        with self._lock:
            data = self._data
        return Cell(text=stat.data(data), color=stat.color(data), expansion=1)

    def row_count(self):
        return len(self._grid)

    def column_count(self):
        if not self._grid:
            return 0
        return len(self._grid[0]) * 2


class SlideShow:
    """An ordered set of titled pages with one shown at a time."""

    def __init__(self):
        self._slides = []
        self._current = 0

    def add(self, title, page):
        self._slides.append((title, page))

    @property
    def titles(self):
        return [title for title, _ in self._slides]

    @property
    def current(self):
        """Index of the page being shown."""
        return self._current

    @property
    def current_page(self):
        if not self._slides:
            raise IndexError("slide show has no pages")
        return self._slides[self._current][1]

    def next(self):
        self._step(1)

    def prev(self):
        self._step(-1)

    def _step(self, delta):
        if not self._slides:
            raise IndexError("slide show has no pages")
        self._current = (self._current + delta) % len(self._slides)