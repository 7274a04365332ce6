"""The function-key help bar."""

from dataclasses import dataclass

from fdbexplorer.components import Cell
from fdbexplorer.display import format_duration
from fdbexplorer.interval import IntervalControl
from fdbexplorer.process import SortControl

HELP_KEY_TEXT = ("Sort", "Snapshot", "Interval", "-", "Refresh", "-", "Include", "Exclude")


@dataclass
class HelpKeys:
    """A one-row table describing what each function key does."""

    sorter: SortControl
    interval: IntervalControl
    has_em: bool = False

    def get_cell(self, row, column):
        label = HELP_KEY_TEXT[column]
        if column == 0:
            text = f"{label} ({self.sorter.sort_name()})"
        elif column == 2:
            seconds = self.interval.duration().total_seconds()
            text = f"{label} ({format_duration(seconds)})"
        elif column in (6, 7):
            text = label if self.has_em else "-"
        else:
            text = label
        return Cell(text=f"F{column + 1} [black:darkcyan]{text}[:-]")

    def row_count(self):
        return 1

    def column_count(self):
        return len(HELP_KEY_TEXT)