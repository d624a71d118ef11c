"""
Plain-text report building.

Used to render diff reports for terminals and log files: a boxed title,
a fixed-width metrics table and headed bullet blocks.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence


@dataclass(frozen=True)
class Column:
    """
    Fixed-width table column.

    Attributes:
        name: Header text
        width: Width in characters; longer cell text is cut with "..."
        align: Format alignment ('<' left, '>' right, '^' center)
    """

    name: str
    width: int
    align: str = "<"

    def fit(self, value: Any) -> str:
        text = str(value)
        if len(text) > self.width:
            text = text[: max(self.width - 3, 0)] + "..."
        return f"{text:{self.align}{self.width}}"


class TableFormatter:
    """
    Accumulates the lines of a text report.

    add_* methods return the formatter so blocks can be chained:

        >>> text = TableFormatter([Column("Metric", 10)]).add_section_header("Diff").render()
    """

    def __init__(self, columns: Sequence[Column], total_width: int = 80):
        self.columns = list(columns)
        self.total_width = total_width
        self.lines: List[str] = []

    def _join(self, cells: Iterable[str]) -> str:
        return " ".join(cells).rstrip()

    def add_section_header(self, title: str) -> "TableFormatter":
        rule = "=" * self.total_width
        self.lines.extend([rule, title, rule])
        return self

    def add_subheader(self, title: str) -> "TableFormatter":
        self.lines.extend(["", title, "-" * len(title)])
        return self

    def add_table_header(self) -> "TableFormatter":
        self.lines.append(self._join(column.fit(column.name) for column in self.columns))
        self.lines.append(self._join("-" * column.width for column in self.columns))
        return self

    def add_row(self, values: Sequence[Any]) -> "TableFormatter":
        """
        Append one table row.

        Raises:
            ValueError: If the number of values differs from the number of columns
        """
        if len(values) != len(self.columns):
            raise ValueError(f"Row has {len(values)} values for {len(self.columns)} columns")
        self.lines.append(self._join(column.fit(value) for column, value in zip(self.columns, values)))
        return self

    def add_bullets(self, items: Iterable[str], empty_text: str = "(none)") -> "TableFormatter":
        """Append one "  - item" line per entry, or empty_text when there are none."""
        bullets = [f"  - {item}" for item in items]
        self.lines.extend(bullets or [f"  {empty_text}"])
        return self

    def render(self) -> str:
        return "\n".join(self.lines)


def format_delta(before: int, after: int) -> str:
    """
    Format a count change as "before -> after (+n)".

    Examples:
        >>> format_delta(5, 3)
        '5 -> 3 (-2)'
    """
    return f"{before} -> {after} ({after - before:+d})"
