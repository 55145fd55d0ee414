"""Markdown table codec for the proposal budget editor.

The budget is persisted as a three-column markdown table (item, description, value).
Cell text is escaped with HTML entities so ``|``, line breaks and edge whitespace
survive a round trip.
"""

import re
import sys
from dataclasses import dataclass, field
from typing import List, Optional

COLUMNS = [
    ("item", "Item"),
    ("description", "Descrição"),
    ("value", "Valor (R$)"),
]
COLUMN_KEYS = [key for key, _ in COLUMNS]

_ESCAPES = {"&": "&amp;", "|": "&#124;", "\n": "&#10;", "\r": "&#13;"}
_ESCAPE_RE = re.compile(r"[&|\n\r]")
_EDGE_WHITESPACE_RE = re.compile(r"^\s+|\s+$")
_UNESCAPE_RE = re.compile(r"&(?:amp|#\d{1,7});")


@dataclass
class BudgetRow:
    """One line item of the budget table. ``id`` is a client-side sequence number."""

    item: str = ""
    description: str = ""
    value: str = ""
    id: int = field(default=0, compare=False)


def escape_cell(text: str) -> str:
    """Escape a cell so it survives the pipe split and the trim in ``decode``.

    ``&``, ``|`` and line breaks become entities anywhere; whitespace at either
    edge becomes numeric entities (``&#32;`` for a space, ``&#9;`` for a tab).
    """
    escaped = _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(0)], text or "")
    return _EDGE_WHITESPACE_RE.sub(lambda m: "".join(f"&#{ord(ch)};" for ch in m.group(0)), escaped)


def _unescape_entity(match) -> str:
    entity = match.group(0)
    if entity == "&amp;":
        return "&"
    code = int(entity[2:-1])
    return chr(code) if code <= sys.maxunicode else entity


def unescape_cell(text: str) -> str:
    return _UNESCAPE_RE.sub(_unescape_entity, text)


def _split_row(line: str) -> List[str]:
    line = line.strip()
    if line.startswith("|"):
        line = line[1:]
    if line.endswith("|"):
        line = line[:-1]
    cells = [unescape_cell(cell.strip()) for cell in line.split("|")]
    cells += [""] * (len(COLUMNS) - len(cells))
    return cells[: len(COLUMNS)]


def decode(markdown: str) -> List[BudgetRow]:
    """Parse a markdown budget table into rows.

    The first two lines (header and separator) are skipped. Blank lines between data
    rows are ignored; missing trailing cells are filled with empty strings.

    Args:
        markdown: Markdown table text

    Returns:
        Rows in table order, numbered from 1
    """
    if not markdown:
        return []

    lines = markdown.strip().split("\n")
    if len(lines) < 2:
        return []

    rows = []
    for line in lines[2:]:
        if not line.strip():
            continue
        item, description, value = _split_row(line)
        rows.append(BudgetRow(item=item, description=description, value=value, id=len(rows) + 1))
    return rows


def encode(rows: List[BudgetRow]) -> str:
    """Render rows as a markdown table; an empty sequence yields an empty string."""
    if not rows:
        return ""

    header = "| " + " | ".join(label for _, label in COLUMNS) + " |"
    separator = "| " + " | ".join("---" for _ in COLUMNS) + " |"
    lines = [header, separator]
    for row in rows:
        cells = [escape_cell(getattr(row, key)) for key in COLUMN_KEYS]
        lines.append("| " + " | ".join(cells) + " |")
    return "\n".join(lines)


class BudgetTableEditor:
    """Editable budget rows backed by their markdown form."""

    def __init__(self, markdown: str = ""):
        self.load(markdown)

    def load(self, markdown: str) -> None:
        """Replace the current rows with the rows decoded from ``markdown``."""
        self.rows = decode(markdown)
        self._next_id = len(self.rows) + 1

    @property
    def markdown(self) -> str:
        return encode(self.rows)

    def add_row(self, item: str = "", description: str = "", value: str = "") -> BudgetRow:
        row = BudgetRow(item=item, description=description, value=value, id=self._next_id)
        self._next_id += 1
        self.rows.append(row)
        return row

    def remove_row(self, row_id: int) -> bool:
        remaining = [row for row in self.rows if row.id != row_id]
        removed = len(remaining) != len(self.rows)
        self.rows = remaining
        return removed

    def update_cell(self, row_id: int, column: str, value: str) -> BudgetRow:
        if column not in COLUMN_KEYS:
            raise ValueError(f"Unknown budget column: {column}")
        row = self._find(row_id)
        if row is None:
            raise KeyError(row_id)
        setattr(row, column, value)
        return row

    def _find(self, row_id: int) -> Optional[BudgetRow]:
        for row in self.rows:
            if row.id == row_id:
                return row
        return None
