"""Column projection for tabular and structured output.

Records are ExtensionRow objects or plain mappings; both answer
``record.get(column, default)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from cv.models.extension import ExtensionRow

    Record = ExtensionRow | Mapping[str, Any]


def parse_columns(value: str) -> list[str]:
    """Split a comma separated column list, dropping blanks."""
    return [col.strip() for col in value.split(",") if col.strip()]


def project_rows(records: Iterable[Record], columns: Sequence[str]) -> list[dict[str, Any]]:
    """Return one dict per record holding exactly *columns*, in that order.

    Columns a record lacks are filled with "".
    """
    return [{col: record.get(col, "") for col in columns} for record in records]


def rows_to_table(records: Iterable[Record], columns: Sequence[str]) -> list[list[str]]:
    """Return one list of display strings per record, ordered like *columns*."""
    table = []
    for record in records:
        cells = []
        for col in columns:
            value = record.get(col, "")
            cells.append("" if value is None else str(value))
        table.append(cells)
    return table
