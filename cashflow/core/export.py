"""CSV export of a projection record sequence."""

from __future__ import annotations

import csv
import io
import math
from typing import List, Sequence

from cashflow.core.projection import ProjectionRecord

DEFAULT_HEADERS = ["Year", "Expense", "Return", "End Principal"]


def round_half_up(value: float):
    """Round to the nearest whole unit, halves towards +infinity (2.5 -> 3, -2.5 -> -2)."""
    if not math.isfinite(value):
        return value
    return math.floor(value + 0.5)


def records_to_rows(
    records: Sequence[ProjectionRecord],
    headers: Sequence[str] = DEFAULT_HEADERS,
) -> List[list]:
    """Header row, then [year, expense, growth, endPrincipal] per record in whole units."""
    rows: List[list] = [list(headers)]
    for record in records:
        rows.append(
            [
                record.year,
                round_half_up(record.expense),
                round_half_up(record.growth),
                round_half_up(record.endPrincipal),
            ]
        )
    return rows


def build_csv(rows: Sequence[Sequence[object]]) -> str:
    """
    Serialize rows to CSV text.

    Text fields are always wrapped in double quotes with embedded quotes
    doubled ('q"q' -> '"q""q"'); numbers are written bare. Rows are joined
    with '\\n' and there is no trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerows(rows)

    text = buffer.getvalue()
    if text.endswith("\n"):
        text = text[:-1]
    return text
