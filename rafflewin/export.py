"""CSV export of drawn winners."""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from .models import Winner, normalize_draw_type

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = (
    "name",
    "department",
    "supervisor",
    "tickets",
    "draw_type",
    "draw_date",
    "synced",
)

# Leading characters spreadsheets treat as the start of a formula.
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")
TEXT_COLUMNS = ("name", "department", "supervisor")


def _neutralize(value: str) -> str:
    if value.startswith(FORMULA_PREFIXES):
        return "'" + value
    return value


def default_export_filename(
    draw_type: Optional[str] = None, when: Optional[datetime] = None
) -> str:
    """Return e.g. ``raffle-winners-discovery-70-2026-10-16.csv``."""
    when = when or datetime.now(timezone.utc)
    pool = normalize_draw_type(draw_type) if draw_type else "all"
    return f"raffle-winners-{pool}-{when:%Y-%m-%d}.csv"


def export_to_csv(
    winners: Iterable[Winner], path: Optional[Union[str, Path]] = None
) -> str:
    """Serialize ``winners`` to CSV, one row per winner.

    Parameters
    ----------
    winners : Iterable[Winner]
        Winners to export, written in the given order.
    path : Optional[Union[str, Path]], default: None
        When given, the CSV is also written to this file. A directory path
        receives a file named by :func:`default_export_filename`.

    Returns
    -------
    str
        The CSV document.
    """
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()

    count = 0
    draw_types: set[str] = set()
    for winner in winners:
        row = winner.to_json()
        for column in TEXT_COLUMNS:
            row[column] = _neutralize(row[column] or "")
        row["synced"] = "yes" if winner.synced else "no"
        writer.writerow(row)
        draw_types.add(winner.draw_type)
        count += 1

    text = buffer.getvalue()
    if path is not None:
        target = Path(path)
        if target.is_dir():
            pool = draw_types.pop() if len(draw_types) == 1 else None
            target = target / default_export_filename(pool)
        target.write_text(text, encoding="utf-8", newline="")
        logger.info(f"Exported {count} winner(s) to {target}")
    return text


__all__ = ["EXPORT_COLUMNS", "default_export_filename", "export_to_csv"]
