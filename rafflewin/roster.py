"""Contestant source: pool lookups and roster CSV import."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Optional, Union

from sqlalchemy.orm import Session

from .models import Contestant, normalize_draw_type

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("name", "tickets")
OPTIONAL_COLUMNS = ("department", "supervisor", "draw_type")


class ContestantSource:
    """Read contestant pools from the database."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_all_contestants(self, draw_type: str) -> list[Contestant]:
        """Return every contestant belonging to ``draw_type``."""
        return Contestant.get_all_by_draw_type(self._session, draw_type)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_roster(path: Union[str, Path], draw_type: Optional[str] = None) -> list[dict]:
    """Parse a roster CSV into contestant dictionaries.

    Header names are matched case-insensitively. ``name`` and ``tickets`` are
    required; ``draw_type`` is required unless supplied as an argument, in
    which case it overrides the column.

    Raises
    ------
    ValueError
        On missing columns, blank names, non-integer or negative tickets, or
        a name repeated within the same pool.
    """
    path = Path(path)
    default_draw_type = normalize_draw_type(draw_type) if draw_type else None

    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"Roster '{path}' is empty")
        header = {name.strip().lower(): name for name in reader.fieldnames if name}

        missing = [c for c in REQUIRED_COLUMNS if c not in header]
        if default_draw_type is None and "draw_type" not in header:
            missing.append("draw_type")
        if missing:
            raise ValueError(
                f"Roster '{path}' is missing required column(s): {', '.join(missing)}"
            )

        entries: list[dict] = []
        seen: set[tuple[str, str]] = set()
        # Header is line 1.
        for line_no, raw in enumerate(reader, start=2):
            row = {key: _clean(raw.get(original)) for key, original in header.items()}
            name = row.get("name")
            if not name:
                raise ValueError(f"{path}:{line_no}: name is blank")

            try:
                tickets = int(row.get("tickets") or "")
            except ValueError:
                raise ValueError(
                    f"{path}:{line_no}: tickets must be an integer"
                ) from None
            if tickets < 0:
                raise ValueError(f"{path}:{line_no}: tickets must not be negative")

            pool = default_draw_type or normalize_draw_type(row.get("draw_type") or "")
            if (name, pool) in seen:
                raise ValueError(f"{path}:{line_no}: duplicate name '{name}' in {pool}")
            seen.add((name, pool))

            entries.append(
                {
                    "name": name,
                    "department": row.get("department"),
                    "supervisor": row.get("supervisor"),
                    "tickets": tickets,
                    "draw_type": pool,
                }
            )
    return entries


def import_roster(
    session: Session,
    path: Union[str, Path],
    draw_type: Optional[str] = None,
) -> list[Contestant]:
    """Upsert the contestants listed in a roster CSV.

    Existing contestants (same name and pool) get their metadata and tickets
    updated; new names are inserted.
    """
    contestants: list[Contestant] = []
    created = 0
    for entry in load_roster(path, draw_type):
        contestant = Contestant.get_by_name(session, entry["name"], entry["draw_type"])
        if contestant is None:
            contestant = Contestant(**entry)
            session.add(contestant)
            created += 1
        else:
            contestant.department = entry["department"]
            contestant.supervisor = entry["supervisor"]
            contestant.tickets = entry["tickets"]
        contestants.append(contestant)

    session.flush()
    logger.info(
        f"Imported {len(contestants)} contestant(s) from {path} ({created} new)"
    )
    return contestants


__all__ = ["ContestantSource", "import_roster", "load_roster"]
