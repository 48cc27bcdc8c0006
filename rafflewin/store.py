"""Local winner cache backed by SQLAlchemy, mirrored to the Supabase store."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Mapping, Optional

import requests
from sqlalchemy.orm import Session

from .models import Contestant, Winner, normalize_draw_type

if TYPE_CHECKING:
    from .supabase.api import SupabaseClient

logger = logging.getLogger(__name__)


class WinnerStoreError(RuntimeError):
    """Raised when the remote winner store cannot be reached or read."""


class WinnerStore:
    """Persist winners locally and push them to the remote store.

    The local ``winners`` table is the cache every draw consults. The remote
    store is optional: without a client the store runs local-only and every
    new winner stays flagged as unsynced.
    """

    def __init__(self, session: Session, client: Optional["SupabaseClient"] = None) -> None:
        self._session = session
        self._client = client
        # Names reported by the remote store whose rows could not be cached.
        self._unmerged_names: set[str] = set()

    @property
    def has_remote(self) -> bool:
        return self._client is not None

    @property
    def unmerged_names(self) -> set[str]:
        """Remote winner names skipped during the last merge because their rows were malformed."""
        return set(self._unmerged_names)

    def get_winners(self, draw_type: Optional[str] = None) -> list[Winner]:
        """Return the locally cached winners, oldest first."""
        return Winner.get_all(self._session, draw_type)

    def excluded_names(self) -> set[str]:
        """Names that already won in any pool, including unmerged remote winners."""
        return {winner.name for winner in self.get_winners()} | self._unmerged_names

    def get_winners_from_supabase(self) -> list[Winner]:
        """Fetch the remote winners and merge them into the local cache.

        Every row is parsed before anything is written. Malformed rows are
        logged and skipped, but a name they carry still counts as a past
        winner through :meth:`excluded_names`. Remote rows are matched to
        local ones by name: a matching local row is marked synced and an
        unknown name is inserted as a new synced winner.

        Returns
        -------
        list[Winner]
            Local rows corresponding to every well-formed remote winner, in
            remote order.

        Raises
        ------
        WinnerStoreError
            If no client is configured or the request fails.
        """
        if self._client is None:
            raise WinnerStoreError("No remote winner store is configured")

        try:
            rows = self._client.fetch_winners()
        except (requests.RequestException, RuntimeError) as exc:
            raise WinnerStoreError(f"Failed to fetch remote winners: {exc}") from exc
        if not isinstance(rows, list):
            raise WinnerStoreError(f"Unexpected remote winners payload: {rows!r}")

        parsed: list[Winner] = []
        unmerged: set[str] = set()
        for row in rows:
            try:
                if not isinstance(row, Mapping):
                    raise TypeError("row is not an object")
                parsed.append(Winner.from_remote(row))
            except (AttributeError, TypeError, ValueError) as exc:
                name = row.get("name") if isinstance(row, Mapping) else None
                if isinstance(name, str) and name.strip():
                    unmerged.add(name.strip())
                logger.warning(f"Skipping malformed remote winner row {row!r}: {exc}")
        self._unmerged_names = unmerged

        merged: list[Winner] = []
        for remote in parsed:
            local = Winner.get_by_name(self._session, remote.name)
            if local is None:
                self._session.add(remote)
                local = remote
            else:
                local.synced = True
                if remote.remote_id is not None:
                    local.remote_id = remote.remote_id
            merged.append(local)

        self._session.flush()
        logger.debug(
            f"Merged {len(merged)} remote winner(s) into the local cache, "
            f"skipped {len(rows) - len(parsed)}"
        )
        return merged

    def add_winner(
        self,
        contestant: Contestant,
        draw_type: str,
        *,
        draw_date: Optional[datetime] = None,
    ) -> Winner:
        """Persist ``contestant`` as a winner of ``draw_type``.

        The winner is written to the local cache first. A failed remote write
        is logged and leaves the row with ``synced = False`` so the outcome is
        never lost; :meth:`sync_pending` retries it later.

        Raises
        ------
        ValueError
            If ``contestant`` already won a previous draw.
        """
        draw_type = normalize_draw_type(draw_type)
        if Winner.get_by_name(self._session, contestant.name) is not None:
            raise ValueError(f"'{contestant.name}' has already won a draw")

        winner = Winner.from_contestant(contestant, draw_type, draw_date=draw_date)
        self._session.add(winner)
        self._session.flush()

        self._push(winner)
        return winner

    def sync_pending(self) -> int:
        """Retry pushing every unsynced winner; return how many succeeded."""
        if self._client is None:
            return 0
        synced = 0
        for winner in Winner.get_unsynced(self._session):
            if self._push(winner):
                synced += 1
        return synced

    def _push(self, winner: Winner) -> bool:
        if self._client is None:
            return False
        try:
            stored = self._client.insert_winner(winner.to_json())
        except (requests.RequestException, RuntimeError) as exc:
            logger.warning(
                f"Winner '{winner.name}' saved locally but not synced: {exc}"
            )
            return False

        remote_id = stored.get("id") if isinstance(stored, dict) else None
        winner.synced = True
        if remote_id is not None:
            winner.remote_id = str(remote_id)
        self._session.flush()
        return True


__all__ = ["WinnerStore", "WinnerStoreError"]
