import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional

from sqlalchemy.orm import Session

from .draw.engine import WeightedDrawEngine, filter_candidates
from .draw.selection import CUMULATIVE_SCAN, SelectionRegistry
from .models import Contestant, Winner, normalize_draw_type
from .roster import ContestantSource
from .store import WinnerStore, WinnerStoreError

if TYPE_CHECKING:
    from .supabase.api import SupabaseClient

logger = logging.getLogger(__name__)


@dataclass
class RaffleDrawOutcome:
    """Value object describing one completed draw.

    Attributes
    ----------
    draw_type : str
        Pool the draw ran against.
    requested : int
        Number of winners the operator asked for.
    winners : list[Winner]
        Persisted winners, first drawn first.
    remote_refreshed : bool
        ``False`` when the remote winner list could not be fetched and the
        exclusion set came from the local cache only.
    """

    draw_type: str
    requested: int
    winners: list[Winner] = field(default_factory=list)
    remote_refreshed: bool = False

    @property
    def unsynced(self) -> list[Winner]:
        """Winners saved locally whose remote write failed."""
        return [winner for winner in self.winners if not winner.synced]


def refresh_winners(store: WinnerStore) -> bool:
    """Pull remote winners into the local cache, tolerating failure.

    Returns ``True`` when the remote fetch succeeded. On failure the error is
    logged and the caller continues with whatever the local cache holds.
    """
    if not store.has_remote:
        return False
    try:
        store.get_winners_from_supabase()
    except WinnerStoreError as exc:
        logger.warning(f"Using cached winners, remote fetch failed: {exc}")
        return False
    return True


def available_contestants(
    session: Session,
    draw_type: str,
    excluded_names: Optional[Iterable[str]] = None,
) -> list[Contestant]:
    """Contestants of ``draw_type`` that have not won yet."""
    pool = ContestantSource(session).get_all_contestants(draw_type)
    return filter_candidates(pool, excluded_names)


def is_draw_available(
    session: Session,
    draw_type: str,
    *,
    store: Optional[WinnerStore] = None,
) -> bool:
    """Return ``True`` when at least one contestant of ``draw_type`` can still win."""
    store = store or WinnerStore(session)
    return bool(available_contestants(session, draw_type, store.excluded_names()))


def run_raffle_draw(
    session: Session,
    draw_type: str,
    count: int,
    *,
    store: Optional[WinnerStore] = None,
    client: Optional["SupabaseClient"] = None,
    rng: Optional[random.Random] = None,
    algorithm_key: str = CUMULATIVE_SCAN,
    registry: Optional[SelectionRegistry] = None,
) -> RaffleDrawOutcome:
    """Draw up to ``count`` new winners from ``draw_type`` and persist them.

    The workflow performs the following steps:

    1. Refresh the local winner cache from the remote store (failures are
       logged and the cached state is used instead).
    2. Derive the excluded names from every recorded winner of any pool.
    3. Run the weighted draw over the remaining contestants.
    4. Persist each winner through :meth:`WinnerStore.add_winner`.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    draw_type : str
        Pool to draw from.
    count : int
        Requested number of winners; clamped to the available contestants.
    store : Optional[WinnerStore], default: None
        Winner store to use. Built from ``session`` and ``client`` if omitted.
    client : Optional[SupabaseClient], default: None
        Remote client used when ``store`` is omitted.
    rng : Optional[random.Random], default: None
        Random generator forwarded to the draw engine.
    algorithm_key : str, default: "cumulative_scan"
        Selection algorithm.
    registry : Optional[SelectionRegistry], default: None
        Optional registry override holding custom algorithms.

    Returns
    -------
    RaffleDrawOutcome
        The persisted winners. Empty when nobody is left to draw.

    Raises
    ------
    ValueError
        If ``count`` is negative or ``draw_type`` is unknown.
    NoPositiveWeightError
        If the remaining contestants all hold zero tickets.
    """
    draw_type = normalize_draw_type(draw_type)
    if count < 0:
        raise ValueError("count must not be negative")

    store = store or WinnerStore(session, client)
    refreshed = refresh_winners(store)

    excluded = store.excluded_names()
    candidates = available_contestants(session, draw_type, excluded)
    outcome = RaffleDrawOutcome(
        draw_type=draw_type, requested=count, remote_refreshed=refreshed
    )
    if not candidates:
        logger.info(f"No contestants left to draw in {draw_type}")
        return outcome

    engine = WeightedDrawEngine(registry=registry, algorithm_key=algorithm_key, rng=rng)
    selected = engine.select(candidates, min(count, len(candidates)))

    for contestant in selected:
        outcome.winners.append(store.add_winner(contestant, draw_type))

    logger.info(
        f"Drew {len(outcome.winners)} winner(s) from {draw_type}: "
        + ", ".join(winner.name for winner in outcome.winners)
    )
    if outcome.unsynced:
        logger.warning(
            f"{len(outcome.unsynced)} winner(s) are not yet synced to the remote store"
        )
    return outcome


__all__ = [
    "RaffleDrawOutcome",
    "available_contestants",
    "is_draw_available",
    "refresh_winners",
    "run_raffle_draw",
]
