from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

from rafflewin.db.engine import get_sessionmaker, make_engine
from rafflewin.draw import DEFAULT_SELECTION_REGISTRY, NoPositiveWeightError
from rafflewin.export import export_to_csv
from rafflewin.models import DRAW_TYPES, Base
from rafflewin.roster import import_roster
from rafflewin.store import WinnerStore
from rafflewin.workflows import run_raffle_draw

logger = logging.getLogger("rafflewin.run_draw")


def _build_client(local_only: bool):
    if local_only:
        return None
    from rafflewin.supabase.api import SupabaseClient

    try:
        return SupabaseClient()
    except ValueError as exc:
        logger.warning(f"Remote store disabled: {exc}")
        return None


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Draw raffle winners for one pool.")
    parser.add_argument("draw_type", choices=DRAW_TYPES)
    parser.add_argument("count", type=int, help="number of winners to draw")
    parser.add_argument("--roster", type=Path, help="CSV roster to import first")
    parser.add_argument("--export", type=Path, help="CSV file or directory for results")
    parser.add_argument("--seed", type=int, help="seed for a reproducible draw")
    parser.add_argument(
        "--algorithm",
        default="cumulative_scan",
        choices=sorted(DEFAULT_SELECTION_REGISTRY.available_algorithms()),
    )
    parser.add_argument("--local-only", action="store_true", help="skip Supabase")
    parser.add_argument("--database-url", default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    engine = make_engine(args.database_url)
    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)
    rng = random.Random(args.seed) if args.seed is not None else None

    with Session.begin() as session:
        if args.roster is not None:
            import_roster(session, args.roster, args.draw_type)

        store = WinnerStore(session, _build_client(args.local_only))
        try:
            outcome = run_raffle_draw(
                session,
                args.draw_type,
                args.count,
                store=store,
                rng=rng,
                algorithm_key=args.algorithm,
            )
        except NoPositiveWeightError as exc:
            logger.error(f"Draw failed: {exc}")
            return 1

        if not outcome.winners:
            print(f"No contestants available in {args.draw_type}.")
            return 0

        for position, winner in enumerate(outcome.winners, start=1):
            flag = "" if winner.synced else " (not synced)"
            print(f"{position}. {winner.name} - {winner.department or '-'}{flag}")

        if args.export is not None:
            export_to_csv(outcome.winners, args.export)
    return 0


if __name__ == "__main__":
    sys.exit(main())
