from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import func, inspect, select

from rafflewin.db.engine import get_sessionmaker, make_engine
from rafflewin.models import DRAW_TYPES, Contestant, Winner


def upgrade_db(target_revision: str = "head", database_url: Optional[str] = None) -> None:
    """Apply Alembic migrations up to the requested revision."""
    project_root = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    if database_url:
        alembic_cfg.attributes["database_url"] = database_url
    command.upgrade(alembic_cfg, target_revision)


def print_summary(database_url: Optional[str] = None) -> None:
    """Print the tables and the contestant/winner counts of each pool."""
    engine = make_engine(database_url)
    insp = inspect(engine)
    print("Current tables:", ", ".join(sorted(insp.get_table_names())))

    Session = get_sessionmaker(engine)
    with Session() as session:
        for draw_type in DRAW_TYPES:
            contestants = session.scalar(
                select(func.count(Contestant.id)).where(Contestant.draw_type == draw_type)
            )
            winners = session.scalar(
                select(func.count(Winner.id)).where(Winner.draw_type == draw_type)
            )
            print(f"{draw_type}: {contestants} contestant(s), {winners} winner(s)")


def main() -> None:
    """Apply migrations and report the resulting schema."""
    parser = argparse.ArgumentParser(description="Migrate the raffle database.")
    parser.add_argument("--revision", default="head", help="Alembic target revision")
    parser.add_argument("--database-url", default=None, help="Override DB_URL")
    args = parser.parse_args()

    upgrade_db(args.revision, args.database_url)
    print_summary(args.database_url)


if __name__ == "__main__":
    main()
