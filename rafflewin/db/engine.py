"""Engine and session factories for the raffle database."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .utils import resolve_sqlite_url

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_SQLITE_URL = resolve_sqlite_url(
    os.getenv("DB_URL", "sqlite:///./dev.db"), PROJECT_ROOT
)


def make_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``, falling back to ``DB_URL``.

    Relative SQLite URLs passed in explicitly are resolved against the
    project root the same way as the environment default.
    """
    url = resolve_sqlite_url(database_url, PROJECT_ROOT) if database_url else DEFAULT_SQLITE_URL
    return create_engine(url, echo=echo, future=True)


def get_sessionmaker(engine: Engine) -> sessionmaker:
    # Winners are read back after commit by the scripts and the CSV export.
    return sessionmaker(bind=engine, expire_on_commit=False, future=True)
