from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .contestant import Contestant  # noqa: F401
from .winner import Winner  # noqa: F401
from .draw_type import (  # noqa: F401
    DISCOVERY_70,
    DISCOVERY_80,
    DRAW_TYPES,
    normalize_draw_type,
)

__all__ = [
    "Base",
    "Contestant",
    "Winner",
    "DISCOVERY_70",
    "DISCOVERY_80",
    "DRAW_TYPES",
    "normalize_draw_type",
]
