"""Draw pool tags shared by contestants and winners."""

from __future__ import annotations

DISCOVERY_70 = "discovery-70"
DISCOVERY_80 = "discovery-80"

DRAW_TYPES: tuple[str, ...] = (DISCOVERY_70, DISCOVERY_80)


def normalize_draw_type(value: str) -> str:
    """Return ``value`` trimmed and lower-cased, rejecting unknown pool tags.

    Parameters
    ----------
    value : str
        Raw draw type, e.g. ``"Discovery-70"``.

    Raises
    ------
    TypeError
        If ``value`` is not a string.
    ValueError
        If the normalized value is not one of :data:`DRAW_TYPES`.
    """
    if not isinstance(value, str):
        raise TypeError("draw_type must be a string")
    normalized = value.strip().lower()
    if normalized not in DRAW_TYPES:
        raise ValueError(
            f"Unknown draw type '{value}'; expected one of {', '.join(DRAW_TYPES)}"
        )
    return normalized


__all__ = ["DISCOVERY_70", "DISCOVERY_80", "DRAW_TYPES", "normalize_draw_type"]
