"""Name matching helpers shared by every feed join."""

from .names import (
    boat_names_match,
    cabin_matches_any_name,
    cabin_names_match,
    normalize_boat_name,
)

__all__ = [
    "boat_names_match",
    "cabin_matches_any_name",
    "cabin_names_match",
    "normalize_boat_name",
]
