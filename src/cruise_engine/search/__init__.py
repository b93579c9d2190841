"""Search criteria, the filter/sort pipeline and the search session."""

from .criteria import SORT_OPTIONS, SearchCriteria
from .pipeline import collect_destinations, filter_and_sort, sort_ships, total_available_cabins
from .session import SearchResult, SearchSession, StaleSearchError

__all__ = [
    "SORT_OPTIONS",
    "SearchCriteria",
    "SearchResult",
    "SearchSession",
    "StaleSearchError",
    "collect_destinations",
    "filter_and_sort",
    "sort_ships",
    "total_available_cabins",
]
