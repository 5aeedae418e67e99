from bw_locations.search.index import (
    GroupedResult,
    PlotHit,
    SearchIndex,
    SettlementHit,
    WardHit,
    parse_search_type,
)
from bw_locations.search.sequence import SearchSequencer
from bw_locations.search.suggestions import Suggestion, suggest

__all__ = [
    "GroupedResult",
    "PlotHit",
    "SearchIndex",
    "SearchSequencer",
    "SettlementHit",
    "Suggestion",
    "WardHit",
    "parse_search_type",
    "suggest",
]
