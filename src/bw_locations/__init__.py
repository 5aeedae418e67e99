"""Package initializer for `bw_locations`."""

from .cascade import CascadeController, CascadeState, LocationSelection
from .errors import DatasetError, LocationError, NotFoundError, ValidationError
from .resolver import ExactMatchResolver
from .search import SearchIndex
from .store import LocationStore, get_store, load_store

__all__ = [
    "CascadeController",
    "CascadeState",
    "DatasetError",
    "ExactMatchResolver",
    "LocationError",
    "LocationSelection",
    "LocationStore",
    "NotFoundError",
    "SearchIndex",
    "ValidationError",
    "get_store",
    "load_store",
]
