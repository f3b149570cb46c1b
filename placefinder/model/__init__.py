"""Data model classes for Place Finder.

Separates location (where a place is) from presentation (what is shown):
- Position: Geometry atom (lat, lng) and geographic identity
- PlaceRecord: Raw result from a place search provider
- Marker: Point of interest shown on the map (wraps Position)
- Identity: Signed-in user
- FavouritesStore: Durable per-identity favourites
- SearchStateMachine: Idle/Pending gate for nearby searches
- MarkerReconciler: Central owner of the live marker collection
- SessionContext: Current identity with sign-in/sign-out listeners
"""

from placefinder.model.exceptions import (
    AuthFailedError,
    FavouritesStoreError,
    GeocodeNotFoundError,
    MarkerNotFoundError,
    NotAuthenticatedError,
    PlaceFinderError,
    ProviderError,
)
from placefinder.model.favourites_store import FavouritesStore
from placefinder.model.identity import Identity
from placefinder.model.marker import Marker, MarkerId, synthesize_marker_id
from placefinder.model.marker_reconciler import MarkerCollection, MarkerReconciler, ToggleResult
from placefinder.model.place_record import PlaceRecord
from placefinder.model.position import GeoKey, Position
from placefinder.model.search_state import SearchContext, SearchStateMachine
from placefinder.model.session import SessionContext

__all__ = [
    "Position",
    "GeoKey",
    "PlaceRecord",
    "Marker",
    "MarkerId",
    "synthesize_marker_id",
    "Identity",
    "FavouritesStore",
    "SearchContext",
    "SearchStateMachine",
    "MarkerCollection",
    "MarkerReconciler",
    "ToggleResult",
    "SessionContext",
    "PlaceFinderError",
    "GeocodeNotFoundError",
    "ProviderError",
    "NotAuthenticatedError",
    "AuthFailedError",
    "MarkerNotFoundError",
    "FavouritesStoreError",
]
