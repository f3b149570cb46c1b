"""MarkerReconciler - Central owner of the live marker collection.

Keeps the markers shown on the map consistent with:
- Nearby search results for the current search center (full replace)
- Geocoded locations typed by the user (append)
- The durable favourites of the current identity (derived is_favourite flags)
- Favourite toggles from the details panel

Invariants:
- No two live markers share an id (MarkerCollection enforces it).
- Every live marker's is_favourite equals "a favourite with the same
  geographic identity exists for the current identity".
- Results of a superseded request (a clear() or newer center arrived while
  the provider was answering) are discarded, never applied.

The reconciler never imports Streamlit. The presentation layer reads
get_live_markers() snapshots and mutates only through the operations below.
"""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from placefinder.model.exceptions import MarkerNotFoundError, NotAuthenticatedError, PlaceFinderError
from placefinder.model.identity import Identity
from placefinder.model.marker import Marker, MarkerId, synthesize_marker_id
from placefinder.model.position import GeoKey, Position
from placefinder.model.search_state import SearchStateMachine

if TYPE_CHECKING:
    from placefinder.core.geocoder import Geocoder
    from placefinder.core.place_search import PlaceSearchProvider
    from placefinder.model.favourites_store import FavouritesStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a favourite toggle.

    Attributes:
        marker_id: Marker the user toggled
        position: Its position (the favourites key)
        is_favourite: New favourite state
        affected_ids: Every live marker flipped (all markers at that position)
    """

    marker_id: MarkerId
    position: Position
    is_favourite: bool
    affected_ids: tuple[MarkerId, ...]


class MarkerCollection:
    """Versioned, id-unique collection of markers.

    Insertion order is display order. Every mutation increments ``version``.
    Only MarkerReconciler mutates it; everyone else sees snapshot() tuples.
    """

    def __init__(self, markers: Iterable[Marker] = ()) -> None:
        self._markers: dict[MarkerId, Marker] = {}
        self.version = 0
        self.replace(markers=markers)

    def __len__(self) -> int:
        return len(self._markers)

    def __contains__(self, marker_id: object) -> bool:
        return marker_id in self._markers

    def snapshot(self) -> tuple[Marker, ...]:
        return tuple(self._markers.values())

    def get(self, marker_id: MarkerId) -> Marker | None:
        return self._markers.get(marker_id)

    def ids(self) -> set[MarkerId]:
        return set(self._markers)

    def replace(self, markers: Iterable[Marker]) -> int:
        """Replace all markers. Later markers with an already-seen id are dropped.

        Returns:
            Number of dropped duplicates.
        """
        new_markers: dict[MarkerId, Marker] = {}
        dropped = 0
        for marker in markers:
            if marker.id in new_markers:
                dropped += 1
                continue
            new_markers[marker.id] = marker
        self._markers = new_markers
        self.version += 1
        return dropped

    def append(self, marker: Marker) -> None:
        if marker.id in self._markers:
            raise ValueError(f"Marker id {marker.id!r} already in collection")
        self._markers[marker.id] = marker
        self.version += 1

    def clear(self) -> None:
        self._markers = {}
        self.version += 1

    def set_favourite(self, geo_key: GeoKey, is_favourite: bool) -> tuple[MarkerId, ...]:
        """Set the flag on every marker at ``geo_key``. Returns their ids."""
        affected = []
        for marker_id, marker in self._markers.items():
            if marker.geo_key == geo_key:
                self._markers[marker_id] = marker.with_favourite(is_favourite)
                affected.append(marker_id)
        self.version += 1
        return tuple(affected)

    def recompute_favourites(self, favourite_keys: set[GeoKey]) -> int:
        """Re-derive every flag from ``favourite_keys``. Returns number of changed markers."""
        changed = 0
        for marker_id, marker in self._markers.items():
            updated = marker.with_favourite(marker.geo_key in favourite_keys)
            if updated is not marker:
                self._markers[marker_id] = updated
                changed += 1
        self.version += 1
        return changed


class MarkerReconciler:
    """Owns the live marker collection and the search state machine.

    Also acts as a SessionContext listener: after_sign_in/after_sign_out keep
    the current identity used for favourite flag lookups.

    Example:
        reconciler = MarkerReconciler(geocoder=geocoder, place_search=provider, store=store)
        reconciler.set_search_center(location=Position(lat=52.23, lng=21.01))
        markers = reconciler.run_pending_search()
    """

    def __init__(
        self,
        geocoder: "Geocoder",
        place_search: "PlaceSearchProvider",
        store: "FavouritesStore",
        initial_markers: Iterable[Marker] = (),
        search_sm: SearchStateMachine | None = None,
    ) -> None:
        """Initialize reconciler.

        Args:
            geocoder: Resolves location text to a position
            place_search: Nearby search provider
            store: Durable favourites
            initial_markers: Markers shown before the first search (flags recomputed)
            search_sm: Search state machine (created with logging listener if None)
        """
        self.geocoder = geocoder
        self.place_search = place_search
        self.store = store
        self._lock = threading.RLock()
        self._identity: Identity | None = None
        self._collection = MarkerCollection(markers=(m.with_favourite(False) for m in initial_markers))
        if search_sm is None:
            search_sm, _ = SearchStateMachine.create()
        self._search_sm = search_sm

    # =========================================================================
    # Read-only Access
    # =========================================================================

    def get_live_markers(self) -> tuple[Marker, ...]:
        """Read-only snapshot of the live collection in display order."""
        with self._lock:
            return self._collection.snapshot()

    def get_marker(self, marker_id: MarkerId) -> Marker | None:
        with self._lock:
            return self._collection.get(marker_id)

    @property
    def version(self) -> int:
        """Incremented on every collection mutation."""
        return self._collection.version

    @property
    def current_identity(self) -> Identity | None:
        return self._identity

    @property
    def search_center(self) -> Position:
        return self._search_sm.context.center

    @property
    def search_radius_m(self) -> int:
        return self._search_sm.context.radius_m

    @property
    def is_search_pending(self) -> bool:
        return self._search_sm.is_pending

    def _is_current(self, generation: int) -> bool:
        return self._search_sm.context.generation == generation

    def _is_search_owed(self, generation: int) -> bool:
        """True while the search issued at ``generation`` is still pending.

        False once a newer request or clear bumped the generation, or another
        caller already completed the same search.
        """
        return self._search_sm.is_pending and self._is_current(generation)

    def _favourite_keys(self) -> set[GeoKey]:
        return self.store.keys(identity=self._identity)

    # =========================================================================
    # Search Operations
    # =========================================================================

    def set_search_center(self, location: Position) -> None:
        """Replace the search center and mark a search as pending (no provider call)."""
        with self._lock:
            self._search_sm.request_search(center=location)
            logger.info(f"[SEARCH] Center set to {location}, search pending")

    def run_pending_search(self) -> tuple[Marker, ...]:
        """Run the pending nearby search and replace the live collection with its results.

        No-op returning the current collection when no search is pending.

        Returns:
            The live collection after the operation.

        Raises:
            PlaceFinderError: Provider (or favourites lookup) failure. The collection
                is unchanged and the pending flag is cleared.
        """
        with self._lock:
            if not self._search_sm.is_pending:
                return self._collection.snapshot()
            context = self._search_sm.context
            generation, center, radius_m = context.generation, context.center, context.radius_m

        # Provider call runs outside the lock; the collection is untouched meanwhile
        try:
            records = list(self.place_search.search_nearby(center=center, radius_m=radius_m))
        except PlaceFinderError as e:
            with self._lock:
                if not self._is_search_owed(generation):
                    logger.warning(f"[SEARCH] Ignoring failure of superseded search at {center}: {e}")
                    return self._collection.snapshot()
                self._search_sm.complete_search()
            logger.error(f"[SEARCH] Nearby search at {center} failed: {e}")
            raise

        with self._lock:
            if not self._is_search_owed(generation):
                logger.info(f"[SEARCH] Discarding {len(records)} result(s) of superseded search at {center}")
                return self._collection.snapshot()
            try:
                favourite_keys = self._favourite_keys()
            finally:
                self._search_sm.complete_search()

            markers = [
                Marker.from_place_record(record=record, is_favourite=record.position.key in favourite_keys)
                for record in records
            ]
            dropped = self._collection.replace(markers=markers)
            if dropped:
                logger.info(f"[SEARCH] Dropped {dropped} duplicate place id(s)")
            logger.info(f"[SEARCH] Live collection replaced with {len(self._collection)} marker(s)")
            return self._collection.snapshot()

    def geocode_and_append(self, location_text: str) -> Marker | None:
        """Geocode ``location_text``, append a marker there and mark a search pending.

        Returns:
            The appended marker, or None if the answer was superseded and discarded.

        Raises:
            GeocodeNotFoundError: No match. Collection unchanged.
            ProviderError: Geocoder failure. Collection unchanged.
        """
        text = location_text.strip()
        with self._lock:
            generation = self._search_sm.context.generation

        position = self.geocoder.geocode(text=text)

        with self._lock:
            if not self._is_current(generation):
                logger.info(f"[GEOCODE] Discarding superseded result for {text!r}")
                return None
            marker = Marker(
                id=synthesize_marker_id(taken=self._collection.ids()),
                name=text,
                position=position,
                is_favourite=position.key in self._favourite_keys(),
            )
            self._collection.append(marker=marker)
            self._search_sm.request_search(center=position)
            logger.info(f"[GEOCODE] Appended {marker}, search pending")
            return marker

    def clear(self) -> None:
        """Empty the live collection and drop any pending search. Favourites untouched."""
        with self._lock:
            self._collection.clear()
            self._search_sm.reset_search()
            logger.info("[SEARCH] Live collection cleared")

    # =========================================================================
    # Favourite Operations
    # =========================================================================

    def toggle_favourite(self, marker_id: MarkerId, acting_identity: Identity | None) -> ToggleResult:
        """Flip the favourite state of a marker's position for ``acting_identity``.

        Every live marker at the same position flips together. Live flags are
        derived for current_identity, so only that identity may toggle.

        Raises:
            NotAuthenticatedError: If acting_identity is None or is not the
                current identity. Nothing changes.
            MarkerNotFoundError: If marker_id is not live.
        """
        if acting_identity is None:
            raise NotAuthenticatedError(action="add places to favourites")

        with self._lock:
            if self._identity is None or acting_identity.key != self._identity.key:
                logger.warning(
                    f"[FAVOURITES] Rejected toggle by {acting_identity.key!r}, current identity is {self._identity}"
                )
                raise NotAuthenticatedError(action="add places to favourites")
            marker = self._collection.get(marker_id)
            if marker is None:
                raise MarkerNotFoundError(marker_id=marker_id)

            is_favourite = self.store.toggle(identity=acting_identity, entry=marker)
            affected = self._collection.set_favourite(geo_key=marker.geo_key, is_favourite=is_favourite)

        logger.info(
            f"[FAVOURITES] {marker.name!r} {'added to' if is_favourite else 'removed from'} favourites "
            f"({len(affected)} live marker(s) updated)"
        )
        return ToggleResult(
            marker_id=marker_id,
            position=marker.position,
            is_favourite=is_favourite,
            affected_ids=affected,
        )

    def load_favourites_view(self, acting_identity: Identity | None) -> tuple[Marker, ...]:
        """Replace the live collection with all favourites of ``acting_identity``.

        Stored snapshots may share ids (ids are not the favourites key); later
        duplicates get fresh synthesized ids.

        Raises:
            NotAuthenticatedError: If acting_identity is None.
        """
        if acting_identity is None:
            raise NotAuthenticatedError(action="see your favourites")

        favourites = self.store.get(identity=acting_identity)
        with self._lock:
            markers = []
            taken: set[MarkerId] = set()
            for entry in favourites:
                if entry.id in taken:
                    entry = entry.with_id(synthesize_marker_id(taken=taken))
                taken.add(entry.id)
                markers.append(entry.with_favourite(True))
            self._collection.replace(markers=markers)
            logger.info(f"[FAVOURITES] Showing {len(markers)} favourite(s) of {acting_identity.key!r}")
            return self._collection.snapshot()

    def refresh_favourite_flags(self) -> int:
        """Re-derive every live flag for the current identity. Returns number changed."""
        with self._lock:
            return self._collection.recompute_favourites(favourite_keys=self._favourite_keys())

    # =========================================================================
    # Session Listener
    # =========================================================================

    def after_sign_in(self, identity: Identity) -> None:
        """Session hook: remember identity and show its favourites."""
        self._identity = identity
        self.load_favourites_view(acting_identity=identity)

    def after_sign_out(self, identity: Identity) -> None:
        """Session hook: forget identity. Flags are left for the caller to refresh."""
        self._identity = None

    def __repr__(self) -> str:
        return (
            f"MarkerReconciler(markers={len(self._collection)}, version={self.version}, "
            f"search={self._search_sm.get_state_name()}, identity={self._identity})"
        )
