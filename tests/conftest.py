"""Shared pytest fixtures for placefinder tests.

Provides fake collaborators (geocoder, place search) and reusable test data.
All fixtures use explicit values with documented rationale.

COORDINATES:
    Tests use real places in Poland so distances and the seed markers stay
    recognizable: Church A sits at the program start center (51.9194, 19.1451).
"""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from placefinder.model.exceptions import GeocodeNotFoundError, PlaceFinderError
from placefinder.model.favourites_store import FavouritesStore
from placefinder.model.identity import Identity
from placefinder.model.marker import Marker
from placefinder.model.marker_reconciler import MarkerReconciler
from placefinder.model.place_record import PlaceRecord
from placefinder.model.position import Position
from placefinder.model.search_state import SearchStateMachine

# =============================================================================
# FAKE COLLABORATORS
# =============================================================================


class FakeGeocoder:
    """Geocoder answering from a fixed table.

    Attributes:
        locations: text -> Position; unknown text raises GeocodeNotFoundError
        error: If set, raised on every call instead of answering
        on_call: Invoked with the text before answering (simulates work that
            happens while the request is in flight)
        calls: Texts geocoded so far
    """

    def __init__(self, locations: dict[str, Position] | None = None) -> None:
        self.locations = dict(locations or {})
        self.error: PlaceFinderError | None = None
        self.on_call: Callable[[str], None] | None = None
        self.calls: list[str] = []

    def geocode(self, text: str) -> Position:
        self.calls.append(text)
        if self.on_call is not None:
            self.on_call(text)
        if self.error is not None:
            raise self.error
        if text not in self.locations:
            raise GeocodeNotFoundError(location_text=text)
        return self.locations[text]


class FakePlaceSearchProvider:
    """Place search returning a configurable list of records.

    Attributes:
        results: Records returned for every search
        error: If set, raised on every call
        on_call: Invoked with (center, radius_m) before answering
        calls: (center, radius_m) of every search so far
    """

    def __init__(self, results: list[PlaceRecord] | None = None) -> None:
        self.results = list(results or [])
        self.error: PlaceFinderError | None = None
        self.on_call: Callable[[Position, int], None] | None = None
        self.calls: list[tuple[Position, int]] = []

    def search_nearby(self, center: Position, radius_m: int) -> Iterator[PlaceRecord]:
        self.calls.append((center, radius_m))
        if self.on_call is not None:
            self.on_call(center, radius_m)
        if self.error is not None:
            raise self.error
        return iter(list(self.results))


# =============================================================================
# POSITIONS AND RECORDS
# =============================================================================


@pytest.fixture
def warsaw() -> Position:
    return Position(lat=52.2297, lng=21.0122)


@pytest.fixture
def church_a_position() -> Position:
    """Church A at the program start center."""
    return Position(lat=51.9194, lng=19.1451)


@pytest.fixture
def church_a(church_a_position: Position) -> Marker:
    """The marker used in the favourites round-trip example (id 7)."""
    return Marker(id=7, name="Church A", position=church_a_position)


@pytest.fixture
def warsaw_records() -> list[PlaceRecord]:
    """Three churches around Warsaw; the first and third share no position."""
    return [
        PlaceRecord(
            id="p1",
            position=Position(lat=52.2319, lng=21.0067),
            name="St. John's Archcathedral",
            types=("church", "place_of_worship"),
            vicinity="Świętojańska 8, Warszawa",
            opening_hours_text=("Monday: 10:00 – 17:00", "Tuesday: 10:00 – 17:00"),
        ),
        PlaceRecord(id="p2", position=Position(lat=52.2400, lng=21.0150)),
        PlaceRecord(id="p3", position=Position(lat=52.2250, lng=21.0200), name="Holy Cross Church"),
    ]


# =============================================================================
# IDENTITIES
# =============================================================================


@pytest.fixture
def jan() -> Identity:
    return Identity(display_name="Jan")


@pytest.fixture
def anna() -> Identity:
    return Identity(display_name="Anna", subject="google-sub-anna")


# =============================================================================
# SERVICES
# =============================================================================


@pytest.fixture
def favourites_path(tmp_path: Path) -> Path:
    return tmp_path / "favourites.json"


@pytest.fixture
def store(favourites_path: Path) -> FavouritesStore:
    """Empty store backed by a fresh temporary file."""
    return FavouritesStore(path=favourites_path)


@pytest.fixture
def geocoder(warsaw: Position) -> FakeGeocoder:
    return FakeGeocoder(locations={"Warsaw": warsaw})


@pytest.fixture
def place_search(warsaw_records: list[PlaceRecord]) -> FakePlaceSearchProvider:
    return FakePlaceSearchProvider(results=warsaw_records)


@pytest.fixture
def reconciler(
    geocoder: FakeGeocoder,
    place_search: FakePlaceSearchProvider,
    store: FavouritesStore,
) -> MarkerReconciler:
    """Reconciler with an empty live collection and no logging listener."""
    search_sm, _ = SearchStateMachine.create(add_logging_listener=False)
    return MarkerReconciler(geocoder=geocoder, place_search=place_search, store=store, search_sm=search_sm)


FlagCheck = Callable[[MarkerReconciler, Identity | None], None]


@pytest.fixture
def assert_flags_consistent(store: FavouritesStore) -> FlagCheck:
    """Checker: every live flag equals "favourite exists at this position for identity"."""

    def check(reconciler: MarkerReconciler, identity: Identity | None) -> None:
        keys = store.keys(identity=identity)
        for marker in reconciler.get_live_markers():
            assert marker.is_favourite == (marker.geo_key in keys), marker

    return check
