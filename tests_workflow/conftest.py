"""Shared pytest fixtures for placefinder workflow tests.

Workflow tests drive the action layer (ui/actions.py) the way the sidebar,
map and details panel do, with in-memory geocoder and place search services
and a real FavouritesStore in a temporary directory.

Minimal fixtures: one wired-up session per test.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import pytest

from placefinder.core.identity_provider import LocalIdentityProvider
from placefinder.model.exceptions import GeocodeNotFoundError, PlaceFinderError
from placefinder.model.favourites_store import FavouritesStore
from placefinder.model.marker_reconciler import MarkerReconciler
from placefinder.model.place_record import PlaceRecord
from placefinder.model.position import Position
from placefinder.model.search_state import SearchContext, SearchStateMachine
from placefinder.model.session import SessionContext
from placefinder.ui.context import ClickDeduplicationContext, UIContext


class TableGeocoder:
    """Answers from a dict of known locations."""

    def __init__(self, locations: dict[str, Position]) -> None:
        self.locations = locations

    def geocode(self, text: str) -> Position:
        if text not in self.locations:
            raise GeocodeNotFoundError(location_text=text)
        return self.locations[text]


class GridPlaceSearch:
    """Returns places at fixed offsets around any center.

    Place ids derive from the rounded center, so the same center always
    yields the same ids and positions (like a real provider).
    """

    OFFSETS = [(0.01, 0.0), (0.0, 0.01), (-0.01, -0.01)]

    def __init__(self) -> None:
        self.error: PlaceFinderError | None = None
        self.calls = 0

    def search_nearby(self, center: Position, radius_m: int) -> Iterator[PlaceRecord]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        for i, (dlat, dlng) in enumerate(self.OFFSETS):
            yield PlaceRecord(
                id=f"{center.lat:.3f},{center.lng:.3f}#{i}",
                position=Position(lat=round(center.lat + dlat, 6), lng=round(center.lng + dlng, 6)),
                name=f"Church {i}",
                types=("church",),
            )


@dataclass
class Workflow:
    """Everything one browser session works with."""

    reconciler: MarkerReconciler
    session: SessionContext
    ui: UIContext
    store: FavouritesStore
    place_search: GridPlaceSearch


KRAKOW = Position(lat=50.0614, lng=19.9372)
WARSAW = Position(lat=52.2297, lng=21.0122)


def make_workflow(store: FavouritesStore) -> Workflow:
    """Wire reconciler, session and UI context like app.init_session_state."""
    place_search = GridPlaceSearch()
    search_sm, _ = SearchStateMachine.create(add_logging_listener=False)
    reconciler = MarkerReconciler(
        geocoder=TableGeocoder(locations={"Kraków": KRAKOW, "Warsaw": WARSAW}),
        place_search=place_search,
        store=store,
        search_sm=search_sm,
    )
    session = SessionContext(identity_provider=LocalIdentityProvider())
    session.add_listener(reconciler)
    ui = UIContext(click_dedup=ClickDeduplicationContext(debounce_seconds=0))
    return Workflow(reconciler=reconciler, session=session, ui=ui, store=store, place_search=place_search)


@pytest.fixture
def store(tmp_path: Path) -> FavouritesStore:
    return FavouritesStore(path=tmp_path / "favourites.json")


@pytest.fixture
def workflow(store: FavouritesStore) -> Workflow:
    return make_workflow(store=store)


@pytest.fixture
def second_workflow(store: FavouritesStore) -> Workflow:
    """Another browser session sharing the same favourites store."""
    return make_workflow(store=store)


@pytest.fixture
def sm_and_ctx() -> tuple[SearchStateMachine, SearchContext]:
    """Fresh search state machine without logging listener."""
    return SearchStateMachine.create(add_logging_listener=False)
