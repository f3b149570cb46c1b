"""Tests for MarkerReconciler - the live marker collection owner.

Covers:
- Derived favourite flag consistency after every operation
- Toggle idempotence and co-located propagation
- Full replace (search) vs append (geocode)
- Unauthenticated mutation rejection
- Favourites view round-trip
- Discarding results of superseded requests
- Provider failures leaving the collection unchanged

Note: Fake collaborators and fixtures are defined in conftest.py.
"""

import tempfile
import threading
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from hypothesis import given, settings, strategies as st

from placefinder.model.exceptions import (
    GeocodeNotFoundError,
    MarkerNotFoundError,
    NotAuthenticatedError,
    ProviderError,
)
from placefinder.model.favourites_store import FavouritesStore
from placefinder.model.identity import Identity
from placefinder.model.marker import Marker
from placefinder.model.marker_reconciler import MarkerReconciler
from placefinder.model.place_record import PlaceRecord
from placefinder.model.position import Position
from placefinder.model.search_state import SearchStateMachine

if TYPE_CHECKING:
    from conftest import FakeGeocoder, FakePlaceSearchProvider, FlagCheck


def _search(reconciler: MarkerReconciler, center: Position) -> tuple[Marker, ...]:
    reconciler.set_search_center(location=center)
    return reconciler.run_pending_search()


# =============================================================================
# SEARCH: FULL REPLACE
# =============================================================================


class TestSearch:
    def test_set_center_only_marks_pending(
        self, reconciler: MarkerReconciler, place_search: "FakePlaceSearchProvider", warsaw: Position
    ) -> None:
        reconciler.set_search_center(location=warsaw)
        assert reconciler.is_search_pending
        assert reconciler.search_center == warsaw
        assert place_search.calls == []

    def test_run_replaces_collection_with_results(
        self, reconciler: MarkerReconciler, place_search: "FakePlaceSearchProvider", warsaw: Position
    ) -> None:
        markers = _search(reconciler=reconciler, center=warsaw)
        assert [m.id for m in markers] == ["p1", "p2", "p3"]
        assert place_search.calls == [(warsaw, 5000)]
        assert not reconciler.is_search_pending

    def test_second_search_replaces_not_merges(
        self,
        reconciler: MarkerReconciler,
        place_search: "FakePlaceSearchProvider",
        warsaw: Position,
        church_a_position: Position,
    ) -> None:
        _search(reconciler=reconciler, center=warsaw)
        place_search.results = [PlaceRecord(id="q1", position=church_a_position, name="Church A")]
        markers = _search(reconciler=reconciler, center=church_a_position)
        assert [m.id for m in markers] == ["q1"]

    def test_empty_result_empties_collection(
        self, reconciler: MarkerReconciler, place_search: "FakePlaceSearchProvider", warsaw: Position
    ) -> None:
        _search(reconciler=reconciler, center=warsaw)
        place_search.results = []
        assert _search(reconciler=reconciler, center=warsaw) == ()

    def test_nothing_pending_is_noop(
        self, reconciler: MarkerReconciler, place_search: "FakePlaceSearchProvider"
    ) -> None:
        assert reconciler.run_pending_search() == ()
        assert place_search.calls == []

    def test_duplicate_provider_ids_first_wins(
        self, reconciler: MarkerReconciler, place_search: "FakePlaceSearchProvider", warsaw: Position
    ) -> None:
        place_search.results = [
            PlaceRecord(id="d", position=Position(lat=52.0, lng=21.0), name="first"),
            PlaceRecord(id="d", position=Position(lat=52.1, lng=21.0), name="second"),
        ]
        markers = _search(reconciler=reconciler, center=warsaw)
        assert [(m.id, m.name) for m in markers] == [("d", "first")]

    def test_provider_error_leaves_collection_and_clears_pending(
        self, reconciler: MarkerReconciler, place_search: "FakePlaceSearchProvider", warsaw: Position
    ) -> None:
        before = _search(reconciler=reconciler, center=warsaw)
        version = reconciler.version
        place_search.error = ProviderError("OVER_QUERY_LIMIT")
        reconciler.set_search_center(location=warsaw)
        with pytest.raises(ProviderError):
            reconciler.run_pending_search()
        assert reconciler.get_live_markers() == before
        assert reconciler.version == version
        assert not reconciler.is_search_pending

    def test_results_flagged_from_current_identity(
        self,
        reconciler: MarkerReconciler,
        store: FavouritesStore,
        jan: Identity,
        warsaw: Position,
        warsaw_records: list[PlaceRecord],
        assert_flags_consistent: "FlagCheck",
    ) -> None:
        store.add(identity=jan, entry=Marker.from_place_record(record=warsaw_records[2]))
        reconciler.after_sign_in(identity=jan)
        markers = _search(reconciler=reconciler, center=warsaw)
        assert [m.is_favourite for m in markers] == [False, False, True]
        assert_flags_consistent(reconciler, jan)


# =============================================================================
# GEOCODE: APPEND
# =============================================================================


class TestGeocodeAndAppend:
    def test_appends_marker_and_marks_pending(
        self, reconciler: MarkerReconciler, warsaw: Position, church_a: Marker
    ) -> None:
        reconciler = MarkerReconciler(
            geocoder=reconciler.geocoder,
            place_search=reconciler.place_search,
            store=reconciler.store,
            initial_markers=[church_a],
            search_sm=SearchStateMachine.create(add_logging_listener=False)[0],
        )
        marker = reconciler.geocode_and_append(location_text="  Warsaw ")
        assert marker is not None
        live = reconciler.get_live_markers()
        assert live[0] is reconciler.get_marker(marker_id=7)
        assert live[-1] == marker
        assert len(live) == 2
        assert marker.name == "Warsaw" and marker.position == warsaw
        assert isinstance(marker.id, int) and marker.id != 7
        assert reconciler.is_search_pending and reconciler.search_center == warsaw

    def test_not_found_leaves_collection(
        self, reconciler: MarkerReconciler, geocoder: "FakeGeocoder"
    ) -> None:
        version = reconciler.version
        with pytest.raises(GeocodeNotFoundError) as excinfo:
            reconciler.geocode_and_append(location_text="Atlantis")
        assert excinfo.value.location_text == "Atlantis"
        assert reconciler.get_live_markers() == ()
        assert reconciler.version == version
        assert not reconciler.is_search_pending

    def test_provider_error_leaves_collection(self, reconciler: MarkerReconciler, geocoder: "FakeGeocoder") -> None:
        geocoder.error = ProviderError("REQUEST_DENIED")
        with pytest.raises(ProviderError):
            reconciler.geocode_and_append(location_text="Warsaw")
        assert reconciler.get_live_markers() == ()

    def test_appended_marker_flag_from_favourites(
        self,
        reconciler: MarkerReconciler,
        store: FavouritesStore,
        jan: Identity,
        warsaw: Position,
    ) -> None:
        store.add(identity=jan, entry=Marker(id=1, name="Old Town", position=warsaw))
        reconciler.after_sign_in(identity=jan)
        marker = reconciler.geocode_and_append(location_text="Warsaw")
        assert marker is not None and marker.is_favourite is True

    def test_clear_while_geocoding_discards_result(
        self, reconciler: MarkerReconciler, geocoder: "FakeGeocoder"
    ) -> None:
        geocoder.on_call = lambda text: reconciler.clear()
        assert reconciler.geocode_and_append(location_text="Warsaw") is None
        assert reconciler.get_live_markers() == ()
        assert not reconciler.is_search_pending


# =============================================================================
# STALE RESULTS
# =============================================================================


class TestSupersededSearch:
    def test_clear_during_search_discards_results(
        self, reconciler: MarkerReconciler, place_search: "FakePlaceSearchProvider", warsaw: Position
    ) -> None:
        reconciler.set_search_center(location=warsaw)
        place_search.on_call = lambda center, radius_m: reconciler.clear()
        assert reconciler.run_pending_search() == ()
        assert reconciler.get_live_markers() == ()
        assert not reconciler.is_search_pending

    def test_newer_center_during_search_discards_results(
        self,
        reconciler: MarkerReconciler,
        place_search: "FakePlaceSearchProvider",
        warsaw: Position,
        church_a_position: Position,
    ) -> None:
        reconciler.set_search_center(location=warsaw)
        place_search.on_call = lambda center, radius_m: reconciler.set_search_center(location=church_a_position)
        assert reconciler.run_pending_search() == ()
        assert reconciler.is_search_pending
        assert reconciler.search_center == church_a_position

        place_search.on_call = None
        markers = reconciler.run_pending_search()
        assert len(markers) == 3
        assert place_search.calls[-1] == (church_a_position, 5000)

    def test_failure_of_superseded_search_is_ignored(
        self,
        reconciler: MarkerReconciler,
        place_search: "FakePlaceSearchProvider",
        warsaw: Position,
        church_a_position: Position,
    ) -> None:
        reconciler.set_search_center(location=warsaw)

        def supersede_then_fail(center: Position, radius_m: int) -> None:
            reconciler.set_search_center(location=church_a_position)
            raise ProviderError("timeout")

        place_search.on_call = supersede_then_fail
        assert reconciler.run_pending_search() == ()
        assert reconciler.is_search_pending

    def test_concurrent_runs_of_same_search_complete_once(
        self, reconciler: MarkerReconciler, place_search: "FakePlaceSearchProvider", warsaw: Position
    ) -> None:
        """Both callers reach the provider before either completes; the later one is discarded."""
        barrier = threading.Barrier(2, timeout=5)
        place_search.on_call = lambda center, radius_m: barrier.wait()
        reconciler.set_search_center(location=warsaw)

        errors: list[Exception] = []

        def run() -> None:
            try:
                reconciler.run_pending_search()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=run) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert errors == []
        assert len(place_search.calls) == 2
        assert not reconciler.is_search_pending
        assert [m.id for m in reconciler.get_live_markers()] == ["p1", "p2", "p3"]

    def test_concurrent_failures_of_same_search_raise_once(
        self, reconciler: MarkerReconciler, place_search: "FakePlaceSearchProvider", warsaw: Position
    ) -> None:
        barrier = threading.Barrier(2, timeout=5)
        place_search.on_call = lambda center, radius_m: barrier.wait()
        place_search.error = ProviderError("timeout")
        reconciler.set_search_center(location=warsaw)

        errors: list[Exception] = []

        def run() -> None:
            try:
                reconciler.run_pending_search()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=run) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert [type(e) for e in errors] == [ProviderError]
        assert not reconciler.is_search_pending


# =============================================================================
# CLEAR
# =============================================================================


class TestClear:
    def test_clear_keeps_favourites(
        self, reconciler: MarkerReconciler, store: FavouritesStore, jan: Identity, warsaw: Position
    ) -> None:
        reconciler.after_sign_in(identity=jan)
        markers = _search(reconciler=reconciler, center=warsaw)
        reconciler.toggle_favourite(marker_id=markers[0].id, acting_identity=jan)
        reconciler.clear()
        assert reconciler.get_live_markers() == ()
        assert len(store.get(identity=jan)) == 1

    def test_clear_drops_pending_search(self, reconciler: MarkerReconciler, warsaw: Position) -> None:
        reconciler.set_search_center(location=warsaw)
        reconciler.clear()
        assert not reconciler.is_search_pending


# =============================================================================
# FAVOURITES
# =============================================================================


class TestToggleFavourite:
    def test_toggle_pair_is_identity(
        self,
        reconciler: MarkerReconciler,
        store: FavouritesStore,
        jan: Identity,
        warsaw: Position,
        assert_flags_consistent: "FlagCheck",
    ) -> None:
        reconciler.after_sign_in(identity=jan)
        before = _search(reconciler=reconciler, center=warsaw)
        first = reconciler.toggle_favourite(marker_id="p1", acting_identity=jan)
        assert first.is_favourite is True and first.affected_ids == ("p1",)
        assert store.contains(identity=jan, position=first.position)
        assert_flags_consistent(reconciler, jan)

        second = reconciler.toggle_favourite(marker_id="p1", acting_identity=jan)
        assert second.is_favourite is False
        assert store.get(identity=jan) == []
        assert reconciler.get_live_markers() == before

    def test_colocated_markers_flip_together(
        self,
        reconciler: MarkerReconciler,
        place_search: "FakePlaceSearchProvider",
        jan: Identity,
        church_a_position: Position,
        assert_flags_consistent: "FlagCheck",
    ) -> None:
        place_search.results = [
            PlaceRecord(id=1, position=church_a_position, name="Church A"),
            PlaceRecord(id="ChIJ-a", position=church_a_position, name="Church A (Places)"),
            PlaceRecord(id=2, position=Position(lat=50.0614, lng=19.9372), name="Church B"),
        ]
        reconciler.after_sign_in(identity=jan)
        _search(reconciler=reconciler, center=church_a_position)

        result = reconciler.toggle_favourite(marker_id="ChIJ-a", acting_identity=jan)
        assert set(result.affected_ids) == {1, "ChIJ-a"}
        assert [m.is_favourite for m in reconciler.get_live_markers()] == [True, True, False]
        assert_flags_consistent(reconciler, jan)

    def test_signed_out_is_rejected(
        self, reconciler: MarkerReconciler, store: FavouritesStore, warsaw: Position
    ) -> None:
        before = _search(reconciler=reconciler, center=warsaw)
        version = reconciler.version
        with pytest.raises(NotAuthenticatedError):
            reconciler.toggle_favourite(marker_id="p1", acting_identity=None)
        assert reconciler.get_live_markers() == before
        assert reconciler.version == version
        assert not store.path.exists()

    def test_other_identity_is_rejected(
        self,
        reconciler: MarkerReconciler,
        store: FavouritesStore,
        jan: Identity,
        anna: Identity,
        warsaw: Position,
        assert_flags_consistent: "FlagCheck",
    ) -> None:
        """Live flags belong to the signed-in identity; nobody else may flip them."""
        reconciler.after_sign_in(identity=jan)
        before = _search(reconciler=reconciler, center=warsaw)
        version = reconciler.version
        with pytest.raises(NotAuthenticatedError):
            reconciler.toggle_favourite(marker_id="p1", acting_identity=anna)
        assert reconciler.get_live_markers() == before
        assert reconciler.version == version
        assert store.get(identity=anna) == []
        assert store.get(identity=jan) == []
        assert_flags_consistent(reconciler, jan)

    def test_toggle_before_sign_in_hook_is_rejected(
        self, reconciler: MarkerReconciler, store: FavouritesStore, jan: Identity, warsaw: Position
    ) -> None:
        _search(reconciler=reconciler, center=warsaw)
        with pytest.raises(NotAuthenticatedError):
            reconciler.toggle_favourite(marker_id="p1", acting_identity=jan)
        assert store.get(identity=jan) == []

    def test_unknown_marker(self, reconciler: MarkerReconciler, jan: Identity) -> None:
        reconciler.after_sign_in(identity=jan)
        with pytest.raises(MarkerNotFoundError):
            reconciler.toggle_favourite(marker_id="nope", acting_identity=jan)


class TestFavouritesView:
    def test_round_trip(
        self,
        reconciler: MarkerReconciler,
        place_search: "FakePlaceSearchProvider",
        store: FavouritesStore,
        jan: Identity,
        church_a: Marker,
    ) -> None:
        """Favourite {id 7, "Church A", (51.9194, 19.1451)} for Jan comes back as exactly that marker."""
        place_search.results = [PlaceRecord(id=7, position=church_a.position, name="Church A")]
        reconciler.after_sign_in(identity=jan)
        _search(reconciler=reconciler, center=church_a.position)
        reconciler.toggle_favourite(marker_id=7, acting_identity=jan)
        [stored] = store.get(identity=jan)
        assert (stored.id, stored.name, stored.position) == (7, "Church A", church_a.position)

        reconciler.clear()
        view = reconciler.load_favourites_view(acting_identity=jan)
        assert len(view) == 1
        assert (view[0].id, view[0].name, view[0].position, view[0].is_favourite) == (
            7,
            "Church A",
            church_a.position,
            True,
        )

    def test_requires_identity(self, reconciler: MarkerReconciler) -> None:
        with pytest.raises(NotAuthenticatedError):
            reconciler.load_favourites_view(acting_identity=None)

    def test_colliding_stored_ids_get_fresh_ids(
        self, reconciler: MarkerReconciler, store: FavouritesStore, jan: Identity
    ) -> None:
        store.add(identity=jan, entry=Marker(id=5, name="A", position=Position(lat=50.0, lng=20.0)))
        store.add(identity=jan, entry=Marker(id=5, name="B", position=Position(lat=51.0, lng=20.0)))
        view = reconciler.load_favourites_view(acting_identity=jan)
        assert [m.name for m in view] == ["A", "B"]
        assert view[0].id == 5 and view[1].id != 5

    def test_sign_in_hook_loads_view_and_sign_out_clears_identity(
        self,
        reconciler: MarkerReconciler,
        store: FavouritesStore,
        jan: Identity,
        church_a: Marker,
        assert_flags_consistent: "FlagCheck",
    ) -> None:
        store.add(identity=jan, entry=church_a)
        reconciler.after_sign_in(identity=jan)
        assert reconciler.current_identity == jan
        assert [m.id for m in reconciler.get_live_markers()] == [7]

        reconciler.after_sign_out(identity=jan)
        assert reconciler.current_identity is None
        assert reconciler.refresh_favourite_flags() == 1
        assert_flags_consistent(reconciler, None)


# =============================================================================
# PROPERTY: FLAGS STAY CONSISTENT
# =============================================================================


class _StaticSearch:
    def __init__(self, records: list[PlaceRecord]) -> None:
        self.records = records

    def search_nearby(self, center: Position, radius_m: int) -> list[PlaceRecord]:
        return list(self.records)


class _NoGeocoder:
    def geocode(self, text: str) -> Position:
        raise GeocodeNotFoundError(location_text=text)


class TestFlagConsistencyHypothesis:
    """Property-based tests.

    Note: Hypothesis doesn't work well with function-scoped pytest fixtures, so
    these tests build their store in a TemporaryDirectory.
    """

    # Four places, two of them at the same position under different ids
    PLACES = [
        PlaceRecord(id="a", position=Position(lat=52.0, lng=21.0)),
        PlaceRecord(id="a-dup", position=Position(lat=52.0, lng=21.0)),
        PlaceRecord(id="b", position=Position(lat=52.1, lng=21.0)),
        PlaceRecord(id="c", position=Position(lat=52.2, lng=21.0)),
    ]

    @given(
        operations=st.lists(
            st.one_of(
                st.tuples(st.just("toggle"), st.sampled_from(["a", "a-dup", "b", "c"])),
                st.tuples(st.just("search"), st.none()),
                st.tuples(st.just("view"), st.none()),
            ),
            max_size=12,
        )
    )
    @settings(max_examples=30, deadline=None)
    def test_flags_match_store_after_any_sequence(self, operations: list[tuple[str, str | None]]) -> None:
        identity = Identity(display_name="Jan")
        with tempfile.TemporaryDirectory() as tmp:
            store = FavouritesStore(path=Path(tmp) / "favourites.json")
            reconciler = MarkerReconciler(
                geocoder=_NoGeocoder(),
                place_search=_StaticSearch(records=self.PLACES),
                store=store,
                search_sm=SearchStateMachine.create(add_logging_listener=False)[0],
            )
            reconciler.after_sign_in(identity=identity)
            _search(reconciler=reconciler, center=Position(lat=52.0, lng=21.0))

            for name, marker_id in operations:
                if name == "toggle" and reconciler.get_marker(marker_id=marker_id) is not None:
                    reconciler.toggle_favourite(marker_id=marker_id, acting_identity=identity)
                elif name == "search":
                    _search(reconciler=reconciler, center=Position(lat=52.0, lng=21.0))
                elif name == "view":
                    reconciler.load_favourites_view(acting_identity=identity)

                keys = store.keys(identity=identity)
                for marker in reconciler.get_live_markers():
                    assert marker.is_favourite == (marker.geo_key in keys)
