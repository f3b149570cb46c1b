"""Smoke tests for module imports and configuration validation.

Quick tests that verify the system is correctly installed and configured.
"""

import pytest

# =============================================================================
# MODULE IMPORT TESTS
# =============================================================================


class TestModuleImports:
    """Parametrized smoke tests for module imports."""

    @pytest.mark.parametrize(
        "module_path,class_name",
        [
            # Core modules
            pytest.param("placefinder.core.geo_calculator", "GeoCalculator", id="core_geo"),
            pytest.param("placefinder.core.geocoder", "GoogleGeocoder", id="core_geocoder"),
            pytest.param("placefinder.core.place_search", "GooglePlacesProvider", id="core_places"),
            pytest.param("placefinder.core.identity_provider", "GoogleIdentityProvider", id="core_identity"),
            # Model modules
            pytest.param("placefinder.model.position", "Position", id="model_position"),
            pytest.param("placefinder.model.marker", "Marker", id="model_marker"),
            pytest.param("placefinder.model.favourites_store", "FavouritesStore", id="model_store"),
            pytest.param("placefinder.model.marker_reconciler", "MarkerReconciler", id="model_reconciler"),
            pytest.param("placefinder.model.search_state", "SearchStateMachine", id="model_statemachine"),
            pytest.param("placefinder.model.session", "SessionContext", id="model_session"),
            # UI modules
            pytest.param("placefinder.ui.click_detector", "ClickDetector", id="ui_detector"),
            pytest.param("placefinder.ui.context", "UIContext", id="ui_context"),
            pytest.param("placefinder.ui.center_map", "MapRenderer", id="ui_map"),
            pytest.param("placefinder.ui.left_panel", "SidebarRenderer", id="ui_sidebar"),
            pytest.param("placefinder.ui.right_panel", "MarkerDetailsPanel", id="ui_details"),
        ],
    )
    def test_module_import(self, module_path: str, class_name: str) -> None:
        """Module can be imported without errors."""
        import importlib

        module = importlib.import_module(module_path)
        cls = getattr(module, class_name)
        assert cls is not None

    def test_app_module_imports(self) -> None:
        """app.py defines its entry point without running it on import."""
        import importlib

        app = importlib.import_module("placefinder.app")
        assert callable(app.main)


# =============================================================================
# CONFIGURATION VALIDATION TESTS
# =============================================================================


class TestConfigurationValidation:
    """Tests that configuration constants are valid and consistent."""

    def test_start_center_is_valid_position(self) -> None:
        from placefinder.constants import MapConfig
        from placefinder.model.position import Position

        Position(lat=MapConfig.START_CENTER_LAT, lng=MapConfig.START_CENTER_LNG)

    def test_seed_markers_parse_with_unique_ids(self) -> None:
        from placefinder.constants import MapConfig
        from placefinder.model.marker import Marker

        markers = [Marker.from_dict(data=data) for data in MapConfig.SEED_MARKERS]
        assert markers
        assert len({m.id for m in markers}) == len(markers)

    def test_search_zoom_closer_than_default(self) -> None:
        from placefinder.constants import MapConfig

        assert MapConfig.SEARCH_ZOOM > MapConfig.DEFAULT_ZOOM

    def test_click_types_are_distinct(self) -> None:
        from placefinder.constants import ClickConfig

        assert ClickConfig.TYPE_PLACE != ClickConfig.TYPE_SEARCH_AREA

    def test_positive_search_radius(self) -> None:
        from placefinder.constants import SearchConfig

        assert SearchConfig.DEFAULT_RADIUS_M > 0
