"""MapRenderer - Pydeck map rendering for Place Finder.

Renders the live markers on an interactive map using deck.gl:
- OpenStreetMap raster basemap
- Search area around the current search center (ScatterplotLayer in meters)
- Place markers, favourites in red, the selected one outlined (ScatterplotLayer)
- Tooltip with the popup content (name, description, address, opening hours)

Conventions:
- Uses [lng, lat] coordinate order (GeoJSON standard)
- Colors as RGBA lists [R, G, B, A] (0-255)
- Data prepared as list[dict] for GPU streaming
- pickable=True enables click detection; every object has "type" and "id"
"""

import html
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import pydeck as pdk

from placefinder.constants import ClickConfig, MapConfig, MarkerConfig, PopupConfig
from placefinder.core.geo_calculator import GeoCalculator
from placefinder.model.marker import Marker, MarkerId
from placefinder.model.position import Position

logger = logging.getLogger(__name__)

OSM_TILES = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"

# Mapbox GL style with a single raster source (requires map_provider="mapbox",
# works without API key for raster tiles)
OSM_STYLE: dict[str, object] = {
    "version": 8,
    "sources": {
        "osm": {
            "type": "raster",
            "tiles": [OSM_TILES],
            "tileSize": 256,
            "attribution": '© <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors',
        }
    },
    "layers": [{"id": "osm", "type": "raster", "source": "osm", "minzoom": 0, "maxzoom": 19}],
}


@dataclass
class LayerCollection:
    """Manages Pydeck layers with correct z-ordering.

    Z-order (back to front): search area → markers

    Markers are placed AFTER the search area so they render on top and get
    click priority over the large translucent circle.
    """

    search_area: list[pdk.Layer] = field(default_factory=list)
    markers: list[pdk.Layer] = field(default_factory=list)

    def get_ordered_layers(self) -> list[pdk.Layer]:
        """Return all layers in correct z-order (back to front)."""
        return self.search_area + self.markers


def popup_fields(marker: Marker) -> dict[str, str]:
    """HTML-escaped popup texts of a marker (used by the tooltip template)."""
    hours = html.escape(marker.hours or "").replace("\n", "<br/>")
    return {
        "name": html.escape(marker.name),
        "description": html.escape(marker.description or ""),
        "address": html.escape(marker.address or ""),
        "hours": hours,
        "heart": PopupConfig.FAVOURITE_ICON if marker.is_favourite else "",
    }


class MapRenderer:
    """Renders live markers and the search area on a Pydeck map.

    Example:
        renderer = MapRenderer(center=Position(lat=51.9194, lng=19.1451), zoom=6)
        deck = renderer.render(markers=reconciler.get_live_markers(), search_center=..., search_radius_m=5000)
    """

    def __init__(
        self,
        center: Position | None = None,
        zoom: int = MapConfig.DEFAULT_ZOOM,
    ) -> None:
        self.center = center or Position(lat=MapConfig.START_CENTER_LAT, lng=MapConfig.START_CENTER_LNG)
        self.zoom = zoom

    def get_view_state(self) -> pdk.ViewState:
        return pdk.ViewState(latitude=self.center.lat, longitude=self.center.lng, zoom=self.zoom, pitch=0, bearing=0)

    def render(
        self,
        markers: Sequence[Marker],
        search_center: Position | None = None,
        search_radius_m: int | None = None,
        selected_id: MarkerId | None = None,
    ) -> pdk.Deck:
        """Render complete map with all layers.

        Args:
            markers: Live marker snapshot in display order
            search_center: Current search center (no search area layer if None)
            search_radius_m: Search radius for the search area circle
            selected_id: Marker shown in the details panel (outlined)
        """
        layer_collection = LayerCollection()

        if search_center is not None and search_radius_m:
            layer_collection.search_area.append(
                self._create_search_area_layer(center=search_center, radius_m=search_radius_m)
            )
        layer_collection.markers.append(self._create_marker_layer(markers=markers, selected_id=selected_id))

        logger.debug(f"[MAP] Rendering {len(markers)} marker(s), selected={selected_id}")

        return pdk.Deck(
            map_style=OSM_STYLE,
            map_provider="mapbox",
            initial_view_state=self.get_view_state(),
            layers=layer_collection.get_ordered_layers(),
            tooltip=self._create_tooltip_config(),
            parameters={"pickingRadius": ClickConfig.PICKING_RADIUS_PX},
        )

    # =========================================================================
    # LAYERS
    # =========================================================================

    @staticmethod
    def marker_data(markers: Sequence[Marker], selected_id: MarkerId | None = None) -> list[dict[str, Any]]:
        """One pickable record per marker."""
        data = []
        for marker in markers:
            is_selected = marker.id == selected_id
            data.append(
                {
                    "type": ClickConfig.TYPE_PLACE,
                    "id": marker.id,
                    "position": marker.position.lng_lat,
                    "fill_color": MarkerConfig.FAVOURITE_COLOR if marker.is_favourite else MarkerConfig.PLACE_COLOR,
                    "line_color": MarkerConfig.SELECTED_LINE_COLOR if is_selected else MarkerConfig.DEFAULT_LINE_COLOR,
                    "radius": MarkerConfig.SELECTED_RADIUS_PX if is_selected else MarkerConfig.RADIUS_PX,
                    **popup_fields(marker=marker),
                }
            )
        return data

    def _create_marker_layer(self, markers: Sequence[Marker], selected_id: MarkerId | None) -> pdk.Layer:
        return pdk.Layer(
            "ScatterplotLayer",
            self.marker_data(markers=markers, selected_id=selected_id),
            get_position="position",
            get_fill_color="fill_color",
            get_line_color="line_color",
            get_radius="radius",
            radius_units="pixels",
            stroked=True,
            line_width_min_pixels=2,
            pickable=True,
            auto_highlight=True,
            highlight_color=[255, 255, 0, 180],
            id="places",
        )

    @staticmethod
    def search_area_data(center: Position, radius_m: int) -> list[dict[str, Any]]:
        return [
            {
                "type": ClickConfig.TYPE_SEARCH_AREA,
                "id": "search_area",
                "position": center.lng_lat,
                "radius": radius_m,
                "name": f"Search area ({GeoCalculator.format_distance(distance_m=radius_m)})",
                "description": "Click the map to move the search center",
                "address": "",
                "hours": "",
                "heart": "",
            }
        ]

    def _create_search_area_layer(self, center: Position, radius_m: int) -> pdk.Layer:
        """Translucent circle in meters around the search center.

        Pickable so clicks inside the circle still report a coordinate.
        """
        return pdk.Layer(
            "ScatterplotLayer",
            self.search_area_data(center=center, radius_m=radius_m),
            get_position="position",
            get_radius="radius",
            radius_units="meters",
            get_fill_color=MarkerConfig.SEARCH_CENTER_COLOR,
            get_line_color=MarkerConfig.SEARCH_CENTER_LINE_COLOR,
            stroked=True,
            line_width_min_pixels=1,
            pickable=True,
            id="search_area",
        )

    # =========================================================================
    # TOOLTIP CONFIGURATION
    # =========================================================================

    def _create_tooltip_config(self) -> dict[str, str | dict[str, str]]:
        """Popup content: name, description, address and opening hours."""
        return {
            "html": (
                "<b>{name}</b> {heart}<br/>"
                "{description}<br/>"
                f"<i>{PopupConfig.ADDRESS_LABEL}:</i> {{address}}<br/>"
                f"<i>{PopupConfig.HOURS_LABEL}:</i><br/>{{hours}}"
            ),
            "style": {
                "backgroundColor": "rgba(255, 255, 255, 0.95)",
                "color": "#333",
                "padding": "6px 10px",
                "borderRadius": "4px",
                "maxWidth": "280px",
            },
        }
