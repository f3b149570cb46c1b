"""Context classes for the Place Finder UI.

Pure data holders for per-session UI state that is NOT part of the marker
model: which marker is selected, where the map looks, and click
deduplication. The live markers themselves are owned by MarkerReconciler.

Sub-contexts:
    SelectionContext: Marker shown in the details panel
    MapContext: Map center and zoom
    ClickDeduplicationContext: Click deduplication tracking
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from placefinder.constants import ClickConfig, MapConfig
from placefinder.model.marker import MarkerId
from placefinder.model.position import Position


class BaseContext(ABC):
    """All contexts can be reset to their initial state."""

    @abstractmethod
    def clear(self) -> None:
        """Reset context to initial state."""
        ...


@dataclass
class SelectionContext(BaseContext):
    """Marker currently shown in the details panel."""

    marker_id: MarkerId | None = None

    def clear(self) -> None:
        self.marker_id = None

    def select(self, marker_id: MarkerId) -> None:
        self.marker_id = marker_id

    def has_selection(self) -> bool:
        return self.marker_id is not None


@dataclass
class MapContext(BaseContext):
    """Map view state for Pydeck.

    Note: lng_lat_list is [lng, lat] order (GeoJSON/Pydeck standard).
    """

    lat: float = MapConfig.START_CENTER_LAT
    lng: float = MapConfig.START_CENTER_LNG
    zoom: int = MapConfig.DEFAULT_ZOOM

    @property
    def position(self) -> Position:
        return Position(lat=self.lat, lng=self.lng)

    @property
    def lng_lat_list(self) -> list[float]:
        return [self.lng, self.lat]

    def set_center(self, position: Position, zoom: int | None = None) -> None:
        """Move the view to ``position`` (keeps zoom if None)."""
        self.lat = position.lat
        self.lng = position.lng
        if zoom is not None:
            self.zoom = zoom

    def clear(self) -> None:
        self.lat = MapConfig.START_CENTER_LAT
        self.lng = MapConfig.START_CENTER_LNG
        self.zoom = MapConfig.DEFAULT_ZOOM


@dataclass
class ClickDeduplicationContext(BaseContext):
    """Click deduplication by tracking last-seen coordinates and object ids.

    st_deckgl returns the last click event on every rerun, so the same click
    would be processed again after e.g. a button press. Also debounces rapid
    double-clicks.
    """

    last_coord: tuple[float, float] | None = None
    last_object_id: str | None = None
    last_click_timestamp: float = 0.0
    debounce_seconds: float = ClickConfig.DEBOUNCE_S  # 0 disables debounce (tests)

    def is_new_click(self, coord: tuple[float, ...] | None, obj_id: str | None) -> bool:
        """True if this click has not been processed yet.

        Args:
            coord: Click coordinate tuple (lng, lat) or None
            obj_id: Unique object identifier string or None for terrain
        """
        if coord is None and obj_id is None:
            return False

        now = time.time()
        if self.debounce_seconds > 0 and now - self.last_click_timestamp < self.debounce_seconds:
            return False

        if obj_id is not None:
            if obj_id == self.last_object_id:
                return False
            self.last_object_id = obj_id
            self.last_click_timestamp = now
            if coord is not None:
                self.last_coord = (coord[0], coord[1])
            return True

        assert coord is not None
        coord_2d = (coord[0], coord[1])
        if coord_2d == self.last_coord:
            return False
        self.last_coord = coord_2d
        self.last_click_timestamp = now
        return True

    def clear(self) -> None:
        self.last_coord = None
        self.last_object_id = None

    def clear_marker(self) -> None:
        """Forget only the object id so the same marker can be clicked again.

        Coordinate dedup is kept to prevent ghost clicks after st.rerun().
        """
        self.last_object_id = None


@dataclass
class UIContext:
    """Composes all per-session UI sub-contexts."""

    selection: SelectionContext = field(default_factory=SelectionContext)
    map: MapContext = field(default_factory=MapContext)
    click_dedup: ClickDeduplicationContext = field(default_factory=ClickDeduplicationContext)

    def clear(self) -> None:
        self.selection.clear()
        self.map.clear()
        self.click_dedup.clear()

    def __repr__(self) -> str:
        return f"UIContext(selected={self.selection.marker_id}, center={self.map.lng_lat_list}, zoom={self.map.zoom})"
