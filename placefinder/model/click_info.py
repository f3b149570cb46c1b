"""Click detection types - unified click information for map interactions.

This module defines the canonical types for ALL click detection:
- MapClickType: Source of click (MARKER or TERRAIN)
- ClickInfo: Unified click information returned by ClickDetector

A MARKER click carries the marker id only; the marker itself is looked up
in the reconciler, so a click on a marker that vanished meanwhile is
detected there. A TERRAIN click carries the clicked coordinate.

STRICT: All click detection flows through ClickInfo.
"""

from dataclasses import dataclass
from enum import Enum

from placefinder.constants import CoordinateConfig
from placefinder.model.marker import MarkerId
from placefinder.model.position import Position


class MapClickType(Enum):
    """Source of click on the map - EXACTLY one per interaction."""

    MARKER = "marker"  # Clicked on a place marker
    TERRAIN = "terrain"  # Clicked on the map itself (raw coordinates)


@dataclass(frozen=True)
class ClickInfo:
    """Unified click information - the ONLY output from click detection.

    STRICT CONTRACT:
    - For TERRAIN: lat/lng are REQUIRED, marker_id is None
    - For MARKER: marker_id is REQUIRED, lat/lng are None
    """

    click_type: MapClickType
    marker_id: MarkerId | None = None
    lat: float | None = None
    lng: float | None = None

    def __post_init__(self) -> None:
        """Validate invariants - fail immediately on invalid state."""
        if self.click_type == MapClickType.TERRAIN:
            if self.lat is None or self.lng is None:
                raise ValueError("TERRAIN click must have lat/lng set")
            if self.marker_id is not None:
                raise ValueError("TERRAIN click must NOT have marker_id set")
        elif self.click_type == MapClickType.MARKER:
            if self.marker_id is None:
                raise ValueError("MARKER click must have marker_id set")
            if self.lat is not None or self.lng is not None:
                raise ValueError("MARKER click must NOT have lat/lng set")
        else:
            raise RuntimeError(f"Unknown click_type: {self.click_type}")

    @property
    def position(self) -> Position:
        """Clicked coordinate of a TERRAIN click."""
        if self.lat is None or self.lng is None:
            raise ValueError(f"{self.click_type.value} click has no coordinate")
        return Position(lat=self.lat, lng=self.lng)

    @property
    def display_name(self) -> str:
        """Human-readable name for logging.

        Map at (51.9194, 19.1451)
        Place 7
        """
        if self.click_type == MapClickType.TERRAIN:
            return f"Map at ({self.lat:.4f}, {self.lng:.4f})"
        return f"Place {self.marker_id}"

    def make_dedup_key(self) -> str:
        """Deduplication key: "terrain_{lat}_{lng}" or "marker_{id}"."""
        if self.click_type == MapClickType.TERRAIN:
            decimals = CoordinateConfig.KEY_DECIMALS
            return f"terrain_{self.lat:.{decimals}f}_{self.lng:.{decimals}f}"
        return f"marker_{self.marker_id}"
