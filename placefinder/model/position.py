"""Position - The fundamental geometry atom for place finding.

A Position represents a single GPS coordinate. It is the single source of
truth for location throughout the system, and its ``key`` is the geographic
identity used to match favourites across searches.

Used by:
- Marker (every marker sits at one Position)
- PlaceRecord (provider results)
- SearchContext (current search center)
"""

from dataclasses import dataclass
from math import isfinite
from typing import Any

from placefinder.constants import CoordinateConfig
from placefinder.core.geo_calculator import GeoCalculator

# Geographic identity: coordinates rounded to CoordinateConfig.KEY_DECIMALS
GeoKey = tuple[float, float]


@dataclass(frozen=True)
class Position:
    """A point on the map with GPS coordinates.

    Attributes:
        lat: Latitude in decimal degrees (WGS84)
        lng: Longitude in decimal degrees (WGS84)

    Example:
        position = Position(lat=51.9194, lng=19.1451)
    """

    lat: float
    lng: float

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if not (isfinite(self.lat) and isfinite(self.lng)):
            raise ValueError(f"Position must have finite coordinates, got ({self.lat}, {self.lng})")
        lat_min, lat_max = CoordinateConfig.LAT_RANGE
        lng_min, lng_max = CoordinateConfig.LNG_RANGE
        if not (lat_min <= self.lat <= lat_max and lng_min <= self.lng <= lng_max):
            raise ValueError(f"Position out of range: ({self.lat}, {self.lng})")

    @property
    def key(self) -> GeoKey:
        """Geographic identity - rounded (lat, lng) used as the favourites key."""
        return (
            round(self.lat, CoordinateConfig.KEY_DECIMALS),
            round(self.lng, CoordinateConfig.KEY_DECIMALS),
        )

    @property
    def lng_lat(self) -> list[float]:
        """Return [lng, lat] list - GeoJSON/Pydeck order."""
        return [self.lng, self.lat]

    def same_place(self, other: "Position") -> bool:
        """True if both positions share the same geographic identity."""
        return self.key == other.key

    def distance_to(self, other: "Position") -> float:
        """Calculate haversine distance to another position in meters."""
        return GeoCalculator.haversine_distance_m(
            lat1=self.lat,
            lng1=self.lng,
            lat2=other.lat,
            lng2=other.lng,
        )

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Position":
        """Create Position from {"lat": ..., "lng": ...} dictionary."""
        return cls(lat=float(data["lat"]), lng=float(data["lng"]))

    def __repr__(self) -> str:
        return f"Position(lat={self.lat:.6f}, lng={self.lng:.6f})"
