"""Marker - A point of interest displayed on the map.

A Marker wraps a Position (single source of truth for location) with
descriptive metadata and the derived favourite flag.

Markers are immutable. The reconciler produces new Marker values with
dataclasses.replace() instead of mutating, so snapshots handed to the
presentation layer can never be changed behind the reconciler's back.

Identity:
    id: Live-collection key. Either a provider place id (stable across
        searches) or a synthesized millisecond timestamp (geocoded markers).
    position.key: Geographic identity, the favourites key.
"""

import time
from dataclasses import dataclass, replace
from typing import Any

from placefinder.constants import PlaceConfig
from placefinder.model.place_record import PlaceRecord
from placefinder.model.position import GeoKey, Position

MarkerId = int | str


def synthesize_marker_id(taken: "set[MarkerId] | None" = None) -> int:
    """Create a timestamp-based marker id not present in ``taken``.

    Millisecond timestamps may repeat within one millisecond and may collide
    with provider ids, so the candidate is bumped until unused.
    """
    candidate = int(time.time() * 1000)
    taken = taken or set()
    while candidate in taken:
        candidate += 1
    return candidate


@dataclass(frozen=True)
class Marker:
    """A point of interest on the map.

    Attributes:
        id: Unique identifier within the live collection
        name: Display name
        position: Position of the place
        description: Place categories or free text
        address: Short address
        hours: Opening hours, one line per weekday
        is_favourite: Derived flag - True when a favourite with the same
            geographic identity exists for the current identity

    Example:
        marker = Marker(id=7, name="Church A", position=Position(lat=51.9194, lng=19.1451))
        print(marker.geo_key)  # (51.9194, 19.1451)
    """

    id: MarkerId
    name: str
    position: Position
    description: str | None = None
    address: str | None = None
    hours: str | None = None
    is_favourite: bool = False

    @property
    def geo_key(self) -> GeoKey:
        """Geographic identity delegated from position."""
        return self.position.key

    @property
    def lat(self) -> float:
        return self.position.lat

    @property
    def lng(self) -> float:
        return self.position.lng

    def with_favourite(self, is_favourite: bool) -> "Marker":
        """Return a copy with the favourite flag set (self if unchanged)."""
        if self.is_favourite == is_favourite:
            return self
        return replace(self, is_favourite=is_favourite)

    def with_id(self, marker_id: MarkerId) -> "Marker":
        return replace(self, id=marker_id)

    @classmethod
    def from_place_record(cls, record: PlaceRecord, is_favourite: bool = False) -> "Marker":
        """Map a provider place record to a Marker, filling display defaults."""
        return cls(
            id=record.id,
            name=record.name or PlaceConfig.UNKNOWN_NAME,
            position=record.position,
            description=PlaceConfig.TYPES_SEPARATOR.join(record.types) or PlaceConfig.NO_DESCRIPTION,
            address=record.vicinity or PlaceConfig.NO_ADDRESS,
            hours=PlaceConfig.HOURS_SEPARATOR.join(record.opening_hours_text) or PlaceConfig.NO_HOURS,
            is_favourite=is_favourite,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted favourite snapshot layout."""
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position.to_dict(),
            "description": self.description,
            "address": self.address,
            "hours": self.hours,
            "isFavourite": self.is_favourite,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Marker":
        """Create Marker from a persisted snapshot dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            position=Position.from_dict(data=data["position"]),
            description=data.get("description"),
            address=data.get("address"),
            hours=data.get("hours"),
            is_favourite=bool(data.get("isFavourite", False)),
        )

    def __repr__(self) -> str:
        heart = " ♥" if self.is_favourite else ""
        return f"Marker({self.id!r}, {self.name!r}, {self.position}{heart})"
