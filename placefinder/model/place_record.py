"""PlaceRecord - A single result returned by a place search provider.

Provider records are raw: every descriptive field is optional. They become
Markers through Marker.from_place_record(), which fills display defaults.
"""

from dataclasses import dataclass, field

from placefinder.model.position import Position


@dataclass(frozen=True)
class PlaceRecord:
    """A place returned by PlaceSearchProvider.search_nearby().

    Attributes:
        id: Provider place identifier (stable across searches)
        position: Location of the place
        name: Display name, if the provider has one
        types: Provider categories (e.g., ["church", "place_of_worship"])
        vicinity: Short address
        opening_hours_text: One line per weekday
    """

    id: int | str
    position: Position
    name: str | None = None
    types: tuple[str, ...] = field(default_factory=tuple)
    vicinity: str | None = None
    opening_hours_text: tuple[str, ...] = field(default_factory=tuple)
