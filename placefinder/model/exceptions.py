"""Exception hierarchy for Place Finder.

All exceptions inherit from :class:`PlaceFinderError`, so the UI action
layer can catch any expected failure at the operation boundary with a single
``except`` clause while still handling specific failure modes.
"""

from __future__ import annotations


class PlaceFinderError(Exception):
    """Base exception for all Place Finder errors."""


class GeocodeNotFoundError(PlaceFinderError):
    """Raised when the geocoder has no match for a location text."""

    def __init__(self, location_text: str) -> None:
        self.location_text = location_text
        super().__init__(f"No location found for '{location_text}'")


class ProviderError(PlaceFinderError):
    """Raised when a geocode or place search call fails (transport or API status)."""


class NotAuthenticatedError(PlaceFinderError):
    """Raised when a favourite mutation is attempted while signed out."""

    def __init__(self, action: str = "change favourites") -> None:
        self.action = action
        super().__init__(f"You must be signed in to {action}")


class AuthFailedError(PlaceFinderError):
    """Raised when a sign-in credential cannot be resolved to an identity."""


class MarkerNotFoundError(PlaceFinderError):
    """Raised when an operation refers to a marker id absent from the live collection."""

    def __init__(self, marker_id: int | str) -> None:
        self.marker_id = marker_id
        super().__init__(f"Marker {marker_id!r} is not in the live collection")


class FavouritesStoreError(PlaceFinderError):
    """Raised when the favourites file cannot be read or written."""
