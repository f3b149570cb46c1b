"""Core foundation classes: geodesic calculations and external collaborators.

- GeoCalculator: Geodesic calculations (distances, formatting)
- Geocoder / GoogleGeocoder: Location text to Position (import from geocoder module)
- PlaceSearchProvider / GooglePlacesProvider: Nearby search (import from place_search module)
- IdentityProvider and implementations: Sign-in (import from identity_provider module)
"""

from placefinder.core.geo_calculator import GeoCalculator

# geocoder, place_search and identity_provider import placefinder.model, which
# imports geo_calculator from here. Import them directly from their modules.

__all__ = [
    "GeoCalculator",
]
