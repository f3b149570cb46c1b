"""Place Finder - Discover places around a location and keep your favourites.

A Streamlit application featuring:
- Location search (geocoding) and nearby place search on an interactive map
- Per-user favourites persisted across sessions
- Derived favourite flags kept consistent by a single reconciler

Modules:
    core: External collaborators (geocoder, place search, identity providers, geo math)
    model: Data structures and state (Position, Marker, FavouritesStore, MarkerReconciler)
    ui: Streamlit interface components (map renderer, panels, actions)

Example:
    from placefinder.model import FavouritesStore, MarkerReconciler
    from placefinder.core.geocoder import GoogleGeocoder
    from placefinder.core.place_search import GooglePlacesProvider
"""
