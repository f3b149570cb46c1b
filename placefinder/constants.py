"""Configuration constants for Place Finder.

All configurable parameters are centralized here for easy tuning.
Deployment-specific values (API keys, file paths) are read from the
process environment so the same code runs locally and when deployed.

Classes:
    AppConfig: UI application settings
    MapConfig: Default map view parameters
    SearchConfig: Nearby search parameters
    PlaceConfig: Place record to marker mapping defaults
    CoordinateConfig: Geographic identity precision
    StorageConfig: Favourites persistence location
    GoogleConfig: Google Maps Platform endpoints and paging
    AuthConfig: Sign-in configuration
    MarkerConfig: Map marker styling
    ClickConfig: Click detection object types
    PopupConfig: Marker popup texts
"""

import os
from pathlib import Path

# Package root directory (where placefinder/ lives)
PACKAGE_DIR = Path(__file__).parent

# Project root directory (parent of placefinder/)
PROJECT_ROOT = PACKAGE_DIR.parent

# Output directory for persisted user data
OUTPUT_DIR = PROJECT_ROOT / "output"


class AppConfig:
    """UI application settings."""

    TITLE = "Place Finder - Discover and Keep Your Favourite Places"
    ICON = "📍"
    LAYOUT = "wide"


class MapConfig:
    """Default map view parameters."""

    # Initial center for program start: geographic center of Poland
    START_CENTER_LAT = 51.9194
    START_CENTER_LNG = 19.1451

    # Zoom levels - higher number = more zoomed in
    DEFAULT_ZOOM = 6  # Country overview
    SEARCH_ZOOM = 12  # After a location was searched (5 km radius fits)

    MAP_HEIGHT_PX = 600

    # Seed markers shown before the first search
    SEED_MARKERS = [
        {
            "id": 1,
            "name": "Church A",
            "position": {"lat": 51.9194, "lng": 19.1451},
            "description": "Old historic church in the city center.",
            "address": "1 Church Street, Warsaw",
            "hours": "Mon-Fri: 8:00 - 18:00, Sat-Sun: 9:00 - 19:00",
        },
        {
            "id": 2,
            "name": "Church B",
            "position": {"lat": 50.0614, "lng": 19.9372},
            "description": "Modern church in the southern district.",
            "address": "5 Krakow Street, Krakow",
            "hours": "Mon-Fri: 7:00 - 17:00, Sat-Sun: 8:00 - 20:00",
        },
    ]


class SearchConfig:
    """Nearby search parameters."""

    DEFAULT_RADIUS_M = 5000  # 5 km search radius around the center


class PlaceConfig:
    """Defaults used when mapping provider place records to markers."""

    UNKNOWN_NAME = "Unknown place"
    NO_DESCRIPTION = "No description"
    NO_ADDRESS = "No address"
    NO_HOURS = "No opening hours information"

    TYPES_SEPARATOR = ", "
    HOURS_SEPARATOR = "\n"

    # Places API "type" filter, churches by default
    PLACE_TYPE = os.environ.get("PLACEFINDER_PLACE_TYPE", "church")


class CoordinateConfig:
    """Geographic identity precision.

    Two positions are the same place when their coordinates agree after
    rounding to KEY_DECIMALS. 6 decimals ≈ 0.11 m at the equator.
    """

    KEY_DECIMALS = 6

    LAT_RANGE = (-90.0, 90.0)
    LNG_RANGE = (-180.0, 180.0)


class StorageConfig:
    """Favourites persistence location."""

    FAVOURITES_PATH = Path(
        os.environ.get("PLACEFINDER_FAVOURITES_PATH", str(OUTPUT_DIR / "placefinder" / "favourites.json"))
    )
    JSON_INDENT = 2


class GoogleConfig:
    """Google Maps Platform web service endpoints and paging."""

    API_KEY = os.environ.get("GOOGLE_MAPS_API_KEY", "")

    GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
    NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"

    TIMEOUT_S = 10

    # Nearby Search returns at most 3 pages of 20 results
    MAX_PAGES = 3
    # next_page_token needs a short wait before it becomes valid
    NEXT_PAGE_DELAY_S = 2.0

    STATUS_OK = "OK"
    STATUS_ZERO_RESULTS = "ZERO_RESULTS"


class AuthConfig:
    """Sign-in configuration.

    When GOOGLE_CLIENT_ID is set, credentials are Google ID tokens verified
    against the tokeninfo endpoint. Otherwise the local provider is used and
    the credential is simply the display name (development mode).
    """

    GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID", "")
    TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
    TIMEOUT_S = 10

    DEFAULT_AVATAR = "https://www.gravatar.com/avatar/?d=mp"


class MarkerConfig:
    """Map marker styling (RGBA lists for pydeck)."""

    PLACE_COLOR = [59, 130, 246, 220]  # blue-500
    FAVOURITE_COLOR = [239, 68, 68, 240]  # red-500 (heart)
    SELECTED_LINE_COLOR = [250, 204, 21, 255]  # yellow-400
    DEFAULT_LINE_COLOR = [255, 255, 255, 255]

    RADIUS_PX = 9
    SELECTED_RADIUS_PX = 13

    SEARCH_CENTER_COLOR = [168, 85, 247, 40]  # purple-500, translucent fill
    SEARCH_CENTER_LINE_COLOR = [168, 85, 247, 200]


class ClickConfig:
    """Click detection configuration.

    Every pickable object carries a "type" field so clicks can be routed.
    """

    TYPE_PLACE = "place"
    TYPE_SEARCH_AREA = "search_area"

    PICKING_RADIUS_PX = 6

    DEBOUNCE_S = 0.15  # Minimum time between two processed clicks


class PopupConfig:
    """Marker popup / details panel texts."""

    ADDRESS_LABEL = "Address"
    HOURS_LABEL = "Opening hours"
    SIGN_IN_NOTICE = "Sign in to add to favourites."
    FAVOURITE_ICON = "❤️"
    NOT_FAVOURITE_ICON = "🤍"
