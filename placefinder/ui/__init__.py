"""User interface components for Place Finder.

File Structure (layout-based naming):
- left_panel.py: Sidebar with search, favourites and account
- center_map.py: Pydeck map with markers and the search area
- right_panel.py: Details panel of the selected marker

Core Components:
- context.py: UIContext (selection, map view, click deduplication)
- actions.py: All action functions calling the reconciler and session
- click_detector.py: Pydeck click event to ClickInfo
- validators.py: Input validation with Optional[ToastMessage] returns
"""

from placefinder.ui.actions import (
    bump_map_version,
    clear_markers,
    handle_click,
    reload_map,
    run_search,
    search_location,
    select_marker,
    set_center_from_click,
    show_favourites,
    sign_in_action,
    sign_out_action,
    toggle_favourite_action,
)
from placefinder.ui.center_map import MapRenderer
from placefinder.ui.click_detector import ClickDetector
from placefinder.ui.context import UIContext
from placefinder.ui.left_panel import SidebarRenderer
from placefinder.ui.right_panel import MarkerDetailsPanel

__all__ = [
    "UIContext",
    "MapRenderer",
    "SidebarRenderer",
    "MarkerDetailsPanel",
    "ClickDetector",
    "bump_map_version",
    "clear_markers",
    "handle_click",
    "reload_map",
    "run_search",
    "search_location",
    "select_marker",
    "set_center_from_click",
    "show_favourites",
    "sign_in_action",
    "sign_out_action",
    "toggle_favourite_action",
]
