"""Place Finder - find places around a location and keep your favourites.

Search a location, browse nearby places (churches by default) on the map,
and add them to your favourites once signed in.

Run: streamlit run placefinder/app.py
"""

import logging
import traceback

import streamlit as st

from placefinder.constants import AppConfig, GoogleConfig, MapConfig, StorageConfig
from placefinder.core.geocoder import GoogleGeocoder
from placefinder.core.identity_provider import IdentityProvider, create_identity_provider
from placefinder.core.place_search import GooglePlacesProvider
from placefinder.model import FavouritesStore, Marker, MarkerReconciler, SessionContext
from placefinder.ui import (
    ClickDetector,
    MapRenderer,
    MarkerDetailsPanel,
    SidebarRenderer,
    UIContext,
    handle_click,
    reload_map,
)
from placefinder.ui.pydeck_click_handler import render_pydeck_map

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SHARED SERVICES (one per server process)
# =============================================================================


@st.cache_resource
def get_favourites_store() -> FavouritesStore:
    """Single store per process so its per-identity locks are shared by all sessions."""
    logger.info(f"[FAVOURITES] Using favourites file {StorageConfig.FAVOURITES_PATH}")
    return FavouritesStore(path=StorageConfig.FAVOURITES_PATH)


@st.cache_resource
def get_identity_provider() -> IdentityProvider:
    return create_identity_provider()


# =============================================================================
# SESSION STATE
# =============================================================================


def create_reconciler() -> MarkerReconciler:
    """Reconciler for one browser session, seeded with the start markers."""
    if not GoogleConfig.API_KEY:
        logger.warning("[SEARCH] GOOGLE_MAPS_API_KEY not set - geocoding and nearby search will fail")
    return MarkerReconciler(
        geocoder=GoogleGeocoder(),
        place_search=GooglePlacesProvider(),
        store=get_favourites_store(),
        initial_markers=[Marker.from_dict(data=data) for data in MapConfig.SEED_MARKERS],
    )


def init_session_state() -> None:
    """Initialize per-session reconciler, session and UI context."""
    if "reconciler" not in st.session_state:
        st.session_state.reconciler = create_reconciler()

    if "session" not in st.session_state:
        session = SessionContext(identity_provider=get_identity_provider())
        session.add_listener(st.session_state.reconciler)
        st.session_state.session = session

    if "ui" not in st.session_state:
        st.session_state.ui = UIContext()

    if "map_version" not in st.session_state:
        st.session_state.map_version = 0


def reset_ui_state() -> None:
    """Reset UI state after an error while preserving markers and sign-in.

    Resets the UI context and bumps the map version to drop stale map state.
    Preserves the reconciler (live markers) and the session (identity).
    """
    logger.info("Resetting UI state due to error recovery")
    st.session_state.ui = UIContext()
    st.session_state.map_version = st.session_state.get("map_version", 0) + 1
    logger.info("UI state reset complete - markers and session preserved")


# =============================================================================
# MAP RENDERING
# =============================================================================


def _render_map() -> None:
    """Render map and handle clicks, recovering from unexpected errors."""
    try:
        _render_map_inner()
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"[RENDER] Map error caught: {error_msg}\n{traceback.format_exc()}")
        st.error(f"⚠️ Something went wrong: {error_msg}")
        reset_ui_state()
        if st.button("🔄 Reset and Continue", type="primary"):
            st.rerun()


def _render_map_inner() -> None:
    reconciler: MarkerReconciler = st.session_state.reconciler
    ui: UIContext = st.session_state.ui

    renderer = MapRenderer(center=ui.map.position, zoom=ui.map.zoom)
    deck = renderer.render(
        markers=reconciler.get_live_markers(),
        search_center=reconciler.search_center,
        search_radius_m=reconciler.search_radius_m,
        selected_id=ui.selection.marker_id,
    )

    map_key = f"main_map_{st.session_state.map_version}"
    click_result = render_pydeck_map(deck=deck, key=map_key, height=MapConfig.MAP_HEIGHT_PX)

    detector = ClickDetector(dedup=ui.click_dedup)
    click_info = detector.detect(
        clicked_object=click_result.clicked_object,
        clicked_coordinate=click_result.clicked_coordinate,
    )
    if click_info is not None:
        message = handle_click(reconciler=reconciler, ui=ui, click=click_info)
        # Fresh map component after reload, so the same marker may be clicked again
        ui.click_dedup.clear_marker()
        if message is not None:
            message.display()
        reload_map()


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    reconciler: MarkerReconciler = st.session_state.reconciler
    session: SessionContext = st.session_state.session
    ui: UIContext = st.session_state.ui

    st.title(AppConfig.TITLE)

    SidebarRenderer(reconciler=reconciler, session=session, ui=ui).render()

    col_map, col_details = st.columns([3, 1])
    with col_map:
        _render_map()
    with col_details:
        MarkerDetailsPanel(reconciler=reconciler, session=session, ui=ui).render()


if __name__ == "__main__":
    main()
