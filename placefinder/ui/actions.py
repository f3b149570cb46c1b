"""UI Actions - All action functions for Place Finder.

The ONLY place where UI events call MarkerReconciler and SessionContext
operations. Every action:
- validates input (validators return a ToastMessage or None)
- calls the model operation
- translates expected PlaceFinderError subclasses into ToastMessages
- returns the message; the caller displays it and reloads the map

This module handles:
- Map reload (reload_map, bump_map_version)
- Search (search_location, run_search, set_center_from_click, clear_markers)
- Selection (select_marker, handle_click)
- Favourites (toggle_favourite_action, show_favourites)
- Session (sign_in_action, sign_out_action)
"""

import logging
from collections.abc import Callable

import streamlit as st

from placefinder.constants import MapConfig
from placefinder.model.click_info import ClickInfo, MapClickType
from placefinder.model.exceptions import (
    AuthFailedError,
    FavouritesStoreError,
    GeocodeNotFoundError,
    MarkerNotFoundError,
    NotAuthenticatedError,
    ProviderError,
)
from placefinder.model.marker import MarkerId
from placefinder.model.marker_reconciler import MarkerReconciler
from placefinder.model.message import (
    AuthFailedMessage,
    FavouriteAddedMessage,
    FavouriteRemovedMessage,
    FavouritesShownMessage,
    FavouritesStoreErrorMessage,
    GeocodeNotFoundMessage,
    MarkerGoneMessage,
    ProviderErrorMessage,
    SearchResultMessage,
    SignedInMessage,
    SignedOutMessage,
    SignInRequiredMessage,
    ToastMessage,
)
from placefinder.model.position import Position
from placefinder.model.session import SessionContext
from placefinder.ui.context import UIContext
from placefinder.ui.validators import validate_location_text, validate_signed_in

logger = logging.getLogger(__name__)


# =============================================================================
# MAP RELOAD
# =============================================================================


def reload_map(before: "Callable[[], None] | None" = None) -> None:
    """Reload map with optional pre-reload callback.

    1. Execute before callback (if provided) - runs BEFORE st.rerun()
    2. Bump map version to clear stale click state
    3. Call st.rerun() which raises StopExecution
    """
    if before is not None:
        before()
    bump_map_version()
    st.rerun()


def bump_map_version() -> None:
    """Increment map_version to create a fresh Pydeck component.

    A new component instance has no memory of previous click events, which
    eliminates ghost clicks after actions.
    """
    old_version = st.session_state.get("map_version", 0)
    st.session_state.map_version = old_version + 1
    logger.info(f"[MAP] Bumped map_version: {old_version} -> {old_version + 1}")


# =============================================================================
# SEARCH
# =============================================================================


def run_search(reconciler: MarkerReconciler) -> ToastMessage | None:
    """Run the pending nearby search, if any.

    Returns:
        SearchResultMessage, ProviderErrorMessage on failure, None if nothing was pending.
    """
    if not reconciler.is_search_pending:
        return None
    try:
        markers = reconciler.run_pending_search()
    except ProviderError as e:
        return ProviderErrorMessage(operation="Search nearby", detail=str(e))
    except FavouritesStoreError as e:
        return FavouritesStoreErrorMessage(detail=str(e))
    return SearchResultMessage(count=len(markers))


def search_location(reconciler: MarkerReconciler, ui: UIContext, location_text: str) -> ToastMessage | None:
    """Geocode typed text, append a marker there and search around it."""
    invalid = validate_location_text(location_text=location_text)
    if invalid is not None:
        return invalid

    try:
        marker = reconciler.geocode_and_append(location_text=location_text)
    except GeocodeNotFoundError as e:
        return GeocodeNotFoundMessage(location_text=e.location_text)
    except ProviderError as e:
        return ProviderErrorMessage(operation="Geocoding", detail=str(e))
    except FavouritesStoreError as e:
        return FavouritesStoreErrorMessage(detail=str(e))

    if marker is None:
        return None

    ui.map.set_center(position=marker.position, zoom=MapConfig.SEARCH_ZOOM)
    ui.selection.clear()
    return run_search(reconciler=reconciler)


def set_center_from_click(reconciler: MarkerReconciler, ui: UIContext, position: Position) -> ToastMessage | None:
    """Move the search center to a clicked map point and search there."""
    reconciler.set_search_center(location=position)
    ui.map.set_center(position=position)
    ui.selection.clear()
    return run_search(reconciler=reconciler)


def clear_markers(reconciler: MarkerReconciler, ui: UIContext) -> None:
    """Empty the map. Favourites stay stored."""
    reconciler.clear()
    ui.selection.clear()
    ui.click_dedup.clear_marker()


# =============================================================================
# SELECTION
# =============================================================================


def select_marker(reconciler: MarkerReconciler, ui: UIContext, marker_id: MarkerId) -> ToastMessage | None:
    """Show a marker in the details panel."""
    if reconciler.get_marker(marker_id=marker_id) is None:
        ui.selection.clear()
        return MarkerGoneMessage()
    ui.selection.select(marker_id=marker_id)
    logger.info(f"[CLICK] Selected marker {marker_id!r}")
    return None


def handle_click(reconciler: MarkerReconciler, ui: UIContext, click: ClickInfo) -> ToastMessage | None:
    """Dispatch a detected map click: markers are selected, map clicks move the search."""
    logger.info(f"[CLICK] {click.display_name}")
    if click.click_type == MapClickType.MARKER:
        assert click.marker_id is not None
        return select_marker(reconciler=reconciler, ui=ui, marker_id=click.marker_id)
    return set_center_from_click(reconciler=reconciler, ui=ui, position=click.position)


# =============================================================================
# FAVOURITES
# =============================================================================


def toggle_favourite_action(
    reconciler: MarkerReconciler,
    session: SessionContext,
    marker_id: MarkerId,
) -> ToastMessage:
    """Add or remove the marker's place from the signed-in user's favourites."""
    invalid = validate_signed_in(identity=session.identity)
    if invalid is not None:
        return invalid

    try:
        result = reconciler.toggle_favourite(marker_id=marker_id, acting_identity=session.identity)
    except NotAuthenticatedError as e:
        return SignInRequiredMessage(action=e.action)
    except MarkerNotFoundError:
        return MarkerGoneMessage()
    except FavouritesStoreError as e:
        return FavouritesStoreErrorMessage(detail=str(e))

    marker = reconciler.get_marker(marker_id=marker_id)
    name = marker.name if marker is not None else str(marker_id)
    if result.is_favourite:
        return FavouriteAddedMessage(name=name)
    return FavouriteRemovedMessage(name=name)


def show_favourites(reconciler: MarkerReconciler, session: SessionContext, ui: UIContext) -> ToastMessage:
    """Replace the map contents with the signed-in user's favourites."""
    invalid = validate_signed_in(identity=session.identity, action="see your favourites")
    if invalid is not None:
        return invalid

    try:
        markers = reconciler.load_favourites_view(acting_identity=session.identity)
    except NotAuthenticatedError as e:
        return SignInRequiredMessage(action=e.action)
    except FavouritesStoreError as e:
        return FavouritesStoreErrorMessage(detail=str(e))

    ui.selection.clear()
    return FavouritesShownMessage(count=len(markers))


# =============================================================================
# SESSION
# =============================================================================


def sign_in_action(session: SessionContext, ui: UIContext, credential: str) -> ToastMessage:
    """Sign in; session listeners then show the user's favourites."""
    try:
        identity = session.sign_in(credential=credential)
    except AuthFailedError as e:
        return AuthFailedMessage(detail=str(e))
    except FavouritesStoreError as e:
        return FavouritesStoreErrorMessage(detail=str(e))

    ui.selection.clear()
    return SignedInMessage(display_name=identity.display_name)


def sign_out_action(reconciler: MarkerReconciler, session: SessionContext) -> ToastMessage | None:
    """Sign out and clear every favourite flag on the map."""
    identity = session.sign_out()
    if identity is None:
        return None
    reconciler.refresh_favourite_flags()
    return SignedOutMessage()
