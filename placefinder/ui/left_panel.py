"""Sidebar UI renderer for Place Finder.

Renders the left sidebar with:
- Session status message
- Location search (geocode + nearby search), Search nearby, Clear
- My favourites
- Sign-in form, or user info with sign-out

Buttons call ui/actions.py, display the returned toast and reload the map.
"""

import logging

import streamlit as st

from placefinder.core.identity_provider import GoogleIdentityProvider
from placefinder.model.marker_reconciler import MarkerReconciler
from placefinder.model.message import SessionStatusMessage, ToastMessage
from placefinder.model.session import SessionContext
from placefinder.ui.actions import (
    clear_markers,
    reload_map,
    run_search,
    search_location,
    show_favourites,
    sign_in_action,
    sign_out_action,
)
from placefinder.ui.context import UIContext

logger = logging.getLogger(__name__)


def _finish(message: ToastMessage | None) -> None:
    """Display the action result and reload the map."""
    if message is not None:
        message.display()
    reload_map()


class SidebarRenderer:
    """Renders the sidebar UI.

    All mutations go through ui/actions.py.
    """

    def __init__(self, reconciler: MarkerReconciler, session: SessionContext, ui: UIContext) -> None:
        self.reconciler = reconciler
        self.session = session
        self.ui = ui

    def render(self) -> None:
        with st.sidebar:
            SessionStatusMessage(
                display_name=self.session.identity.display_name if self.session.identity else None,
                marker_count=len(self.reconciler.get_live_markers()),
                is_search_pending=self.reconciler.is_search_pending,
            ).display()

            self._render_search()
            st.divider()
            self._render_favourites()
            st.divider()
            self._render_account()

    # =========================================================================
    # SEARCH
    # =========================================================================

    def _render_search(self) -> None:
        st.subheader("🔍 Search")
        with st.form("location_search", clear_on_submit=False):
            location_text = st.text_input("Location", placeholder="e.g. Kraków, Rynek Główny")
            submitted = st.form_submit_button("Search", type="primary", use_container_width=True)
        if submitted:
            logger.info(f"[SEARCH] Location search for {location_text!r}")
            _finish(search_location(reconciler=self.reconciler, ui=self.ui, location_text=location_text))

        col_search, col_clear = st.columns(2)
        with col_search:
            if st.button(
                "📍 Search nearby",
                use_container_width=True,
                disabled=not self.reconciler.is_search_pending,
                help="Search around the current search center",
            ):
                _finish(run_search(reconciler=self.reconciler))
        with col_clear:
            if st.button("🧹 Clear", use_container_width=True, help="Remove all markers from the map"):
                clear_markers(reconciler=self.reconciler, ui=self.ui)
                _finish(None)

        center = self.reconciler.search_center
        st.caption(f"Search center: {center.lat:.4f}, {center.lng:.4f} · click the map to move it")

    # =========================================================================
    # FAVOURITES
    # =========================================================================

    def _render_favourites(self) -> None:
        st.subheader("❤️ Favourites")
        if st.button(
            "My favourites",
            use_container_width=True,
            disabled=not self.session.is_signed_in,
            help="Show all your favourite places" if self.session.is_signed_in else "Sign in to see favourites",
        ):
            _finish(show_favourites(reconciler=self.reconciler, session=self.session, ui=self.ui))

    # =========================================================================
    # ACCOUNT
    # =========================================================================

    def _render_account(self) -> None:
        identity = self.session.identity
        if identity is not None:
            col_avatar, col_name = st.columns([1, 3])
            with col_avatar:
                if identity.avatar_ref:
                    st.image(identity.avatar_ref, width=40)
            with col_name:
                st.markdown(f"**{identity.display_name}**")
            if st.button("Sign out", use_container_width=True):
                _finish(sign_out_action(reconciler=self.reconciler, session=self.session))
            return

        uses_google = isinstance(self.session.identity_provider, GoogleIdentityProvider)
        label = "Google ID token" if uses_google else "Display name"
        with st.form("sign_in", clear_on_submit=True):
            credential = st.text_input(label, type="password" if uses_google else "default")
            submitted = st.form_submit_button("Sign in", use_container_width=True)
        if submitted:
            _finish(sign_in_action(session=self.session, ui=self.ui, credential=credential))
