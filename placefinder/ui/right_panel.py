"""Right panel - details of the selected marker.

Shows the popup content of the selected place (name, description, address,
opening hours, distance from the search center) and:
- a favourite toggle button when signed in
- a "Sign in to add to favourites." notice otherwise
"""

import logging

import streamlit as st

from placefinder.constants import PopupConfig
from placefinder.core.geo_calculator import GeoCalculator
from placefinder.model.marker import Marker
from placefinder.model.marker_reconciler import MarkerReconciler
from placefinder.model.message import SelectPlaceMessage
from placefinder.model.session import SessionContext
from placefinder.ui.actions import reload_map, toggle_favourite_action
from placefinder.ui.context import UIContext

logger = logging.getLogger(__name__)


def favourite_button_label(marker: Marker) -> str:
    if marker.is_favourite:
        return f"{PopupConfig.FAVOURITE_ICON} Remove from favourites"
    return f"{PopupConfig.NOT_FAVOURITE_ICON} Add to favourites"


class MarkerDetailsPanel:
    """Renders the selected marker's details and favourite control."""

    def __init__(self, reconciler: MarkerReconciler, session: SessionContext, ui: UIContext) -> None:
        self.reconciler = reconciler
        self.session = session
        self.ui = ui

    def render(self) -> None:
        marker_id = self.ui.selection.marker_id
        marker = self.reconciler.get_marker(marker_id=marker_id) if marker_id is not None else None
        if marker is None:
            # Selected marker was replaced by a search or cleared
            self.ui.selection.clear()
            SelectPlaceMessage().display()
            return

        title = f"{marker.name} {PopupConfig.FAVOURITE_ICON}" if marker.is_favourite else marker.name
        st.subheader(title)
        st.write(marker.description)
        st.markdown(f"**{PopupConfig.ADDRESS_LABEL}:** {marker.address}")
        st.markdown(f"**{PopupConfig.HOURS_LABEL}:**")
        st.text(marker.hours)

        distance_m = marker.position.distance_to(self.reconciler.search_center)
        distance = GeoCalculator.format_distance(distance_m=distance_m)
        st.caption(f"{marker.position.lat:.5f}, {marker.position.lng:.5f} · {distance} from search center")

        if not self.session.is_signed_in:
            st.info(PopupConfig.SIGN_IN_NOTICE)
            return

        if st.button(favourite_button_label(marker=marker), key=f"favourite_{marker.id}", use_container_width=True):
            message = toggle_favourite_action(reconciler=self.reconciler, session=self.session, marker_id=marker.id)
            message.display()
            reload_map()
