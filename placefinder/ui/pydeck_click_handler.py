"""Pydeck click handler using streamlit-deckgl for map click support.

Uses st_deckgl from streamlit-deckgl to capture ALL click events including
clicks on the empty map, not just object selections. Clicking the empty map
moves the search center, so plain st.pydeck_chart selections are not enough.
"""

import logging
from dataclasses import dataclass
from typing import Any

import pydeck as pdk
from streamlit_deckgl import st_deckgl  # type: ignore[import-untyped]

from placefinder.constants import MapConfig

logger = logging.getLogger(__name__)


@dataclass
class PydeckClickResult:
    """Result from Pydeck click detection.

    Attributes:
        clicked_object: The picked deck.gl object data (dict) or None if map click
        clicked_coordinate: [lng, lat] of click location (always available for clicks)
    """

    clicked_object: dict[str, Any] | None
    clicked_coordinate: list[float] | None

    @property
    def is_object_click(self) -> bool:
        return self.clicked_object is not None

    @property
    def is_empty(self) -> bool:
        return self.clicked_object is None and self.clicked_coordinate is None

    @staticmethod
    def empty() -> "PydeckClickResult":
        """Return empty result (no click detected)."""
        return PydeckClickResult(clicked_object=None, clicked_coordinate=None)


def parse_deckgl_event(event: dict[str, Any] | None) -> PydeckClickResult:
    """Split a st_deckgl event into picked object and coordinate.

    st_deckgl SPREADS object properties into the event dict (no "object" key):
    - Map click: {coordinate: [lng, lat], eventType: "click"}
    - Object click: {type: ..., id: ..., coordinate: [lng, lat], eventType: "click"}
    """
    if not event:
        return PydeckClickResult.empty()

    clicked_object: dict[str, Any] | None = None
    clicked_coordinate: list[float] | None = None

    coord = event.get("coordinate")
    if isinstance(coord, (list, tuple)) and len(coord) >= 2:
        clicked_coordinate = [float(coord[0]), float(coord[1])]

    # Picked objects are recognized by the "type" field our layers set
    if event.get("type") and event["type"] != "click":
        clicked_object = {k: v for k, v in event.items() if k not in ("coordinate", "eventType")}

    return PydeckClickResult(clicked_object=clicked_object, clicked_coordinate=clicked_coordinate)


def render_pydeck_map(deck: pdk.Deck, key: str, height: int = MapConfig.MAP_HEIGHT_PX) -> PydeckClickResult:
    """Render Pydeck map and return the last click event.

    Deduplication of repeated events across reruns is done by ClickDetector.

    Args:
        deck: Configured pydeck.Deck object
        key: Unique key for this component instance
        height: Height in pixels
    """
    # MUST pass events=['click'] to enable click detection
    event = st_deckgl(deck, key=key, height=height, events=["click"])
    result = parse_deckgl_event(event=event)
    if not result.is_empty:
        logger.debug(f"[CLICK] Event: object={result.clicked_object}, coord={result.clicked_coordinate}")
    return result
