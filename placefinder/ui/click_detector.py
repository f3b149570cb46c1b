"""Click detector - detects map clicks from Pydeck events.

Pydeck click events return the picked object data directly. Our layers put
a "type" and an "id" field on every pickable object for identification.

Coordinate tracking prevents re-processing the same click on reruns.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from placefinder.constants import ClickConfig
from placefinder.model.click_info import ClickInfo, MapClickType

if TYPE_CHECKING:
    from placefinder.ui.context import ClickDeduplicationContext

logger = logging.getLogger(__name__)


@dataclass
class ClickDetector:
    """Detects clicks from Pydeck picked objects.

    Attributes:
        dedup: ClickDeduplicationContext for tracking last-seen clicks
    """

    dedup: "ClickDeduplicationContext"

    def detect(
        self,
        clicked_object: dict[str, Any] | None,
        clicked_coordinate: list[float] | None,
    ) -> ClickInfo | None:
        """Detect click from Pydeck event data.

        Args:
            clicked_object: The picked deck.gl object data (dict) or None
            clicked_coordinate: [lng, lat] of click location or None

        Returns:
            ClickInfo for new clicks, None otherwise
        """
        obj_id = self._get_object_id(obj=clicked_object)
        coord_tuple = tuple(clicked_coordinate) if clicked_coordinate else None

        if not self.dedup.is_new_click(coord=coord_tuple, obj_id=obj_id):
            return None

        if clicked_object is not None and clicked_object.get("type") == ClickConfig.TYPE_PLACE:
            return self._parse_place_click(obj=clicked_object)

        # Map click: empty map or the translucent search area
        if clicked_coordinate is not None:
            lng, lat = clicked_coordinate[0], clicked_coordinate[1]
            logger.debug(f"[CLICK] Map click at ({lat:.6f}, {lng:.6f})")
            return ClickInfo(click_type=MapClickType.TERRAIN, lat=lat, lng=lng)

        if clicked_object is not None:
            logger.warning(f"[CLICK] Ignoring object click without coordinate: {clicked_object}")
        return None

    def _get_object_id(self, obj: dict[str, Any] | None) -> str | None:
        """Unique id of a picked object for deduplication (None for map clicks)."""
        if obj is None or obj.get("type") != ClickConfig.TYPE_PLACE:
            return None
        return f"{ClickConfig.TYPE_PLACE}_{obj.get('id', '')}"

    def _parse_place_click(self, obj: dict[str, Any]) -> ClickInfo | None:
        marker_id = obj.get("id")
        if marker_id is None or marker_id == "":
            logger.warning(f"[CLICK] Place click missing id: {obj}")
            return None
        logger.debug(f"[CLICK] Place click: id={marker_id}")
        return ClickInfo(click_type=MapClickType.MARKER, marker_id=marker_id)
