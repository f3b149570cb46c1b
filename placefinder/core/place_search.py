"""PlaceSearchProvider - finds places around a coordinate.

PlaceSearchProvider is the abstract collaborator consumed by
MarkerReconciler. GooglePlacesProvider implements it against the Google
Places Nearby Search web service.

Results are lazy: pages are fetched only as the caller iterates, following
next_page_token up to GoogleConfig.MAX_PAGES. The sequence is finite.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

import requests

from placefinder.constants import GoogleConfig, PlaceConfig
from placefinder.model.exceptions import ProviderError
from placefinder.model.place_record import PlaceRecord
from placefinder.model.position import Position

logger = logging.getLogger(__name__)


class PlaceSearchProvider(ABC):
    """Returns places within a radius of a center."""

    @abstractmethod
    def search_nearby(self, center: Position, radius_m: int) -> Iterator[PlaceRecord]:
        """Yield places near ``center``.

        Raises:
            ProviderError: On transport or service failure (possibly mid-iteration).
        """
        raise NotImplementedError


def parse_place(raw: dict[str, Any]) -> PlaceRecord | None:
    """Convert one Nearby Search result to a PlaceRecord.

    Returns None for results without a place id or usable location.
    """
    place_id = raw.get("place_id")
    location = (raw.get("geometry") or {}).get("location") or {}
    if not place_id or location.get("lat") is None or location.get("lng") is None:
        logger.debug(f"[SEARCH] Skipping result without id/location: {raw.get('name')}")
        return None

    try:
        position = Position(lat=float(location["lat"]), lng=float(location["lng"]))
    except (TypeError, ValueError) as e:
        logger.debug(f"[SEARCH] Skipping result with invalid location {location}: {e}")
        return None

    opening_hours = raw.get("opening_hours") or {}
    return PlaceRecord(
        id=place_id,
        position=position,
        name=raw.get("name"),
        types=tuple(raw.get("types") or ()),
        vicinity=raw.get("vicinity"),
        opening_hours_text=tuple(opening_hours.get("weekday_text") or ()),
    )


class GooglePlacesProvider(PlaceSearchProvider):
    """Place search backed by the Google Places Nearby Search API.

    Example:
        provider = GooglePlacesProvider(api_key="...", place_type="church")
        for record in provider.search_nearby(center=Position(lat=52.23, lng=21.01), radius_m=5000):
            print(record.name)
    """

    def __init__(
        self,
        api_key: str = GoogleConfig.API_KEY,
        place_type: str | None = PlaceConfig.PLACE_TYPE,
        session: requests.Session | None = None,
        timeout_s: float = GoogleConfig.TIMEOUT_S,
        max_pages: int = GoogleConfig.MAX_PAGES,
        next_page_delay_s: float = GoogleConfig.NEXT_PAGE_DELAY_S,
    ) -> None:
        self.api_key = api_key
        self.place_type = place_type
        self.session = session or requests.Session()
        self.timeout_s = timeout_s
        self.max_pages = max_pages
        self.next_page_delay_s = next_page_delay_s

    def _fetch_page(self, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self.session.get(GoogleConfig.NEARBY_SEARCH_URL, params=params, timeout=self.timeout_s)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"Nearby search request failed: {e}") from e

    def search_nearby(self, center: Position, radius_m: int) -> Iterator[PlaceRecord]:
        params: dict[str, Any] = {
            "location": f"{center.lat},{center.lng}",
            "radius": radius_m,
            "key": self.api_key,
        }
        if self.place_type:
            params["type"] = self.place_type

        logger.info(f"[SEARCH] Nearby search at {center} within {radius_m} m (type={self.place_type})")

        page = 0
        while True:
            data = self._fetch_page(params=params)
            status = data.get("status")

            if status == GoogleConfig.STATUS_ZERO_RESULTS:
                return
            if status != GoogleConfig.STATUS_OK:
                # Common: OVER_QUERY_LIMIT, REQUEST_DENIED, INVALID_REQUEST
                raise ProviderError(f"Nearby search error: status={status}, msg={data.get('error_message')}")

            for raw in data.get("results") or []:
                record = parse_place(raw=raw)
                if record is not None:
                    yield record

            token = data.get("next_page_token")
            page += 1
            if not token or page >= self.max_pages:
                return

            time.sleep(self.next_page_delay_s)
            params = {"pagetoken": token, "key": self.api_key}
