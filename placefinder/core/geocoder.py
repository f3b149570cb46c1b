"""Geocoder - resolves free-text locations to a single coordinate.

Geocoder is the abstract collaborator consumed by MarkerReconciler.
GoogleGeocoder implements it against the Google Geocoding web service.

Errors:
    GeocodeNotFoundError: The service has no match for the text
    ProviderError: Transport failure or unexpected API status
"""

import logging
from abc import ABC, abstractmethod

import requests

from placefinder.constants import GoogleConfig
from placefinder.model.exceptions import GeocodeNotFoundError, ProviderError
from placefinder.model.position import Position

logger = logging.getLogger(__name__)


class Geocoder(ABC):
    """Resolves a free-text location to a Position."""

    @abstractmethod
    def geocode(self, text: str) -> Position:
        """Return the best matching position for ``text``.

        Raises:
            GeocodeNotFoundError: If nothing matches.
            ProviderError: On transport or service failure.
        """
        raise NotImplementedError


class GoogleGeocoder(Geocoder):
    """Geocoder backed by the Google Geocoding API.

    Example:
        geocoder = GoogleGeocoder(api_key="...")
        position = geocoder.geocode("Warsaw")
    """

    def __init__(
        self,
        api_key: str = GoogleConfig.API_KEY,
        session: requests.Session | None = None,
        timeout_s: float = GoogleConfig.TIMEOUT_S,
    ) -> None:
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout_s = timeout_s

    def geocode(self, text: str) -> Position:
        params = {"address": text, "key": self.api_key}
        logger.info(f"[GEOCODE] Resolving {text!r}")

        try:
            response = self.session.get(GoogleConfig.GEOCODE_URL, params=params, timeout=self.timeout_s)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"Geocoding request for {text!r} failed: {e}") from e

        status = data.get("status")
        results = data.get("results") or []
        if status == GoogleConfig.STATUS_ZERO_RESULTS or (status == GoogleConfig.STATUS_OK and not results):
            raise GeocodeNotFoundError(location_text=text)
        if status != GoogleConfig.STATUS_OK:
            raise ProviderError(f"Geocoding error: status={status}, msg={data.get('error_message')}")

        location = results[0].get("geometry", {}).get("location") or {}
        try:
            position = Position(lat=float(location["lat"]), lng=float(location["lng"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f"Geocoding result for {text!r} has no usable location: {location}") from e

        logger.info(f"[GEOCODE] {text!r} -> {position}")
        return position
