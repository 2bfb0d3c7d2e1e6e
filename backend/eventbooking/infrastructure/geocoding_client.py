"""
Reverse geocoding (lat/lng -> street address and city) via the Google
Geocoding API.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from eventbooking.core.config import Settings
from eventbooking.core.logging import get_logger

logger = get_logger(__name__)


class GeocodingError(Exception):
    pass


@dataclass
class GeocodedPlace:
    address: str
    city: str


class Geocoder(ABC):
    @abstractmethod
    async def reverse(self, lat: float, lng: float) -> GeocodedPlace:
        """Raises GeocodingError when no address or city can be resolved."""

    async def close(self) -> None:
        pass


class GoogleGeocoder(Geocoder):
    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.api_key = settings.GOOGLE_MAPS_API_KEY
        self.url = settings.GEOCODING_URL
        self._http_client = http_client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)

    async def reverse(self, lat: float, lng: float) -> GeocodedPlace:
        if not self.api_key:
            raise GeocodingError("GOOGLE_MAPS_API_KEY is not set")

        try:
            response = await self._http_client.get(
                self.url, params={"latlng": f"{lat},{lng}", "key": self.api_key}
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GeocodingError(f"Geocoding request failed: {e}") from e

        results = data.get("results") or []
        if not results:
            raise GeocodingError(
                f"No address found for the given coordinates (status={data.get('status')})"
            )

        first = results[0]
        address = first.get("formatted_address")
        if not address:
            raise GeocodingError("Geocoding result has no formatted address")
        return GeocodedPlace(address=address, city=_city_from_components(first.get("address_components", [])))

    async def close(self) -> None:
        await self._http_client.aclose()


def _city_from_components(components: list[dict[str, Any]]) -> str:
    for component in components:
        if "locality" in component.get("types", []):
            return component["long_name"]
    # No locality: the third component is usually the city-level area
    try:
        return components[2]["long_name"]
    except (IndexError, KeyError) as e:
        raise GeocodingError("City not found in address components") from e
