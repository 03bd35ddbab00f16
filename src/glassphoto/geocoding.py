"""Reverse geocoding through the Google Maps Geocoding API."""

from __future__ import annotations

import httpx

from glassphoto.common.logging import get_logger


class Geocoder:
    """Turns coordinates into a human-readable address.

    Failures never raise: any error is logged and reported as no address.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = "https://maps.googleapis.com/maps/api/geocode/json",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._api_key = api_key
        self._client = httpx.AsyncClient(timeout=timeout_seconds, transport=transport)
        self.logger = get_logger("geocoding")

    async def reverse_geocode(self, lat: float, lng: float) -> str | None:
        """Resolve ``lat``/``lng`` to the first formatted address, if any."""
        try:
            response = await self._client.get(
                self.endpoint,
                params={"latlng": f"{lat},{lng}", "key": self._api_key},
            )
            response.raise_for_status()
            data = response.json()

            results = data.get("results") or []
            if results:
                return results[0]["formatted_address"]

            self.logger.debug("geocode_no_results", lat=lat, lng=lng, status=data.get("status"))
            return None

        except Exception as e:
            self.logger.error("geocode_failed", lat=lat, lng=lng, error=str(e))
            return None

    async def aclose(self) -> None:
        await self._client.aclose()
