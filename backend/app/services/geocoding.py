"""
Address search and reverse geocoding over Nominatim (OpenStreetMap).

Nominatim's usage policy allows at most one request per second, so every
request goes through a shared throttle.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """Geocoding service error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass
class GeocodingResult:
    """One address match."""
    address: str
    display_name: str
    latitude: float
    longitude: float
    type: Optional[str] = None
    importance: float = 0.0


def format_address(item: dict) -> str:
    """Concise 'street, city, state, postcode' form of a Nominatim item."""
    address = item.get("address") or {}
    parts: list[str] = []

    if address.get("house_number") and address.get("road"):
        parts.append(f"{address['house_number']} {address['road']}")
    elif address.get("road"):
        parts.append(address["road"])
    elif item.get("name"):
        parts.append(item["name"])

    city = (
        address.get("city")
        or address.get("town")
        or address.get("village")
        or address.get("municipality")
        or address.get("county")
    )
    if city:
        parts.append(city)
    if address.get("state"):
        parts.append(address["state"])
    if address.get("postcode"):
        parts.append(address["postcode"])

    return ", ".join(parts) or item.get("display_name", "")


def _to_result(item: dict) -> GeocodingResult:
    return GeocodingResult(
        address=format_address(item),
        display_name=item.get("display_name", ""),
        latitude=float(item["lat"]),
        longitude=float(item["lon"]),
        type=item.get("type"),
        importance=float(item.get("importance") or 0),
    )


class GeocodingClient:
    """
    Throttled Nominatim client.

    Failures are logged and reported as empty results; address lookup is a
    convenience and never blocks route planning.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        min_interval: Optional[float] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.GEOCODER_URL).rstrip("/")
        self.user_agent = user_agent or settings.GEOCODER_USER_AGENT
        self.min_interval = (
            min_interval if min_interval is not None else settings.GEOCODER_MIN_INTERVAL_SECONDS
        )
        self.timeout = httpx.Timeout(timeout_seconds or settings.GEOCODER_TIMEOUT_SECONDS)
        self._lock = asyncio.Lock()
        self._last_request = 0.0

    async def _throttle(self) -> None:
        elapsed = time.monotonic() - self._last_request
        if elapsed < self.min_interval:
            await asyncio.sleep(self.min_interval - elapsed)
        self._last_request = time.monotonic()

    async def _get(self, path: str, params: dict):
        """
        Throttled GET returning decoded JSON.

        Raises:
            GeocodingError: On HTTP, network or decoding errors
        """
        async with self._lock:
            await self._throttle()
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(
                        f"{self.base_url}{path}",
                        params=params,
                        headers={"User-Agent": self.user_agent},
                    )
                    response.raise_for_status()
                    return response.json()
            except httpx.HTTPStatusError as e:
                raise GeocodingError(
                    f"Geocoding failed: {e.response.status_code}", status_code=e.response.status_code
                ) from e
            except httpx.RequestError as e:
                raise GeocodingError(f"Geocoding network error: {e}") from e
            except ValueError as e:
                raise GeocodingError(f"Geocoding returned invalid JSON: {e}") from e

    async def search(self, query: str, limit: int = 5) -> list[GeocodingResult]:
        """Search for addresses matching a free-text query."""
        if not query.strip():
            return []
        try:
            data = await self._get(
                "/search",
                {"q": query, "format": "json", "addressdetails": 1, "limit": limit},
            )
            return [_to_result(item) for item in data]
        except GeocodingError as e:
            logger.warning(f"Address search failed for {query!r}: {e.message}")
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected geocoding payload for {query!r}: {e}")
        return []

    async def reverse(self, latitude: float, longitude: float) -> Optional[GeocodingResult]:
        """Address at a coordinate, None if unknown or on failure."""
        try:
            data = await self._get(
                "/reverse",
                {"lat": latitude, "lon": longitude, "format": "json", "addressdetails": 1},
            )
            if not isinstance(data, dict) or data.get("error"):
                return None
            return _to_result(data)
        except GeocodingError as e:
            logger.warning(f"Reverse geocoding failed for ({latitude}, {longitude}): {e.message}")
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected reverse geocoding payload: {e}")
        return None


geocoding_client = GeocodingClient()
