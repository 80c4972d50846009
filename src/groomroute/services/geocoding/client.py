"""HTTP client for the OpenStreetMap Nominatim geocoder."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GeocodingResult:
    success: bool
    lat: Optional[float] = None
    lng: Optional[float] = None
    formatted_address: Optional[str] = None
    zip_code: Optional[str] = None
    error: Optional[str] = None


class NominatimClient:
    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.nominatim_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("Nominatim base URL is not configured.")
        self.user_agent = user_agent or settings.geocoding_user_agent
        self.timeout = timeout if timeout is not None else settings.geocoding_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.geocoding_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.geocoding_backoff_seconds
        )
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout),
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    def _search(self, address: str) -> list[dict]:
        params = {"q": address, "format": "json", "limit": 1, "addressdetails": 1}
        url = f"{self.base_url}/search"
        with self._get_client() as client:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    return data if isinstance(data, list) else []
                except httpx.HTTPStatusError as e:
                    # Client errors will not improve on retry.
                    if e.response.status_code < 500 and e.response.status_code != 429:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"Nominatim returned {e.response.status_code}, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries})"
                    )
                    time.sleep(wait_time)
                except (httpx.TimeoutException, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Nominatim request failed after {self.max_retries} retries: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Nominatim network error, retrying in {wait_time:.1f}s: {e}")
                    time.sleep(wait_time)

    def geocode(self, address: str) -> GeocodingResult:
        """Resolve a free-text address. Failures are reported, never raised."""
        if not address or not address.strip():
            return GeocodingResult(success=False, error="Address is required")
        try:
            results = self._search(address.strip())
        except httpx.HTTPError as e:
            logger.warning(f"Geocoding failed for '{address}': {e}")
            return GeocodingResult(success=False, error="Geocoding service unavailable")

        if not results:
            return GeocodingResult(success=False, error="Address not found")

        first = results[0]
        try:
            lat, lng = float(first["lat"]), float(first["lon"])
        except (KeyError, TypeError, ValueError):
            return GeocodingResult(success=False, error="Address not found")
        return GeocodingResult(
            success=True,
            lat=lat,
            lng=lng,
            formatted_address=first.get("display_name"),
            zip_code=(first.get("address") or {}).get("postcode"),
        )


def geocode_address(address: str) -> GeocodingResult:
    return NominatimClient().geocode(address)
