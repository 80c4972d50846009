"""Address geocoding."""

from .client import GeocodingResult, NominatimClient, geocode_address

__all__ = ["GeocodingResult", "NominatimClient", "geocode_address"]
