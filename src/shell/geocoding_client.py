"""Geocoding Clients - Imperative Shell.

This module handles HTTP communication with the free geocoding services
used for location checks:
- zippopotam.us (zip -> coordinates, primary)
- OpenStreetMap Nominatim (zip -> coordinates, fallback)
- ip-api.com (IP -> approximate location)

All I/O is contained here; parsing and verification logic is in the core
module. Lookups never raise: failures are logged and return None, and
the caller decides what an unavailable location means.
"""

import logging
from typing import Any

import requests

from src.core.access import IPLocation
from src.core.config import GeocodingConfig
from src.core.geo import Coordinate
from src.core.zipcode import (
    ZipLookupResult,
    normalize_zip_code,
    parse_nominatim_response,
    parse_zippopotam_response,
)
from src.shell.token_store import InMemoryTokenStore, TokenStore


logger = logging.getLogger(__name__)


class ZipGeocoder:
    """Resolves US zip codes to coordinates, with a TTL cache.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        config: GeocodingConfig | None = None,
        cache: TokenStore | None = None,
    ) -> None:
        """Initialize zip geocoder.

        Args:
            config: Geocoder URLs, timeout and cache TTL
            cache: Store for geocoded zips (in-memory if not provided)
        """
        self.config = config or GeocodingConfig()
        self.cache = cache if cache is not None else InMemoryTokenStore()

    def _get_json(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any | None:
        """GET a URL and decode JSON, returning None on any HTTP failure."""
        try:
            response = requests.get(
                url,
                params=params,
                headers={"Accept": "application/json", **(headers or {})},
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.warning("Geocoding request to %s failed: %s", url, str(e))
            return None

        if not response.ok:
            logger.info("Geocoding request to %s returned %d", url, response.status_code)
            return None

        try:
            return response.json()
        except ValueError:
            logger.warning("Geocoding response from %s was not JSON", url)
            return None

    def _lookup_primary(self, zip_code: str) -> ZipLookupResult | None:
        data = self._get_json(f"{self.config.zip_primary_url.rstrip('/')}/{zip_code}")
        if not isinstance(data, dict):
            return None
        return parse_zippopotam_response(data)

    def _lookup_fallback(self, zip_code: str) -> ZipLookupResult | None:
        data = self._get_json(
            self.config.zip_fallback_url,
            params={
                "postalcode": zip_code,
                "country": "us",
                "format": "json",
                "addressdetails": "1",
                "limit": "1",
            },
            headers={"User-Agent": self.config.user_agent},
        )
        if not isinstance(data, list):
            return None
        return parse_nominatim_response(data)

    def lookup(self, raw_zip: str) -> ZipLookupResult | None:
        """Geocode a zip code.

        This method performs HTTP I/O (unless the zip is cached).

        Args:
            raw_zip: User-entered zip code

        Returns:
            ZipLookupResult, or None if the zip is invalid or unknown
        """
        zip_code = normalize_zip_code(raw_zip)
        if zip_code is None:
            logger.info("Rejected malformed zip code")
            return None

        cached = self.cache.get(zip_code)
        if cached is not None:
            return cached

        logger.info("Geocoding zip %s", zip_code)

        result = self._lookup_primary(zip_code)
        if result is None:
            logger.info("Primary geocoder had no result for %s, trying fallback", zip_code)
            result = self._lookup_fallback(zip_code)

        if result is not None:
            self.cache.set(zip_code, result, self.config.zip_cache_ttl_seconds)

        return result


class IPGeolocationClient:
    """Looks up the approximate location of an IP address.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    FIELDS = "status,message,lat,lon,city,region,zip"

    def __init__(self, config: GeocodingConfig | None = None) -> None:
        self.config = config or GeocodingConfig()

    def lookup(self, ip: str) -> IPLocation | None:
        """Resolve an IP address to a location.

        This method performs HTTP I/O.

        Args:
            ip: Client IP address

        Returns:
            IPLocation, or None if the service failed or had no answer
        """
        url = f"{self.config.ip_lookup_url.rstrip('/')}/{ip}"

        try:
            response = requests.get(
                url,
                params={"fields": self.FIELDS},
                timeout=self.config.timeout_seconds,
            )
            if not response.ok:
                logger.info("IP lookup returned %d", response.status_code)
                return None
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("IP lookup failed: %s", str(e))
            return None

        if data.get("status") != "success" or not data.get("lat") or not data.get("lon"):
            logger.info("IP lookup had no location: %s", data.get("message"))
            return None

        return IPLocation(
            coordinate=Coordinate(
                latitude=float(data["lat"]),
                longitude=float(data["lon"]),
            ),
            city=data.get("city"),
            state=data.get("region"),
            zip_code=data.get("zip"),
        )
