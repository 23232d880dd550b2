"""
Distance lookup via the Google Distance Matrix API.

Returns one-way driving distance (miles) and duration (minutes) between two
free-text addresses. Every failure mode (missing key, network, HTTP status,
no route) raises DistanceLookupError so callers handle a single type.
"""

import logging

import requests
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
METERS_PER_MILE = 1609.344


class DistanceLookupError(Exception):
    """Raised when a distance lookup cannot produce a result."""


class DistanceResult(BaseModel):
    """One-way trip figures."""

    miles: float
    minutes: float


class DistanceMatrixClient:
    """Driving distance between addresses."""

    def __init__(self, api_key: str | None, timeout_seconds: int = 10, base_url: str = DISTANCE_MATRIX_URL):
        """
        Args:
            api_key: Google Maps API key. May be empty; lookups then fail
                with DistanceLookupError instead of failing at startup.
            timeout_seconds: HTTP timeout per lookup
            base_url: Endpoint override (tests, proxies)
        """
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url

    def lookup(self, origin: str, destination: str) -> DistanceResult:
        """
        One-way driving distance and time from origin to destination.

        Raises:
            DistanceLookupError: On any failure
        """
        if not self.api_key:
            raise DistanceLookupError("Maps API key missing")

        params = {
            "origins": origin,
            "destinations": destination,
            "key": self.api_key,
            "units": "imperial",
        }

        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout_seconds)
        except requests.exceptions.RequestException as e:
            logger.error(f"Distance API connection failed: {e}")
            raise DistanceLookupError(f"Connection failed: {e}")

        if response.status_code != 200:
            raise DistanceLookupError(f"Distance API HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            raise DistanceLookupError("Invalid response from distance API")

        try:
            element = data["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError):
            element = None

        if not element or element.get("status") != "OK":
            status = element.get("status") if element else data.get("status", "no result")
            raise DistanceLookupError(f"Distance API: {status}")

        try:
            meters = float(element["distance"]["value"])
            seconds = float(element["duration"]["value"])
        except (KeyError, TypeError, ValueError):
            raise DistanceLookupError("Distance API: malformed element")

        result = DistanceResult(miles=meters / METERS_PER_MILE, minutes=seconds / 60.0)
        logger.info(f"Distance lookup: {result.miles:.1f} mi, {result.minutes:.0f} min one way")
        return result
