"""Client utilities for the Google Routes API."""

import logging
import math
from typing import Any, Dict

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from foodtruck_finder.core.errors import ProviderError
from foodtruck_finder.models import Kilometers, Point

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_COMPUTE_ROUTES_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"
_FIELD_MASK = "routes.distanceMeters,routes.duration"


def configure_session(pool_size: int = 10, max_retries: int = 0) -> requests.Session:
    """Size the shared session's connection pool to the distance fan-out.

    Retries only cover throttling and transient 5xx answers from Google.
    """
    retries = Retry(
        total=max_retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("POST",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=retries)
    _SESSION.mount("https://", adapter)
    return _SESSION


def _lat_lng(point: Point) -> Dict[str, Any]:
    return {"location": {"latLng": {"latitude": point.latitude, "longitude": point.longitude}}}


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or response.reason
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return response.reason or str(response.status_code)


def compute_route_distance_km(origin: Point, destination: Point, api_key: str, timeout: float = 10) -> Kilometers:
    """Driving distance between two points, in kilometers, using the first route returned."""
    if not api_key:
        raise ProviderError("Google Routes API failed: No Google API key found")

    body = {
        "origin": _lat_lng(origin),
        "destination": _lat_lng(destination),
        "travelMode": "DRIVE",
    }
    headers = {
        "Content-Type": "application/json",
        "X-Goog-Api-Key": api_key,
        "X-Goog-FieldMask": _FIELD_MASK,
    }

    try:
        response = _SESSION.post(_COMPUTE_ROUTES_URL, json=body, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise ProviderError(f"Google Routes API failed: {exc}") from exc

    if response.status_code >= 400:
        message = _error_message(response)
        logger.error("computeRoutes failed: status=%s, error_message=%s", response.status_code, message)
        raise ProviderError(f"Google Routes API failed: {message}")

    try:
        payload = response.json()
    except ValueError as exc:
        raise ProviderError(f"Google Routes API failed: {exc}") from exc

    routes = payload.get("routes") or []
    if not routes:
        raise ProviderError("Google Routes API failed: No routes found")

    meters = routes[0].get("distanceMeters")
    if meters is None:
        # zero distances are omitted from the JSON body
        meters = 0
    try:
        km = float(meters) / 1000
    except (TypeError, ValueError) as exc:
        raise ProviderError(f"Google Routes API failed: bad distanceMeters {meters!r}") from exc
    if not math.isfinite(km):
        raise ProviderError(f"Google Routes API failed: bad distanceMeters {meters!r}")
    return Kilometers(km)


class GoogleRoutesDistanceProvider:
    """Driving distance provider backed by Google Routes."""

    def __init__(self, api_key: str, timeout: float = 10) -> None:
        self.api_key = api_key
        self.timeout = timeout

    def distance(self, origin: Point, destination: Point) -> Kilometers:
        return compute_route_distance_km(origin, destination, api_key=self.api_key, timeout=self.timeout)
