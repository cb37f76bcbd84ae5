"""Radius-based nearby search over food trucks, ranked by driving distance.

Candidates come from a record store filtered by permit status. Each candidate with a
location gets one distance lookup, fanned out over a bounded thread pool. Lookups
that fail are dropped from the ranking (or abort the search in strict mode), the
rest are filtered by radius, ordered by distance with retrieval order breaking
ties, and truncated to the requested limit.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from foodtruck_finder.core.errors import InvalidArgument, ProviderError, SearchCancelled
from foodtruck_finder.models import FoodTruck, Kilometers, Point, ScoredCandidate, SearchParameters, SearchResult

logger = logging.getLogger(__name__)

# how often a blocked join re-checks the cancel event
_CANCEL_POLL_SECONDS = 0.05


class DistanceProvider(Protocol):
    def distance(self, origin: Point, destination: Point) -> Kilometers:
        ...


class RecordStore(Protocol):
    def list_by_status(self, status: str) -> Sequence[FoodTruck]:
        ...

    def search_by_field(
        self,
        field: str,
        term: str,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> SearchResult[FoodTruck]:
        ...


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _validate_origin(origin: Any) -> Point:
    if not isinstance(origin, Point):
        raise InvalidArgument("origin must be a Point")
    if origin.is_valid():
        return origin

    latitude = _as_float(origin.latitude)
    longitude = _as_float(origin.longitude)
    if latitude is None or longitude is None:
        raise InvalidArgument("Valid latitude and longitude are required")
    if not -90 <= latitude <= 90:
        raise InvalidArgument("Latitude must be between -90 and 90")
    raise InvalidArgument("Longitude must be between -180 and 180")


class NearbySearch:
    """Find the food trucks closest to a point by driving distance."""

    def __init__(
        self,
        store: RecordStore,
        distance_provider: DistanceProvider,
        *,
        max_workers: int = 8,
        default_radius_km: float = 5.0,
        min_radius_km: float = 0.1,
        max_radius_km: float = 50.0,
        default_limit: int = 5,
        max_limit: int = 50,
        default_status: str = "APPROVED",
        isolate_failures: bool = True,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._store = store
        self._distance_provider = distance_provider
        self.default_radius_km = default_radius_km
        self.min_radius_km = min_radius_km
        self.max_radius_km = max_radius_km
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.default_status = default_status
        self.isolate_failures = isolate_failures
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="nearby-distance")

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "NearbySearch":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def build_parameters(
        self,
        origin: Point,
        radius_km: Optional[float] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> SearchParameters:
        origin = _validate_origin(origin)

        if radius_km is None:
            radius = float(self.default_radius_km)
        else:
            radius = _as_float(radius_km)
            if radius is None:
                raise InvalidArgument("radius must be a finite number")
        if radius <= 0 or not self.min_radius_km <= radius <= self.max_radius_km:
            raise InvalidArgument(f"radius must be between {self.min_radius_km:g} and {self.max_radius_km:g} km")

        if limit is None:
            limit = self.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise InvalidArgument("limit must be an integer")
        if not 1 <= limit <= self.max_limit:
            raise InvalidArgument(f"limit must be between 1 and {self.max_limit}")

        status = (status or "").strip() or self.default_status

        return SearchParameters(origin=origin, radius_km=Kilometers(radius), status=status, limit=limit)

    def find_nearby(
        self,
        origin: Point,
        radius_km: Optional[float] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        *,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[FoodTruck]:
        """Return up to ``limit`` trucks within ``radius_km`` of ``origin``, nearest first.

        Raises InvalidArgument before touching any collaborator, UpstreamUnavailable
        when the store fails, SearchCancelled when ``cancel_event`` is set or
        ``timeout`` seconds pass before every distance lookup settles, and
        ProviderError only when failure isolation is turned off.
        """
        params = self.build_parameters(origin, radius_km=radius_km, status=status, limit=limit)

        candidates = self._store.list_by_status(params.status)
        located = [(position, truck) for position, truck in enumerate(candidates) if truck.location is not None]
        if len(located) < len(candidates):
            logger.debug("Skipping %d food trucks without a location", len(candidates) - len(located))

        scored, failures = self._score(params.origin, located, timeout=timeout, cancel_event=cancel_event)
        if located and failures == len(located):
            logger.warning("All %d distance lookups failed for status=%s", failures, params.status)

        in_range = [item for item in scored if item.distance_km <= params.radius_km]
        ranked = sorted(in_range, key=lambda item: (item.distance_km, item.position))
        results = [item.candidate for item in ranked[: params.limit]]

        logger.info(
            "Nearby search: status=%s radius_km=%.2f candidates=%d located=%d failed=%d in_range=%d returned=%d",
            params.status,
            params.radius_km,
            len(candidates),
            len(located),
            failures,
            len(in_range),
            len(results),
        )
        return results

    def _score(
        self,
        origin: Point,
        located: List[Tuple[int, FoodTruck]],
        *,
        timeout: Optional[float],
        cancel_event: Optional[threading.Event],
    ) -> Tuple[List[ScoredCandidate], int]:
        if not located:
            return [], 0

        deadline = time.monotonic() + timeout if timeout is not None else None
        pending: Dict[Future, Tuple[int, FoodTruck]] = {
            self._executor.submit(self._distance_provider.distance, origin, truck.location): (position, truck)
            for position, truck in located
        }
        scored: List[ScoredCandidate] = []
        failures = 0

        try:
            while pending:
                if cancel_event is not None and cancel_event.is_set():
                    raise SearchCancelled("nearby search was cancelled")

                wait_for = None
                if deadline is not None:
                    wait_for = deadline - time.monotonic()
                    if wait_for <= 0:
                        raise SearchCancelled(f"nearby search did not finish within {timeout:g}s")
                if cancel_event is not None:
                    wait_for = _CANCEL_POLL_SECONDS if wait_for is None else min(wait_for, _CANCEL_POLL_SECONDS)

                done, _ = wait(pending, timeout=wait_for, return_when=FIRST_COMPLETED)
                for future in done:
                    position, truck = pending.pop(future)
                    try:
                        distance = _settled_distance(future)
                    except ProviderError as exc:
                        failures += 1
                        if not self.isolate_failures:
                            raise
                        logger.warning("Dropping food truck id=%s from ranking: %s", truck.id, exc)
                        continue
                    scored.append(ScoredCandidate(candidate=truck, distance_km=distance, position=position))
        finally:
            for future in pending:
                future.cancel()

        return scored, failures


def _settled_distance(future: Future) -> Kilometers:
    try:
        value = future.result()
    except ProviderError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise ProviderError(f"distance lookup failed: {exc}") from exc

    distance = _as_float(value)
    if distance is None or distance < 0:
        raise ProviderError(f"distance lookup returned {value!r}")
    return Kilometers(distance)
