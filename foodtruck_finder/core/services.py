"""Wiring of the search components from settings."""

import logging
from typing import Optional

from foodtruck_finder.core.config import Settings, get_settings
from foodtruck_finder.core.db import PostgresRecordStore
from foodtruck_finder.core.nearby import NearbySearch
from foodtruck_finder.core.search import TextSearch
from foodtruck_finder.vendors import google_routes

logger = logging.getLogger(__name__)


def build_nearby_search(settings: Optional[Settings] = None) -> NearbySearch:
    settings = settings or get_settings()
    google_routes.configure_session(
        pool_size=settings.distance_max_workers,
        max_retries=settings.routes_max_retries,
    )
    provider = google_routes.GoogleRoutesDistanceProvider(
        api_key=settings.google_maps_api_key,
        timeout=settings.routes_timeout_seconds,
    )
    logger.info(
        "Nearby search ready: max_workers=%d isolate_failures=%s",
        settings.distance_max_workers,
        settings.isolate_distance_failures,
    )
    return NearbySearch(
        PostgresRecordStore(),
        provider,
        max_workers=settings.distance_max_workers,
        default_radius_km=settings.default_radius_km,
        min_radius_km=settings.min_radius_km,
        max_radius_km=settings.max_radius_km,
        default_limit=settings.default_nearby_limit,
        max_limit=settings.max_nearby_limit,
        default_status=settings.default_status,
        isolate_failures=settings.isolate_distance_failures,
    )


def build_text_search() -> TextSearch:
    return TextSearch(PostgresRecordStore())
