"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    google_maps_api_key: str
    database_url: str
    port: int = 8080
    db_pool_max: int = 10
    db_pool_wait_seconds: float = 30.0
    min_radius_km: float = 0.1
    default_radius_km: float = 5.0
    max_radius_km: float = 50.0
    default_nearby_limit: int = 5
    max_nearby_limit: int = 50
    default_status: str = "APPROVED"
    distance_max_workers: int = 8
    nearby_timeout_seconds: float = 25.0
    isolate_distance_failures: bool = True
    routes_timeout_seconds: float = 10.0
    routes_max_retries: int = 0
    client_url: str = "http://localhost:4200"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_maps_api_key = os.getenv("GOOGLE_MAPS_API_KEY", "")
    database_url = os.getenv("DATABASE_URL", "")
    port = int(os.getenv("PORT", "8080"))
    db_pool_max = int(os.getenv("DB_POOL_MAX", "10"))
    db_pool_wait_seconds = float(os.getenv("DB_POOL_WAIT_SECONDS", "30"))
    min_radius_km = float(os.getenv("NEARBY_MIN_RADIUS_KM", "0.1"))
    default_radius_km = float(os.getenv("NEARBY_DEFAULT_RADIUS_KM", "5"))
    max_radius_km = float(os.getenv("NEARBY_MAX_RADIUS_KM", "50"))
    default_nearby_limit = int(os.getenv("NEARBY_DEFAULT_LIMIT", "5"))
    max_nearby_limit = int(os.getenv("NEARBY_MAX_LIMIT", "50"))
    default_status = (os.getenv("NEARBY_DEFAULT_STATUS") or "APPROVED").strip()
    distance_max_workers = int(os.getenv("NEARBY_MAX_WORKERS", "8"))
    nearby_timeout_seconds = float(os.getenv("NEARBY_TIMEOUT_SECONDS", "25"))
    isolate_distance_failures = os.getenv("NEARBY_ISOLATE_FAILURES", "true").lower() in _TRUTHY
    routes_timeout_seconds = float(os.getenv("ROUTES_TIMEOUT_SECONDS", "10"))
    routes_max_retries = int(os.getenv("ROUTES_MAX_RETRIES", "0"))
    client_url = os.getenv("CLIENT_URL", "http://localhost:4200")

    if not database_url:
        logger.warning("DATABASE_URL is not set; database operations will fail.")
    if not google_maps_api_key:
        logger.warning("GOOGLE_MAPS_API_KEY is not configured; nearby searches will find nothing.")
    if distance_max_workers < 1:
        logger.warning("NEARBY_MAX_WORKERS=%d is invalid; falling back to 1.", distance_max_workers)
        distance_max_workers = 1
    if db_pool_max < 1:
        logger.warning("DB_POOL_MAX=%d is invalid; falling back to 1.", db_pool_max)
        db_pool_max = 1

    return Settings(
        google_maps_api_key=google_maps_api_key,
        database_url=database_url,
        port=port,
        db_pool_max=db_pool_max,
        db_pool_wait_seconds=db_pool_wait_seconds,
        min_radius_km=min_radius_km,
        default_radius_km=default_radius_km,
        max_radius_km=max_radius_km,
        default_nearby_limit=default_nearby_limit,
        max_nearby_limit=max_nearby_limit,
        default_status=default_status,
        distance_max_workers=distance_max_workers,
        nearby_timeout_seconds=nearby_timeout_seconds,
        isolate_distance_failures=isolate_distance_failures,
        routes_timeout_seconds=routes_timeout_seconds,
        routes_max_retries=routes_max_retries,
        client_url=client_url,
    )
