"""HTTP entrypoint exposing the food truck searches."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any

from flask import Blueprint, Flask, jsonify, request

from foodtruck_finder.core.config import get_settings
from foodtruck_finder.core.errors import InvalidArgument, ProviderError, SearchCancelled, UpstreamUnavailable
from foodtruck_finder.core.nearby import NearbySearch
from foodtruck_finder.core.params import get_float, get_int, get_str
from foodtruck_finder.core.search import TextSearch
from foodtruck_finder.core.services import build_nearby_search, build_text_search
from foodtruck_finder.core.transform import food_truck_to_json, search_result_to_json
from foodtruck_finder.models import Point

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App & services ----------
app = Flask(__name__)
food_trucks = Blueprint("food_trucks", __name__, url_prefix="/food-trucks")


@lru_cache(maxsize=1)
def get_nearby_search() -> NearbySearch:
    return build_nearby_search()


@lru_cache(maxsize=1)
def get_text_search() -> TextSearch:
    return build_text_search()


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings only, never touches the database."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "port_config": settings.port,
                "routes_api_configured": bool(settings.google_maps_api_key),
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@food_trucks.get("/search")
def search_by_name() -> Any:
    args = request.args
    name = get_str(args, "name")
    if not name:
        raise InvalidArgument("Name parameter is required")

    result = get_text_search().search_by_name(
        name,
        status=get_str(args, "status"),
        limit=get_int(args, "limit"),
        offset=get_int(args, "offset"),
    )
    return jsonify(search_result_to_json(result)), 200


@food_trucks.get("/search-by-address")
def search_by_address() -> Any:
    args = request.args
    address = get_str(args, "address")
    if not address:
        raise InvalidArgument("Address parameter is required")

    result = get_text_search().search_by_address(
        address,
        status=get_str(args, "status"),
        limit=get_int(args, "limit"),
        offset=get_int(args, "offset"),
    )
    return jsonify(search_result_to_json(result)), 200


@food_trucks.get("/nearby")
def find_nearby() -> Any:
    """
    Nearest food trucks by driving distance.
    Required: lat, long
    Optional: radius (km, default 5), status (default APPROVED), limit (default 5)
    """
    args = request.args
    try:
        latitude = get_float(args, "lat", required=True)
        longitude = get_float(args, "long", required=True)
    except InvalidArgument:
        raise InvalidArgument("Valid latitude and longitude are required") from None

    trucks = get_nearby_search().find_nearby(
        Point(latitude, longitude),
        radius_km=get_float(args, "radius"),
        status=get_str(args, "status"),
        limit=get_int(args, "limit"),
        timeout=get_settings().nearby_timeout_seconds,
    )
    return jsonify([food_truck_to_json(truck) for truck in trucks]), 200


app.register_blueprint(food_trucks)
app.register_blueprint(food_trucks, url_prefix="/api/food-trucks", name="api_food_trucks")


# ---------- Errors ----------


@app.errorhandler(InvalidArgument)
def handle_invalid_argument(exc: InvalidArgument) -> Any:
    return jsonify({"error": str(exc)}), 400


@app.errorhandler(ProviderError)
def handle_provider_error(exc: ProviderError) -> Any:
    logger.error("Distance provider failed: %s", exc)
    return jsonify({"error": str(exc)}), 502


@app.errorhandler(UpstreamUnavailable)
def handle_upstream_unavailable(exc: UpstreamUnavailable) -> Any:
    return jsonify({"error": "record store unavailable"}), 503


@app.errorhandler(SearchCancelled)
def handle_search_cancelled(exc: SearchCancelled) -> Any:
    logger.warning("Nearby search cancelled: %s", exc)
    return jsonify({"error": str(exc)}), 504


@app.after_request
def add_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = get_settings().client_url
    response.headers["Access-Control-Allow-Credentials"] = "true"
    return response


def main() -> None:
    settings = get_settings()
    port = int(os.getenv("PORT") or settings.port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port, threaded=True)


if __name__ == "__main__":
    main()
