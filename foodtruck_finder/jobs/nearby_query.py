"""CLI job that runs one nearby search and prints the ranked food trucks as JSON."""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from foodtruck_finder.core.config import get_settings
from foodtruck_finder.core.errors import InvalidArgument, ProviderError, SearchCancelled, UpstreamUnavailable
from foodtruck_finder.core.services import build_nearby_search
from foodtruck_finder.core.transform import food_truck_to_json
from foodtruck_finder.models import Point

logger = logging.getLogger(__name__)


def run_nearby_query(
    *,
    latitude: float,
    longitude: float,
    radius_km: Optional[float],
    status: Optional[str],
    limit: Optional[int],
    timeout: Optional[float],
) -> List[Dict[str, Any]]:
    logger.info("Running nearby search at lat=%s long=%s", latitude, longitude)
    with build_nearby_search() as nearby:
        trucks = nearby.find_nearby(
            Point(latitude, longitude),
            radius_km=radius_km,
            status=status,
            limit=limit,
            timeout=timeout,
        )
    return [food_truck_to_json(truck) for truck in trucks]


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Find the nearest food trucks by driving distance")
    parser.add_argument("--lat", dest="latitude", type=float, required=True, help="Origin latitude")
    parser.add_argument("--long", dest="longitude", type=float, required=True, help="Origin longitude")
    parser.add_argument("--radius", dest="radius_km", type=float, help="Search radius in kilometers")
    parser.add_argument("--status", dest="status", help="Permit status filter")
    parser.add_argument("--limit", dest="limit", type=int, help="Maximum number of trucks to return")
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=float,
        default=settings.nearby_timeout_seconds,
        help="Seconds to wait for distance lookups before giving up",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        results = run_nearby_query(
            latitude=args.latitude,
            longitude=args.longitude,
            radius_km=args.radius_km,
            status=args.status,
            limit=args.limit,
            timeout=args.timeout,
        )
    except InvalidArgument as exc:
        logger.error("Invalid arguments: %s", exc)
        return 2
    except (UpstreamUnavailable, ProviderError, SearchCancelled) as exc:
        logger.error("Nearby search failed: %s", exc)
        return 1

    json.dump(results, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
