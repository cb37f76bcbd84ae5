"""Utilities for turning database rows into models and models into API payloads."""

import logging
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from foodtruck_finder.models import FoodTruck, SearchResult

logger = logging.getLogger(__name__)

# model attribute -> JSON key, in the shape the web client already consumes
_JSON_KEYS = {
    "id": "id",
    "object_id": "objectId",
    "applicant": "applicant",
    "facility_type": "facilityType",
    "cnn": "cnn",
    "location_description": "locationDescription",
    "address": "address",
    "block_lot": "blockLot",
    "block": "block",
    "lot": "lot",
    "permit": "permit",
    "status": "status",
    "food_items": "foodItems",
    "x": "x",
    "y": "y",
    "latitude": "latitude",
    "longitude": "longitude",
    "schedule": "schedule",
    "approved": "approved",
    "received": "received",
    "prior_permit": "priorPermit",
    "expiration_date": "expirationDate",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}

_COORDINATE_FIELDS = ("x", "y", "latitude", "longitude")


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _iso(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def row_to_food_truck(row: Mapping[str, Any]) -> FoodTruck:
    values = {name: row.get(name) for name in _JSON_KEYS}
    for name in _COORDINATE_FIELDS:
        values[name] = _safe_float(values[name])
    values["applicant"] = values["applicant"] or ""
    values["status"] = values["status"] or ""
    return FoodTruck(**values)


def food_truck_to_json(truck: FoodTruck) -> Dict[str, Any]:
    return {key: _iso(getattr(truck, name)) for name, key in _JSON_KEYS.items()}


def search_result_to_json(result: SearchResult) -> Dict[str, Any]:
    return {
        "data": [food_truck_to_json(truck) for truck in result.data],
        "total": result.total,
        "pagination": {
            "limit": result.pagination.limit,
            "offset": result.pagination.offset,
            "hasMore": result.pagination.has_more,
        },
    }
