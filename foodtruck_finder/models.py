"""Core data models shared by the search components and the HTTP layer."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Generic, List, NewType, Optional, TypeVar, Union

Kilometers = NewType("Kilometers", float)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Point:
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """Both coordinates are finite numbers inside the WGS84 ranges."""
        try:
            lat = float(self.latitude)
            lng = float(self.longitude)
        except (TypeError, ValueError):
            return False
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return False
        return -90 <= lat <= 90 and -180 <= lng <= 180


@dataclass(slots=True)
class FoodTruck:
    """A mobile food facility permit from the SF open data set."""

    id: Optional[Union[int, str]] = None
    object_id: Optional[str] = None
    applicant: str = ""
    facility_type: Optional[str] = None
    cnn: Optional[str] = None
    location_description: Optional[str] = None
    address: Optional[str] = None
    block_lot: Optional[str] = None
    block: Optional[str] = None
    lot: Optional[str] = None
    permit: Optional[str] = None
    status: str = ""
    food_items: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    schedule: Optional[str] = None
    approved: Optional[Union[date, datetime]] = None
    received: Optional[str] = None
    prior_permit: Optional[str] = None
    expiration_date: Optional[Union[date, datetime]] = None
    created_at: Optional[datetime] = field(default=None, repr=False)
    updated_at: Optional[datetime] = field(default=None, repr=False)

    @property
    def location(self) -> Optional[Point]:
        if self.latitude is None or self.longitude is None:
            return None
        return Point(self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class ScoredCandidate:
    candidate: FoodTruck
    distance_km: Kilometers
    # retrieval index, breaks ties between equal distances
    position: int


@dataclass(frozen=True, slots=True)
class SearchParameters:
    origin: Point
    radius_km: Kilometers
    status: str
    limit: int


@dataclass(frozen=True, slots=True)
class Pagination:
    limit: int
    offset: int
    has_more: bool

    @classmethod
    def build(cls, limit: int, offset: int, total: int) -> "Pagination":
        return cls(limit=limit, offset=offset, has_more=offset + limit < total)


@dataclass
class SearchResult(Generic[T]):
    data: List[T]
    total: int
    pagination: Pagination
