"""Paginated, case-insensitive name and address searches."""

import logging
from typing import Optional

from foodtruck_finder.core.errors import InvalidArgument
from foodtruck_finder.core.nearby import RecordStore
from foodtruck_finder.models import FoodTruck, SearchResult

logger = logging.getLogger(__name__)


class TextSearch:
    def __init__(self, store: RecordStore, *, default_limit: int = 10, max_limit: int = 100) -> None:
        self._store = store
        self.default_limit = default_limit
        self.max_limit = max_limit

    def search_by_name(
        self,
        name: str,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> SearchResult[FoodTruck]:
        return self._search("name", name, status, limit, offset)

    def search_by_address(
        self,
        address: str,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> SearchResult[FoodTruck]:
        """Match against both the street address and the free-text location description."""
        return self._search("address", address, status, limit, offset)

    def _search(
        self,
        field: str,
        term: Optional[str],
        status: Optional[str],
        limit: Optional[int],
        offset: Optional[int],
    ) -> SearchResult[FoodTruck]:
        term = (term or "").strip()
        if not term:
            raise InvalidArgument(f"{field.capitalize()} parameter is required")

        limit = self.default_limit if limit is None else limit
        offset = 0 if offset is None else offset
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= self.max_limit:
            raise InvalidArgument(f"limit must be an integer between 1 and {self.max_limit}")
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise InvalidArgument("offset must be a non-negative integer")

        status = (status or "").strip() or None
        result = self._store.search_by_field(field, term, status=status, limit=limit, offset=offset)
        logger.info(
            "Text search: field=%s term=%r status=%s returned=%d total=%d",
            field,
            term,
            status,
            len(result.data),
            result.total,
        )
        return result
