"""Database helpers and the PostgreSQL-backed food truck store."""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2 import extras, pool

from foodtruck_finder.core.config import get_settings
from foodtruck_finder.core.errors import InvalidArgument, UpstreamUnavailable
from foodtruck_finder.core.transform import row_to_food_truck
from foodtruck_finder.models import FoodTruck, Pagination, SearchResult

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.ThreadedConnectionPool] = None
# one slot per pooled connection; getconn raises instead of blocking when the pool is empty
_pool_slots: Optional[threading.BoundedSemaphore] = None
_pool_lock = threading.Lock()


def init_pool(minconn: int = 1, maxconn: Optional[int] = None) -> pool.ThreadedConnectionPool:
    """Initialise and return the shared connection pool, sized by DB_POOL_MAX by default."""
    global _connection_pool, _pool_slots
    with _pool_lock:
        if _connection_pool is None:
            settings = get_settings()
            if not settings.database_url:
                raise RuntimeError("DATABASE_URL is required for database connections")
            maxconn = maxconn or settings.db_pool_max
            _connection_pool = pool.ThreadedConnectionPool(
                min(minconn, maxconn),
                maxconn,
                dsn=settings.database_url,
                connect_timeout=10,
            )
            _pool_slots = threading.BoundedSemaphore(maxconn)
            logger.info("Database connection pool initialised: maxconn=%d", maxconn)
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    slots = _pool_slots
    if slots is not None and not slots.acquire(timeout=get_settings().db_pool_wait_seconds):
        raise pool.PoolError("timed out waiting for a free database connection")
    try:
        conn = pg_pool.getconn()
        try:
            yield conn
        finally:
            pg_pool.putconn(conn)
    finally:
        if slots is not None:
            slots.release()


_COLUMNS = """
    id,
    object_id,
    applicant,
    facility_type,
    cnn,
    location_description,
    address,
    block_lot,
    block,
    lot,
    permit,
    status,
    food_items,
    x,
    y,
    latitude,
    longitude,
    schedule,
    approved,
    received,
    prior_permit,
    expiration_date,
    created_at,
    updated_at
"""

_LIST_BY_STATUS = f"""
SELECT {_COLUMNS}
FROM food_trucks
WHERE LOWER(status) = LOWER(%(status)s)
ORDER BY id ASC;
"""

# field -> (match clause, primary sort column)
_SEARCH_FIELDS = {
    "name": ("applicant ILIKE %(pattern)s", "applicant"),
    "address": ("(address ILIKE %(pattern)s OR location_description ILIKE %(pattern)s)", "address"),
}

_STATUS_CLAUSE = " AND LOWER(status) = LOWER(%(status)s)"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostgresRecordStore:
    """Read-only access to the ``food_trucks`` table."""

    def list_by_status(self, status: str) -> List[FoodTruck]:
        rows = self._fetch_all(_LIST_BY_STATUS, {"status": status})
        logger.debug("Loaded %d food trucks with status=%s", len(rows), status)
        return [row_to_food_truck(row) for row in rows]

    def search_by_field(
        self,
        field: str,
        term: str,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> SearchResult[FoodTruck]:
        if field not in _SEARCH_FIELDS:
            raise InvalidArgument(f"unsupported search field: {field}")

        match_clause, sort_column = _SEARCH_FIELDS[field]
        where = match_clause
        params: Dict[str, Any] = {"pattern": f"%{_escape_like(term)}%", "limit": limit, "offset": offset}
        if status:
            where += _STATUS_CLAUSE
            params["status"] = status

        data_sql = (
            f"SELECT {_COLUMNS} FROM food_trucks WHERE {where} "
            f"ORDER BY {sort_column} ASC, created_at DESC LIMIT %(limit)s OFFSET %(offset)s;"
        )
        count_sql = f"SELECT COUNT(*) AS total FROM food_trucks WHERE {where};"

        try:
            with get_connection() as conn:
                with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                    cur.execute(data_sql, params)
                    rows = cur.fetchall()
                    cur.execute(count_sql, params)
                    total = int(cur.fetchone()["total"])
        except (psycopg2.Error, RuntimeError) as exc:
            logger.error("search_by_field failed: field=%s error=%s", field, exc)
            raise UpstreamUnavailable(f"record store unavailable: {exc}") from exc

        return SearchResult(
            data=[row_to_food_truck(row) for row in rows],
            total=total,
            pagination=Pagination.build(limit, offset, total),
        )

    def _fetch_all(self, sql: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        try:
            with get_connection() as conn:
                with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                    cur.execute(sql, params)
                    return cur.fetchall()
        except (psycopg2.Error, RuntimeError) as exc:
            logger.error("Record store query failed: %s", exc)
            raise UpstreamUnavailable(f"record store unavailable: {exc}") from exc
