"""Versioned read-model cache for property listing, search and detail views.

Every cache group owns an epoch counter, and the property-detail group keeps
one more counter per property id. Keys embed the epochs that were current
when the key was built, so a reader must build its key before it reads the
database. Invalidation bumps the counter, which orphans every older key; the
orphans expire through their TTL.
"""

import hashlib
import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable

from .cache import Cache

logger = logging.getLogger(__name__)


class CacheGroup(str, Enum):
    LISTING_PAGE = "listing-page"
    SEARCH_RESULTS = "search-results"
    PROPERTY_DETAIL = "property-detail"
    CITY_LIST = "city-list"


class ReadModelCache:
    def __init__(self, backend: Cache, ttl: int = 300, namespace: str = "read-model"):
        self.backend = backend
        self.ttl = ttl
        self.namespace = namespace

    def _epoch_key(self, group: CacheGroup, scope: Any = None) -> str:
        key = f"{self.namespace}:epoch:{group.value}"
        if scope is None:
            return key
        return f"{key}:{scope}"

    async def _epoch(self, group: CacheGroup, scope: Any = None) -> int:
        raw = await self.backend.get(self._epoch_key(group, scope))
        try:
            return int(raw) if raw is not None else 0
        except (TypeError, ValueError):
            logger.warning("Corrupt cache epoch for %s, treating as 0", group.value)
            return 0

    @staticmethod
    def _fingerprint(params: Iterable[Any]) -> str:
        params = list(params)
        if not params:
            return "all"
        raw = json.dumps(params, default=str, sort_keys=True)
        return hashlib.sha256(raw.encode()).hexdigest()[:24]

    async def key_for(self, group: CacheGroup, *params: Any, scope: Any = None) -> str:
        parts = [self.namespace, group.value, f"v{await self._epoch(group)}"]
        if scope is not None:
            parts.append(f"{scope}.v{await self._epoch(group, scope)}")
        parts.append(self._fingerprint(params))
        return ":".join(parts)

    async def get(self, key: str) -> tuple[Any, bool]:
        raw = await self.backend.get(key)
        if raw is None:
            return None, False
        try:
            return json.loads(raw), True
        except json.JSONDecodeError:
            logger.error("Invalid JSON format in key: %s", key)
            return None, False

    async def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        await self.backend.set(key, json.dumps(value), ttl or self.ttl)

    async def invalidate_group(self, group: CacheGroup) -> None:
        if await self.backend.incr(self._epoch_key(group)) is None:
            logger.error("Could not invalidate cache group %s", group.value)

    async def invalidate_scope(self, group: CacheGroup, scope: Any) -> None:
        if await self.backend.incr(self._epoch_key(group, scope)) is None:
            logger.error("Could not invalidate cache entry %s:%s", group.value, scope)

    async def invalidate_property(self, property_id: int, cities: bool = False) -> None:
        await self.invalidate_group(CacheGroup.LISTING_PAGE)
        await self.invalidate_group(CacheGroup.SEARCH_RESULTS)
        await self.invalidate_scope(CacheGroup.PROPERTY_DETAIL, property_id)
        if cities:
            await self.invalidate_group(CacheGroup.CITY_LIST)

    async def get_or_load(
        self,
        group: CacheGroup,
        params: Iterable[Any],
        loader: Callable[[], Awaitable[Any]],
        scope: Any = None,
    ) -> Any:
        key = await self.key_for(group, *params, scope=scope)
        value, found = await self.get(key)
        if found:
            logger.debug("Read-model cache hit: %s", key)
            return value

        value = await loader()
        await self.put(key, value)
        return value
