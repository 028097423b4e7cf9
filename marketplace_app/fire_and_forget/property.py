import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from core.errors import SideEffectFailure
from core.event_publish import publish_event
from core.read_model_cache import ReadModelCache

logger = logging.getLogger(__name__)

Publisher = Callable[[str, dict], Awaitable[bool]]


class AsyncioProperty:
    """Runs after a property write commits: evict read models, then announce it."""

    def __init__(self, read_cache: ReadModelCache, publisher: Optional[Publisher] = None):
        self.read_cache = read_cache
        self.publisher = publisher or publish_event

    def _failed(self, step: str, property_id: int, error: Exception):
        failure = SideEffectFailure(step, property_id, error, target="property")
        logger.exception("%s", failure)

    async def _announce(self, event_name: str, property_id: int, **extra):
        cities = extra.pop("cities", False)
        try:
            await self.read_cache.invalidate_property(property_id, cities=cities)
        except Exception as e:
            self._failed("cache invalidation", property_id, e)

        try:
            await self.publisher(
                event_name,
                {
                    "property_id": property_id,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    **extra,
                },
            )
        except Exception as e:
            self._failed(event_name, property_id, e)

    async def create(self, prop):
        await self._announce(
            "property.created", prop.id, owner_id=prop.owner_id, cities=True
        )

    async def update(self, prop):
        await self._announce(
            "property.updated", prop.id, owner_id=prop.owner_id, cities=True
        )

    async def status_changed(self, prop):
        await self._announce(
            "property.status_changed",
            prop.id,
            availability_status=prop.availability_status.value,
            is_verified=prop.is_verified,
            cities=True,
        )

    async def delete(self, property_id: int):
        await self._announce("property.deleted", property_id, cities=True)

    async def booked(self, property_id: int, payment_id: int):
        await self._announce("property.booked", property_id, payment_id=payment_id)
