import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from core.errors import MarketplaceError, NotFound
from core.mapper import ORMMapper
from core.read_model_cache import CacheGroup, ReadModelCache
from fire_and_forget.property import AsyncioProperty, Publisher
from models.enums import AvailabilityStatus, PropertyPurpose, PropertyTypes
from repos.enquiry_repo import ComplaintRepo, EnquiryRepo
from repos.payment_repo import PaymentRepo
from repos.property_repo import PropertyRepo
from repos.rent_request_repo import RentRequestRepo
from repos.rent_subscription_repo import RentSubscriptionRepo
from repos.user_repo import UserRepo
from schemas.schema import (
    PropertyCreate,
    PropertyOut,
    PropertyPageOut,
    PropertySummaryOut,
    PropertyUpdate,
)

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 100


class PropertyService:
    def __init__(
        self, db, read_cache: ReadModelCache, publisher: Optional[Publisher] = None
    ):
        self.db = db
        self.repo = PropertyRepo(db)
        self.user_repo = UserRepo(db)
        self.read_cache = read_cache
        self.events = AsyncioProperty(read_cache, publisher)
        self.mapper = ORMMapper()

    @asynccontextmanager
    async def _atomic(self):
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    @staticmethod
    def _page_args(page: int, per_page: int) -> tuple[int, int]:
        if page < 1:
            raise MarketplaceError("Page must be 1 or greater")
        if per_page < 1 or per_page > MAX_PER_PAGE:
            raise MarketplaceError(f"per_page must be between 1 and {MAX_PER_PAGE}")
        return page, per_page

    def _page(self, items, total: int, page: int, per_page: int) -> dict:
        return self.mapper.page(
            items,
            PropertySummaryOut,
            PropertyPageOut,
            total=total,
            page=page,
            per_page=per_page,
        ).model_dump(mode="json")

    async def _detail(self, property_id: int) -> PropertyOut:
        prop = await self.repo.get_property_with_relations(property_id)
        if prop is None:
            raise NotFound("Property not found")
        return self.mapper.one(prop, PropertyOut)

    async def create_property(self, data: PropertyCreate) -> PropertyOut:
        async with self._atomic():
            if await self.user_repo.get_by_id(data.owner_id) is None:
                raise NotFound("User not found")
            prop = await self.repo.create(**data.model_dump())
            property_id = prop.id

        await self.events.create(prop)
        logger.info("Property %s created by owner %s", property_id, data.owner_id)
        return await self._detail(property_id)

    async def update_property(self, property_id: int, data: PropertyUpdate) -> PropertyOut:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise MarketplaceError("No fields provided for update.")

        async with self._atomic():
            prop = await self.repo.get_for_update(property_id)
            if prop is None:
                raise NotFound("Property not found")
            await self.repo.apply_changes(prop, **changes)

        await self.events.update(prop)
        return await self._detail(property_id)

    async def update_availability(
        self, property_id: int, status: AvailabilityStatus
    ) -> PropertyOut:
        async with self._atomic():
            prop = await self.repo.get_for_update(property_id)
            if prop is None:
                raise NotFound("Property not found")
            await self.repo.apply_changes(prop, availability_status=status)

        await self.events.status_changed(prop)
        return await self._detail(property_id)

    async def verify_property(self, property_id: int, is_verified: bool) -> PropertyOut:
        async with self._atomic():
            prop = await self.repo.get_for_update(property_id)
            if prop is None:
                raise NotFound("Property not found")
            await self.repo.apply_changes(prop, is_verified=is_verified)

        await self.events.status_changed(prop)
        return await self._detail(property_id)

    async def delete_property(self, property_id: int) -> None:
        """Remove a listing and every row that points at it, in one transaction."""
        async with self._atomic():
            if await self.repo.get_for_update(property_id) is None:
                raise NotFound("Property not found")

            removed = {
                "rent_requests": await RentRequestRepo(self.db).delete_by_property(
                    property_id
                ),
                "rent_subscriptions": await RentSubscriptionRepo(
                    self.db
                ).delete_by_property(property_id),
                "payments": await PaymentRepo(self.db).delete_by_property(property_id),
                "complaints": await ComplaintRepo(self.db).delete_by_property(
                    property_id
                ),
                "enquiries": await EnquiryRepo(self.db).delete_by_property(property_id),
            }
            await self.repo.delete(property_id)

        logger.info("Property %s deleted with dependents %s", property_id, removed)
        await self.events.delete(property_id)

    async def get_property(self, property_id: int) -> PropertyOut:
        async def loader():
            return (await self._detail(property_id)).model_dump(mode="json")

        cached = await self.read_cache.get_or_load(
            CacheGroup.PROPERTY_DETAIL, (property_id,), loader, scope=property_id
        )
        return PropertyOut.model_validate(cached)

    async def list_properties(self, page: int = 1, per_page: int = 20) -> PropertyPageOut:
        page, per_page = self._page_args(page, per_page)

        async def loader():
            items, total = await self.repo.list_verified(page, per_page)
            return self._page(items, total, page, per_page)

        cached = await self.read_cache.get_or_load(
            CacheGroup.LISTING_PAGE, (page, per_page), loader
        )
        return PropertyPageOut.model_validate(cached)

    async def search_properties(
        self,
        purpose: PropertyPurpose | None = None,
        property_type: PropertyTypes | None = None,
        city: str | None = None,
        area: str | None = None,
        availability_status: AvailabilityStatus | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PropertyPageOut:
        page, per_page = self._page_args(page, per_page)
        filters = dict(
            purpose=purpose,
            property_type=property_type,
            city=city,
            area=area,
            availability_status=availability_status,
            search=search,
        )

        async def loader():
            items, total = await self.repo.search(page, per_page, **filters)
            return self._page(items, total, page, per_page)

        key_params = (
            purpose.value if purpose else None,
            property_type.value if property_type else None,
            (city or "").strip().lower() or None,
            (area or "").strip().lower() or None,
            availability_status.value if availability_status else None,
            (search or "").strip().lower() or None,
            page,
            per_page,
        )
        cached = await self.read_cache.get_or_load(
            CacheGroup.SEARCH_RESULTS, key_params, loader
        )
        return PropertyPageOut.model_validate(cached)

    async def list_cities(self) -> List[str]:
        return await self.read_cache.get_or_load(
            CacheGroup.CITY_LIST, (), self.repo.distinct_cities
        )

    async def list_owner_properties(self, owner_id: int) -> List[PropertySummaryOut]:
        return self.mapper.many(
            await self.repo.list_by_owner(owner_id), PropertySummaryOut
        )
