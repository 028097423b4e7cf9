from typing import List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import selectinload

import models.event_listener  # noqa: F401  registers slug/city normalisation hooks
from models.enums import AvailabilityStatus, PropertyPurpose, PropertyTypes
from models.models import Property, User


class PropertyRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, property_id: int) -> Optional[Property]:
        result = await self.db.execute(
            select(Property).where(Property.id == property_id)
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, property_id: int) -> Optional[Property]:
        result = await self.db.execute(
            select(Property)
            .where(Property.id == property_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_property_with_relations(self, property_id: int) -> Optional[Property]:
        result = await self.db.execute(
            select(Property)
            .options(selectinload(Property.owner), selectinload(Property.buyer))
            .where(Property.id == property_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def create(self, owner_id: int, **fields) -> Property:
        prop = Property(owner_id=owner_id, **fields)
        self.db.add(prop)
        await self.db.flush()
        return prop

    async def apply_changes(self, prop: Property, **fields) -> Property:
        for key, value in fields.items():
            setattr(prop, key, value)
        await self.db.flush()
        return prop

    async def _paginate(self, query, page: int, per_page: int) -> Tuple[List[Property], int]:
        total = await self.db.scalar(
            select(func.count()).select_from(query.order_by(None).subquery())
        )
        result = await self.db.execute(
            query.options(selectinload(Property.owner))
            .order_by(Property.created_at.desc(), Property.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        return list(result.scalars().all()), int(total or 0)

    async def list_verified(self, page: int, per_page: int) -> Tuple[List[Property], int]:
        query = select(Property).where(Property.is_verified.is_(True))
        return await self._paginate(query, page, per_page)

    async def search(
        self,
        page: int,
        per_page: int,
        purpose: PropertyPurpose | None = None,
        property_type: PropertyTypes | None = None,
        city: str | None = None,
        area: str | None = None,
        availability_status: AvailabilityStatus | None = None,
        search: str | None = None,
    ) -> Tuple[List[Property], int]:
        query = (
            select(Property)
            .join(User, Property.owner_id == User.id)
            .where(Property.is_verified.is_(True))
        )

        if purpose is not None:
            query = query.where(Property.purpose == purpose)
        if property_type is not None:
            query = query.where(Property.property_type == property_type)
        if city:
            query = query.where(Property.city.ilike(f"%{city.strip()}%"))
        if area:
            query = query.where(Property.area.ilike(f"%{area.strip()}%"))
        if availability_status is not None:
            query = query.where(Property.availability_status == availability_status)
        if search:
            term = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Property.title.ilike(term),
                    Property.description.ilike(term),
                    User.company_name.ilike(term),
                    User.full_name.ilike(term),
                    Property.city.ilike(term),
                    Property.area.ilike(term),
                )
            )

        return await self._paginate(query, page, per_page)

    async def distinct_cities(self) -> List[str]:
        result = await self.db.execute(
            select(Property.city)
            .where(Property.is_verified.is_(True), Property.city.is_not(None))
            .distinct()
            .order_by(Property.city)
        )
        return list(result.scalars().all())

    async def list_by_owner(self, owner_id: int) -> List[Property]:
        result = await self.db.execute(
            select(Property)
            .options(selectinload(Property.owner))
            .where(Property.owner_id == owner_id)
            .order_by(Property.created_at.desc(), Property.id.desc())
        )
        return list(result.scalars().all())

    async def delete(self, property_id: int) -> bool:
        result = await self.db.execute(
            delete(Property).where(Property.id == property_id)
        )
        return result.rowcount > 0
