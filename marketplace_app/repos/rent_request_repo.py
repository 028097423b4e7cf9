from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from models.enums import RentRequestStatus
from models.models import Property, RentRequest


class RentRequestRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, request_id: int) -> Optional[RentRequest]:
        result = await self.db.execute(
            select(RentRequest)
            .options(selectinload(RentRequest.property))
            .where(RentRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_pending(self, property_id: int, email: str) -> Optional[RentRequest]:
        result = await self.db.execute(
            select(RentRequest)
            .where(
                RentRequest.property_id == property_id,
                func.lower(RentRequest.email) == email.strip().lower(),
                RentRequest.status == RentRequestStatus.PENDING,
            )
            .order_by(RentRequest.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def create(self, **fields) -> RentRequest:
        request = RentRequest(**fields)
        self.db.add(request)
        await self.db.flush()
        return request

    async def list_for_owner(self, owner_id: int) -> List[RentRequest]:
        result = await self.db.execute(
            select(RentRequest)
            .join(Property, RentRequest.property_id == Property.id)
            .options(selectinload(RentRequest.property))
            .where(Property.owner_id == owner_id)
            .order_by(RentRequest.created_at.desc(), RentRequest.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_email(self, email: str) -> List[RentRequest]:
        result = await self.db.execute(
            select(RentRequest)
            .options(selectinload(RentRequest.property))
            .where(func.lower(RentRequest.email) == email.strip().lower())
            .order_by(RentRequest.created_at.desc(), RentRequest.id.desc())
        )
        return list(result.scalars().all())

    async def delete_by_property(self, property_id: int) -> int:
        result = await self.db.execute(
            delete(RentRequest).where(RentRequest.property_id == property_id)
        )
        return result.rowcount
