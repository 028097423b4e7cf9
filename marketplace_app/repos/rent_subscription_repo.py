from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from models.models import RentSubscription


class RentSubscriptionRepo:
    def __init__(self, db):
        self.db = db

    async def get_for_pair(
        self, renter_id: int, property_id: int
    ) -> Optional[RentSubscription]:
        result = await self.db.execute(
            select(RentSubscription)
            .where(
                RentSubscription.renter_id == renter_id,
                RentSubscription.property_id == property_id,
            )
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        renter_id: int,
        property_id: int,
        owner_id: int | None,
        monthly_rent: Decimal,
        paid_on: date,
        next_payment_due: date,
        payment_id: int,
    ) -> RentSubscription:
        subscription = await self.get_for_pair(renter_id, property_id)

        if subscription is None:
            subscription = RentSubscription(
                renter_id=renter_id,
                property_id=property_id,
                start_date=paid_on,
            )
            self.db.add(subscription)

        subscription.owner_id = owner_id
        subscription.monthly_rent = monthly_rent
        subscription.next_payment_due = next_payment_due
        subscription.last_payment_id = payment_id
        subscription.is_active = True
        await self.db.flush()
        return subscription

    async def list_for_renter(self, renter_id: int) -> List[RentSubscription]:
        result = await self.db.execute(
            select(RentSubscription)
            .options(
                selectinload(RentSubscription.property),
                selectinload(RentSubscription.owner),
            )
            .where(RentSubscription.renter_id == renter_id)
            .order_by(RentSubscription.created_at.desc(), RentSubscription.id.desc())
        )
        return list(result.scalars().all())

    async def delete_by_property(self, property_id: int) -> int:
        result = await self.db.execute(
            delete(RentSubscription).where(RentSubscription.property_id == property_id)
        )
        return result.rowcount
