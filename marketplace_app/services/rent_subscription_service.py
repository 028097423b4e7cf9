from typing import List

from core.mapper import ORMMapper
from repos.rent_subscription_repo import RentSubscriptionRepo
from schemas.schema import RentSubscriptionOut


class RentSubscriptionService:
    def __init__(self, db):
        self.repo = RentSubscriptionRepo(db)
        self.mapper = ORMMapper()

    async def get_user_subscriptions(self, renter_id: int) -> List[RentSubscriptionOut]:
        subscriptions = await self.repo.list_for_renter(renter_id)
        return self.mapper.many(subscriptions, RentSubscriptionOut)
