from typing import List

from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_db import get_db_async
from core.safe_handler import safe_handler
from schemas.schema import RentSubscriptionOut
from services.rent_subscription_service import RentSubscriptionService

router = APIRouter(tags=["Rent Subscriptions"])


@cbv(router)
class RentSubscriptionRoutes:
    @router.get("/user/{user_id}", response_model=List[RentSubscriptionOut])
    @safe_handler
    async def user_subscriptions(
        self,
        user_id: int,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentSubscriptionService(db).get_user_subscriptions(user_id)
