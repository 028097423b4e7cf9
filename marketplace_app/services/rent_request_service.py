import logging
from typing import List

from core.errors import MarketplaceError, NotFound
from core.mapper import ORMMapper
from models.enums import PropertyPurpose, RentRequestStatus
from repos.property_repo import PropertyRepo
from repos.rent_request_repo import RentRequestRepo
from schemas.schema import RentRequestCreate, RentRequestOut

logger = logging.getLogger(__name__)


class RentRequestService:
    def __init__(self, db):
        self.db = db
        self.repo = RentRequestRepo(db)
        self.property_repo = PropertyRepo(db)
        self.mapper = ORMMapper()

    async def create_request(self, data: RentRequestCreate) -> RentRequestOut:
        prop = await self.property_repo.get_by_id(data.property_id)
        if prop is None:
            raise NotFound("Property not found")
        if prop.purpose == PropertyPurpose.BUY:
            raise MarketplaceError("This property is not listed for rent")

        if await self.repo.find_pending(prop.id, data.email):
            raise MarketplaceError("You already have a pending request for this property")

        request = await self.repo.create(
            monthly_rent=data.monthly_rent or prop.rent_amount,
            deposit=data.deposit or prop.deposit_amount,
            **data.model_dump(exclude={"monthly_rent", "deposit"}),
        )
        request_id = request.id
        await self.db.commit()

        logger.info("Rent request %s created for property %s", request_id, prop.id)
        return self.mapper.one(await self.repo.get_by_id(request_id), RentRequestOut)

    async def list_for_owner(self, owner_id: int) -> List[RentRequestOut]:
        return self.mapper.many(await self.repo.list_for_owner(owner_id), RentRequestOut)

    async def list_for_email(self, email: str) -> List[RentRequestOut]:
        return self.mapper.many(await self.repo.list_for_email(email), RentRequestOut)

    async def update_status(
        self, request_id: int, status: RentRequestStatus
    ) -> RentRequestOut:
        request = await self.repo.get_by_id(request_id)
        if request is None:
            raise NotFound("Rent request not found")
        if request.status != RentRequestStatus.PENDING:
            raise MarketplaceError(
                f"Rent request is already {request.status.value.lower()}"
            )

        request.status = status
        await self.db.commit()
        logger.info("Rent request %s set to %s", request_id, status.value)
        return self.mapper.one(await self.repo.get_by_id(request_id), RentRequestOut)
