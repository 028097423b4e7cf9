"""
Rent requests raised by prospective tenants and decided by owners.
"""
from decimal import Decimal

import pytest

from core.errors import MarketplaceError, NotFound
from models.enums import PropertyPurpose, RentRequestStatus
from schemas.schema import RentRequestCreate
from services.rent_request_service import RentRequestService


@pytest.fixture
def rent_requests(db) -> RentRequestService:
    return RentRequestService(db)


@pytest.fixture
async def flat(make_user, make_property):
    owner = await make_user()
    return await make_property(
        owner,
        title="Garden Flat",
        purpose=PropertyPurpose.RENT,
        price=None,
        rent_amount=Decimal("18000"),
        deposit_amount=Decimal("36000"),
    )


def _request(property_id: int, **overrides) -> RentRequestCreate:
    fields = {
        "property_id": property_id,
        "applicant_name": "Kiran Shah",
        "email": "Kiran@Example.com ",
    }
    fields.update(overrides)
    return RentRequestCreate(**fields)


class TestCreateRequest:
    async def test_terms_default_from_the_listing(self, rent_requests, flat) -> None:
        created = await rent_requests.create_request(_request(flat.id))

        assert created.status == RentRequestStatus.PENDING
        assert created.email == "kiran@example.com"
        assert created.monthly_rent == Decimal("18000")
        assert created.deposit == Decimal("36000")
        assert created.property.title == "Garden Flat"

    async def test_explicit_terms_are_kept(self, rent_requests, flat) -> None:
        created = await rent_requests.create_request(
            _request(flat.id, monthly_rent=Decimal("17000"), deposit=Decimal("20000"))
        )

        assert created.monthly_rent == Decimal("17000")
        assert created.deposit == Decimal("20000")

    async def test_second_pending_request_is_rejected(self, rent_requests, flat) -> None:
        flat_id = flat.id
        await rent_requests.create_request(_request(flat_id))

        with pytest.raises(MarketplaceError, match="pending request"):
            await rent_requests.create_request(_request(flat_id, email="kiran@example.com"))

    async def test_sale_listing_cannot_be_rented(
        self, rent_requests, make_user, make_property
    ) -> None:
        owner = await make_user()
        plot = await make_property(owner)

        with pytest.raises(MarketplaceError, match="not listed for rent"):
            await rent_requests.create_request(_request(plot.id))

    async def test_unknown_property(self, rent_requests) -> None:
        with pytest.raises(NotFound, match="Property not found"):
            await rent_requests.create_request(_request(555))


class TestDecideRequest:
    async def test_owner_and_applicant_views(self, rent_requests, flat) -> None:
        owner_id = flat.owner_id
        first = await rent_requests.create_request(_request(flat.id))
        second = await rent_requests.create_request(
            _request(flat.id, applicant_name="Lata Iyer", email="lata@example.com")
        )

        for_owner = await rent_requests.list_for_owner(owner_id)
        for_applicant = await rent_requests.list_for_email("KIRAN@example.com")

        assert {item.id for item in for_owner} == {first.id, second.id}
        assert [item.id for item in for_applicant] == [first.id]
        assert await rent_requests.list_for_owner(owner_id + 100) == []

    async def test_pending_request_can_be_decided_once(self, rent_requests, flat) -> None:
        created = await rent_requests.create_request(_request(flat.id))

        rejected = await rent_requests.update_status(
            created.id, RentRequestStatus.REJECTED
        )
        assert rejected.status == RentRequestStatus.REJECTED

        with pytest.raises(MarketplaceError, match="already rejected"):
            await rent_requests.update_status(created.id, RentRequestStatus.APPROVED)

    async def test_rejected_applicant_may_ask_again(self, rent_requests, flat) -> None:
        flat_id = flat.id
        created = await rent_requests.create_request(_request(flat_id))
        await rent_requests.update_status(created.id, RentRequestStatus.REJECTED)

        again = await rent_requests.create_request(_request(flat_id))

        assert again.id != created.id
        assert again.status == RentRequestStatus.PENDING

    async def test_missing_request(self, rent_requests) -> None:
        with pytest.raises(NotFound, match="Rent request not found"):
            await rent_requests.update_status(77, RentRequestStatus.APPROVED)
