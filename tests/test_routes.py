"""
HTTP surface: status codes, response bodies and error envelopes.
"""
from decimal import Decimal

from models.enums import PropertyPurpose


class TestPaymentRoutes:
    async def test_purchase_flow_over_http(
        self, client, make_user, make_property, receipts
    ) -> None:
        owner = await make_user()
        buyer = await make_user()
        prop = await make_property(owner)
        buyer_id, prop_id = buyer.id, prop.id

        created = await client.post(
            "/v2/payments/create-order",
            json={"userId": buyer_id, "propertyId": prop_id},
        )
        assert created.status_code == 200
        order = created.json()
        assert order["status"] == "PENDING"
        assert order["kind"] == "PURCHASE"
        assert Decimal(order["payable_amount"]) == Decimal("25000")

        verified = await client.post(
            "/v2/payments/verify-payment",
            json={
                "razorpay_order_id": order["gateway_order_id"],
                "razorpay_payment_id": "pay_HTTP1",
                "razorpay_signature": "unused",
            },
        )
        assert verified.status_code == 200
        body = verified.json()
        assert body["status"] == "SUCCESS"
        assert body["property"]["availability_status"] == "SOLD"
        receipts.schedule.assert_called_once()

        booked = await client.get(
            "/v2/payments/check-booking",
            params={"payer_id": buyer_id, "property_id": prop_id},
        )
        assert booked.json() == {"isBooked": True}

        fetched = await client.get(f"/v2/payments/{order['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["gateway_payment_id"] == "pay_HTTP1"

        mine = await client.get(f"/v2/payments/user/{buyer_id}")
        assert [item["id"] for item in mine.json()] == [order["id"]]

    async def test_second_purchase_is_a_conflict(
        self, client, make_user, make_property
    ) -> None:
        owner = await make_user()
        first = await make_user()
        second = await make_user()
        prop = await make_property(owner)
        prop_id, first_id, second_id = prop.id, first.id, second.id

        order = (
            await client.post(
                "/v2/payments/create-order",
                json={"payer_id": first_id, "property_id": prop_id},
            )
        ).json()
        await client.post(
            "/v2/payments/verify-payment",
            json={
                "gateway_order_id": order["gateway_order_id"],
                "gateway_transaction_id": "pay_1",
            },
        )

        response = await client.post(
            "/v2/payments/create-order",
            json={"payer_id": second_id, "property_id": prop_id},
        )

        assert response.status_code == 409
        assert response.json() == {
            "message": "You have already booked/purchased this property."
        }

    async def test_failed_payment_and_delete(
        self, client, make_user, make_property
    ) -> None:
        owner = await make_user()
        buyer = await make_user()
        prop = await make_property(owner)

        order = (
            await client.post(
                "/v2/payments/create-order",
                json={"payer_id": buyer.id, "property_id": prop.id},
            )
        ).json()

        failed = await client.post(
            "/v2/payments/payment-failed",
            json={"razorpay_order_id": order["gateway_order_id"], "reason": "card declined"},
        )
        assert failed.status_code == 200
        assert failed.json()["status"] == "FAILED"
        assert failed.json()["failure_reason"] == "card declined"

        deleted = await client.delete(f"/v2/payments/{order['id']}")
        assert deleted.json() == {"message": "Payment deleted successfully"}

        missing = await client.get(f"/v2/payments/{order['id']}")
        assert missing.status_code == 404
        assert missing.json() == {"message": "Payment not found"}

    async def test_unknown_order_on_verify(self, client) -> None:
        response = await client.post(
            "/v2/payments/verify-payment",
            json={"gateway_order_id": "order_nope", "gateway_transaction_id": "pay_1"},
        )

        assert response.status_code == 404
        assert response.json() == {"message": "Payment order not found"}

    async def test_validation_errors_use_the_envelope(self, client) -> None:
        response = await client.post(
            "/v2/payments/create-order", json={"payer_id": 0}
        )

        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "Validation failed"
        fields = {tuple(detail["loc"])[-1] for detail in body["details"]}
        assert {"payer_id", "property_id"} <= fields

    async def test_check_booking_requires_positive_ids(self, client) -> None:
        response = await client.get(
            "/v2/payments/check-booking", params={"payer_id": 1, "property_id": -3}
        )

        assert response.status_code == 422


class TestPropertyRoutes:
    async def test_create_list_and_fetch(self, client, make_user) -> None:
        owner = await make_user()

        created = await client.post(
            "/v2/properties/create",
            json={
                "owner_id": owner.id,
                "title": "Harbour Loft",
                "purpose": "RENT",
                "rent_amount": "22000",
                "city": "kochi",
                "area": "Fort Kochi",
            },
        )
        assert created.status_code == 201
        prop = created.json()
        assert prop["is_verified"] is False

        listed = await client.get("/v2/properties/list")
        assert listed.json()["total"] == 0

        verified = await client.patch(
            f"/v2/properties/{prop['id']}/verify", json={"is_verified": True}
        )
        assert verified.status_code == 200

        listed = await client.get("/v2/properties/list", params={"per_page": 5})
        assert [item["id"] for item in listed.json()["items"]] == [prop["id"]]
        assert (await client.get("/v2/properties/cities")).json() == ["Kochi"]

        fetched = await client.get(f"/v2/properties/{prop['id']}")
        assert fetched.json()["title"] == "Harbour Loft"

    async def test_rent_listing_without_rent_is_rejected(self, client, make_user) -> None:
        owner = await make_user()

        response = await client.post(
            "/v2/properties/create",
            json={
                "owner_id": owner.id,
                "title": "Harbour Loft",
                "purpose": "RENT",
                "city": "kochi",
                "area": "Fort Kochi",
            },
        )

        assert response.status_code == 422
        assert response.json()["message"] == "Validation failed"

    async def test_search_and_delete(self, client, make_user, make_property) -> None:
        owner = await make_user()
        prop = await make_property(owner, title="Cliff House", city="varkala", area="North Cliff")
        prop_id = prop.id

        found = await client.get("/v2/properties/search", params={"search": "cliff"})
        assert [item["id"] for item in found.json()["items"]] == [prop_id]

        deleted = await client.delete(f"/v2/properties/{prop_id}/delete")
        assert deleted.json() == {"message": "Property deleted successfully"}

        missing = await client.get(f"/v2/properties/{prop_id}")
        assert missing.status_code == 404
        assert missing.json() == {"message": "Property not found"}

    async def test_per_page_is_capped(self, client) -> None:
        response = await client.get("/v2/properties/list", params={"per_page": 500})

        assert response.status_code == 422


class TestRentRoutes:
    async def test_rent_payment_creates_a_subscription(
        self, client, make_user, make_property
    ) -> None:
        owner = await make_user()
        renter = await make_user()
        prop = await make_property(
            owner, purpose=PropertyPurpose.RENT, price=None, rent_amount=Decimal("12000")
        )
        renter_id, prop_id = renter.id, prop.id

        order = (
            await client.post(
                "/v2/payments/create-order",
                json={"payer_id": renter_id, "property_id": prop_id},
            )
        ).json()
        assert order["kind"] == "RENT"
        await client.post(
            "/v2/payments/verify-payment",
            json={
                "gateway_order_id": order["gateway_order_id"],
                "gateway_transaction_id": "pay_rent",
            },
        )

        response = await client.get(f"/v2/rent-subscriptions/user/{renter_id}")

        assert response.status_code == 200
        subscriptions = response.json()
        assert len(subscriptions) == 1
        assert subscriptions[0]["property"]["id"] == prop_id
        assert subscriptions[0]["last_payment_id"] == order["id"]
        assert subscriptions[0]["is_active"] is True

        booked = await client.get(
            "/v2/payments/check-booking",
            params={"payer_id": renter_id, "property_id": prop_id},
        )
        assert booked.json() == {"isBooked": False}

    async def test_rent_request_lifecycle(self, client, make_user, make_property) -> None:
        owner = await make_user()
        prop = await make_property(
            owner, purpose=PropertyPurpose.RENT, price=None, rent_amount=Decimal("9000")
        )
        owner_id, prop_id = owner.id, prop.id

        created = await client.post(
            "/v2/rent-requests/create",
            json={
                "property_id": prop_id,
                "applicant_name": "Nisha Pillai",
                "email": "nisha@example.com",
            },
        )
        assert created.status_code == 201
        request_id = created.json()["id"]

        duplicate = await client.post(
            "/v2/rent-requests/create",
            json={
                "property_id": prop_id,
                "applicant_name": "Nisha Pillai",
                "email": "nisha@example.com",
            },
        )
        assert duplicate.status_code == 400

        for_owner = await client.get(f"/v2/rent-requests/owner/{owner_id}")
        assert [item["id"] for item in for_owner.json()] == [request_id]

        mine = await client.get(
            "/v2/rent-requests/mine", params={"email": "nisha@example.com"}
        )
        assert [item["id"] for item in mine.json()] == [request_id]

        approved = await client.patch(
            f"/v2/rent-requests/{request_id}/status", json={"status": "APPROVED"}
        )
        assert approved.json()["status"] == "APPROVED"


class TestHealth:
    async def test_health(self, client) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
