import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from fastapi_utils.cbv import cbv

from core.dependencies import get_payment_service
from core.safe_handler import safe_handler
from schemas.schema import (
    BookingCheckOut,
    CreateOrderSchema,
    MessageOut,
    PaymentFailedSchema,
    PaymentOut,
    VerifyPaymentSchema,
)
from services.payment_service import PaymentService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Property Payments and Bookings"])


@cbv(router)
class PaymentRoutes:
    service: PaymentService = Depends(get_payment_service)

    @router.post("/create-order", response_model=PaymentOut)
    @safe_handler
    async def create_order(self, data: CreateOrderSchema):
        return await self.service.create_order(
            payer_id=data.payer_id, property_id=data.property_id
        )

    @router.post("/verify-payment", response_model=PaymentOut)
    @safe_handler
    async def verify_payment(
        self, data: VerifyPaymentSchema, background_tasks: BackgroundTasks
    ):
        return await self.service.verify_payment(
            gateway_order_id=data.gateway_order_id,
            gateway_transaction_id=data.gateway_transaction_id,
            signature=data.signature,
            background_tasks=background_tasks,
        )

    @router.post("/payment-failed", response_model=PaymentOut)
    @safe_handler
    async def payment_failed(self, data: PaymentFailedSchema):
        return await self.service.mark_failed(
            gateway_order_id=data.gateway_order_id, reason=data.reason
        )

    @router.get("/user/{payer_id}", response_model=List[PaymentOut])
    @safe_handler
    async def user_payments(self, payer_id: int):
        return await self.service.get_user_payments(payer_id)

    @router.get("/owner/{owner_id}", response_model=List[PaymentOut])
    @safe_handler
    async def owner_payments(self, owner_id: int):
        return await self.service.get_owner_payments(owner_id)

    @router.get("/all", response_model=List[PaymentOut])
    @safe_handler
    async def all_payments(self):
        return await self.service.get_all_payments()

    @router.get("/check-booking", response_model=BookingCheckOut)
    @safe_handler
    async def check_booking(
        self,
        payer_id: int = Query(..., gt=0),
        property_id: int = Query(..., gt=0),
    ):
        return BookingCheckOut(
            isBooked=await self.service.has_booked(payer_id, property_id)
        )

    @router.get("/{payment_id}", response_model=PaymentOut)
    @safe_handler
    async def get_payment(self, payment_id: int):
        return await self.service.get_payment(payment_id)

    @router.delete("/{payment_id}", response_model=MessageOut)
    @safe_handler
    async def delete_payment(self, payment_id: int):
        await self.service.delete_payment(payment_id)
        return MessageOut(message="Payment deleted successfully")
