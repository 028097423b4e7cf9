"""Booking engine: order creation, payment verification and post-payment state.

A payment moves PENDING -> SUCCESS or PENDING -> FAILED exactly once. Both
moves are conditional UPDATEs on the current status, so only one caller can
win a given transition; everyone else observes the settled record. Property,
subscription and rent-request changes are applied by the winner inside the
same transaction. Cache eviction and receipt delivery happen only after the
commit and never affect the outcome.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from fastapi import BackgroundTasks
from sqlalchemy.exc import IntegrityError

from core.errors import AlreadyBooked, InvalidSignature, InvalidTransition, NotFound
from core.mapper import ORMMapper
from core.read_model_cache import ReadModelCache
from core.settings import Settings
from fintech_verify_signature.verify_signature import FintechsVerifySignature
from fintechs.razorpay import RazorpayClient
from fire_and_forget.payment_receipt import AsyncioPaymentReceipt
from fire_and_forget.property import AsyncioProperty, Publisher
from models.enums import (
    AvailabilityStatus,
    PaymentStatus,
    PropertyPurpose,
    RentalStatus,
    RentRequestStatus,
    TransactionKind,
)
from models.models import Payment, Property
from models.utils import billing_period_label, next_due_date, utcnow
from repos.payment_repo import PaymentRepo
from repos.property_repo import PropertyRepo
from repos.rent_request_repo import RentRequestRepo
from repos.rent_subscription_repo import RentSubscriptionRepo
from repos.user_repo import UserRepo
from schemas.schema import PaymentOut

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def transaction_kind(prop: Property) -> TransactionKind:
    if prop.purpose == PropertyPurpose.RENT:
        return TransactionKind.RENT
    if prop.purpose is None and (prop.rent_amount or ZERO) > ZERO:
        return TransactionKind.RENT
    return TransactionKind.PURCHASE


def split_amount(
    total: Decimal | None, cap: Decimal, minimum: Decimal
) -> tuple[Decimal, Decimal, Decimal]:
    """Return (payable, total, remaining) for a booking."""
    total = Decimal(total) if total is not None else ZERO
    payable = min(total, cap)
    if payable <= ZERO:
        payable = minimum
    remaining = max(total - payable, ZERO)
    return payable, total, remaining


class PaymentService:
    def __init__(
        self,
        db,
        config: Settings,
        gateway: RazorpayClient,
        read_cache: ReadModelCache,
        receipts: AsyncioPaymentReceipt,
        publisher: Optional[Publisher] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.config = config
        self.repo = PaymentRepo(db)
        self.user_repo = UserRepo(db)
        self.property_repo = PropertyRepo(db)
        self.subscription_repo = RentSubscriptionRepo(db)
        self.rent_request_repo = RentRequestRepo(db)
        self.gateway = gateway
        self.receipts = receipts
        self.property_events = AsyncioProperty(read_cache, publisher)
        self.mapper = ORMMapper()
        self.clock = clock

    @asynccontextmanager
    async def _atomic(self):
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def _load(self, payment_id: int) -> PaymentOut:
        payment = await self.repo.get_by_id(payment_id)
        if payment is None:
            raise NotFound("Payment not found")
        return self.mapper.one(payment, PaymentOut)

    async def create_order(self, payer_id: int, property_id: int) -> PaymentOut:
        async with self._atomic():
            payer = await self.user_repo.get_by_id(payer_id)
            if payer is None:
                raise NotFound("User not found")

            prop = await self.property_repo.get_for_update(property_id)
            if prop is None:
                raise NotFound("Property not found")

            kind = transaction_kind(prop)
            if kind == TransactionKind.PURCHASE and await self.repo.purchase_completed(
                prop.id
            ):
                raise AlreadyBooked()

            total = prop.rent_amount if kind == TransactionKind.RENT else prop.price
            payable, total, remaining = split_amount(
                total,
                self.config.BOOKING_AMOUNT_CAP,
                self.config.MINIMUM_PAYABLE_AMOUNT,
            )

            order = await self.gateway.create_order_or_fallback(
                payable, self.config.PAYMENT_CURRENCY
            )
            payment = await self.repo.create(
                gateway_order_id=order.order_id,
                payer_id=payer.id,
                property_id=prop.id,
                owner_id=prop.owner_id,
                kind=kind,
                payable_amount=payable,
                total_amount=total,
                remaining_amount=remaining,
                currency=self.config.PAYMENT_CURRENCY,
            )
            payment_id = payment.id

        logger.info(
            "Created %s order %s for property %s (payable=%s, remaining=%s)",
            kind.value,
            order.order_id,
            property_id,
            payable,
            remaining,
        )
        return await self._load(payment_id)

    def _check_signature(self, order_id: str, payment_id: str, signature: str | None):
        if not (self.config.VERIFY_GATEWAY_SIGNATURE and self.config.gateway_configured):
            return

        if not FintechsVerifySignature.verify_razorpay_signature(
            order_id, payment_id, signature, self.config.RAZORPAY_KEY_SECRET
        ):
            logger.warning("Rejected callback with bad signature for order %s", order_id)
            raise InvalidSignature()

    async def _settled(self, payment_id: int, expected: PaymentStatus) -> PaymentOut:
        current = await self._load(payment_id)
        if current.status != expected:
            raise InvalidTransition(f"Payment is already {current.status.value}")
        logger.info("Payment %s already %s, nothing to do", payment_id, expected.value)
        return current

    async def verify_payment(
        self,
        gateway_order_id: str,
        gateway_transaction_id: str,
        signature: str | None,
        background_tasks: BackgroundTasks | None = None,
    ) -> PaymentOut:
        payment = await self.repo.get_by_gateway_order_id(gateway_order_id)
        if payment is None:
            raise NotFound("Payment order not found")

        self._check_signature(gateway_order_id, gateway_transaction_id, signature)

        payment_id, property_id, kind = payment.id, payment.property_id, payment.kind
        if payment.status != PaymentStatus.PENDING:
            return await self._settled(payment_id, PaymentStatus.SUCCESS)

        paid_at = self.clock()
        won = sold_elsewhere = False

        try:
            async with self._atomic():
                prop = await self.property_repo.get_for_update(property_id)
                if kind == TransactionKind.PURCHASE:
                    sold_elsewhere = await self.repo.purchase_completed(
                        property_id, exclude_payment_id=payment_id
                    )
                if not sold_elsewhere:
                    won = await self.repo.mark_success(
                        payment_id, gateway_transaction_id, signature, paid_at
                    )
                if won:
                    if kind == TransactionKind.RENT:
                        await self._apply_rent(payment, prop, paid_at)
                    else:
                        self._apply_purchase(payment, prop, paid_at)
        except IntegrityError:
            if kind != TransactionKind.PURCHASE:
                raise
            sold_elsewhere = True

        if sold_elsewhere:
            await self._reject_duplicate_purchase(payment_id)
            raise AlreadyBooked("This property has already been purchased.")

        if not won:
            return await self._settled(payment_id, PaymentStatus.SUCCESS)

        logger.info("Payment %s verified for order %s", payment_id, gateway_order_id)
        self.receipts.schedule(payment_id, background_tasks)
        await self.property_events.booked(property_id, payment_id)
        return await self._load(payment_id)

    async def _apply_rent(self, payment: Payment, prop: Property, paid_at: datetime):
        paid_on = paid_at.date()
        due = next_due_date(paid_on)

        prop.rental_status = RentalStatus.RENTED
        prop.availability_status = AvailabilityStatus.RENTED

        await self.repo.set_rent_schedule(payment.id, billing_period_label(paid_at), due)
        await self.subscription_repo.upsert(
            renter_id=payment.payer_id,
            property_id=prop.id,
            owner_id=prop.owner_id,
            monthly_rent=prop.rent_amount or ZERO,
            paid_on=paid_on,
            next_payment_due=due,
            payment_id=payment.id,
        )

        payer = await self.user_repo.get_by_id(payment.payer_id)
        request = await self.rent_request_repo.find_pending(prop.id, payer.email)
        if request is None:
            logger.debug("No pending rent request for property %s", prop.id)
            return
        request.status = RentRequestStatus.APPROVED

    def _apply_purchase(self, payment: Payment, prop: Property, paid_at: datetime):
        prop.buyer_id = payment.payer_id
        prop.sold_date = paid_at
        prop.availability_status = AvailabilityStatus.SOLD
        prop.rental_status = RentalStatus.RENTED

    async def _reject_duplicate_purchase(self, payment_id: int):
        async with self._atomic():
            await self.repo.mark_failed(
                payment_id, "Property was purchased through another order"
            )
        logger.warning("Payment %s lost the purchase race and was marked FAILED", payment_id)

    async def mark_failed(self, gateway_order_id: str, reason: str | None) -> PaymentOut:
        payment = await self.repo.get_by_gateway_order_id(gateway_order_id)
        if payment is None:
            raise NotFound("Payment order not found")

        payment_id = payment.id
        if payment.status != PaymentStatus.PENDING:
            return await self._settled(payment_id, PaymentStatus.FAILED)

        async with self._atomic():
            won = await self.repo.mark_failed(payment_id, reason)

        if not won:
            return await self._settled(payment_id, PaymentStatus.FAILED)

        logger.info("Payment %s marked FAILED: %s", payment_id, reason)
        return await self._load(payment_id)

    async def get_payment(self, payment_id: int) -> PaymentOut:
        return await self._load(payment_id)

    async def get_user_payments(self, payer_id: int) -> List[PaymentOut]:
        return self.mapper.many(await self.repo.list_by_payer(payer_id), PaymentOut)

    async def get_owner_payments(self, owner_id: int) -> List[PaymentOut]:
        return self.mapper.many(await self.repo.list_by_owner(owner_id), PaymentOut)

    async def get_all_payments(self) -> List[PaymentOut]:
        return self.mapper.many(await self.repo.list_all(), PaymentOut)

    async def has_booked(self, payer_id: int, property_id: int) -> bool:
        return await self.repo.has_booked(payer_id, property_id)

    async def delete_payment(self, payment_id: int) -> None:
        async with self._atomic():
            if not await self.repo.delete(payment_id):
                raise NotFound("Payment not found")
        logger.info("Payment %s deleted", payment_id)
