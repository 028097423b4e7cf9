from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from models.enums import PaymentStatus, TransactionKind
from models.models import Payment
from models.utils import utcnow


class PaymentRepo:
    def __init__(self, db):
        self.db = db

    def _with_relations(self):
        return select(Payment).options(
            selectinload(Payment.payer),
            selectinload(Payment.owner),
            selectinload(Payment.property),
        )

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        result = await self.db.execute(
            self._with_relations()
            .where(Payment.id == payment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_gateway_order_id(self, order_id: str) -> Optional[Payment]:
        result = await self.db.execute(
            select(Payment)
            .where(Payment.gateway_order_id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_payer(self, payer_id: int) -> List[Payment]:
        result = await self.db.execute(
            self._with_relations()
            .where(Payment.payer_id == payer_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
        )
        return list(result.scalars().all())

    async def list_by_owner(self, owner_id: int) -> List[Payment]:
        result = await self.db.execute(
            self._with_relations()
            .where(Payment.owner_id == owner_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[Payment]:
        result = await self.db.execute(
            self._with_relations().order_by(
                Payment.created_at.desc(), Payment.id.desc()
            )
        )
        return list(result.scalars().all())

    async def list_missing_receipts(self, limit: int) -> List[int]:
        result = await self.db.execute(
            select(Payment.id)
            .where(
                Payment.status == PaymentStatus.SUCCESS,
                Payment.receipt_url.is_(None),
            )
            .order_by(Payment.payment_date.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def purchase_completed(
        self, property_id: int, exclude_payment_id: int | None = None
    ) -> bool:
        conditions = [
            Payment.property_id == property_id,
            Payment.kind == TransactionKind.PURCHASE,
            Payment.status == PaymentStatus.SUCCESS,
        ]
        if exclude_payment_id is not None:
            conditions.append(Payment.id != exclude_payment_id)
        result = await self.db.execute(select(exists().where(*conditions)))
        return bool(result.scalar())

    async def has_booked(self, payer_id: int, property_id: int) -> bool:
        result = await self.db.execute(
            select(
                exists().where(
                    Payment.payer_id == payer_id,
                    Payment.property_id == property_id,
                    Payment.kind == TransactionKind.PURCHASE,
                    Payment.status == PaymentStatus.SUCCESS,
                )
            )
        )
        return bool(result.scalar())

    async def create(
        self,
        gateway_order_id: str,
        payer_id: int,
        property_id: int,
        owner_id: int | None,
        kind: TransactionKind,
        payable_amount: Decimal,
        total_amount: Decimal,
        remaining_amount: Decimal,
        currency: str,
    ) -> Payment:
        payment = Payment(
            gateway_order_id=gateway_order_id,
            payer_id=payer_id,
            property_id=property_id,
            owner_id=owner_id,
            kind=kind,
            status=PaymentStatus.PENDING,
            payable_amount=payable_amount,
            total_amount=total_amount,
            remaining_amount=remaining_amount,
            currency=currency,
        )
        self.db.add(payment)
        await self.db.flush()
        return payment

    async def mark_success(
        self,
        payment_id: int,
        gateway_payment_id: str,
        signature: str | None,
        paid_at: datetime,
    ) -> bool:
        """PENDING -> SUCCESS. Returns False when another caller already moved it."""
        result = await self.db.execute(
            update(Payment)
            .where(Payment.id == payment_id, Payment.status == PaymentStatus.PENDING)
            .values(
                status=PaymentStatus.SUCCESS,
                gateway_payment_id=gateway_payment_id,
                gateway_signature=signature,
                payment_date=paid_at,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def mark_failed(self, payment_id: int, reason: str | None) -> bool:
        result = await self.db.execute(
            update(Payment)
            .where(Payment.id == payment_id, Payment.status == PaymentStatus.PENDING)
            .values(
                status=PaymentStatus.FAILED,
                failure_reason=reason,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_rent_schedule(
        self, payment_id: int, billing_period: str, next_due_date
    ) -> None:
        await self.db.execute(
            update(Payment)
            .where(Payment.id == payment_id)
            .values(billing_period=billing_period, next_due_date=next_due_date)
            .execution_options(synchronize_session=False)
        )

    async def set_receipt_url(self, payment_id: int, receipt_url: str) -> None:
        await self.db.execute(
            update(Payment)
            .where(Payment.id == payment_id)
            .values(receipt_url=receipt_url, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )

    async def delete(self, payment_id: int) -> bool:
        result = await self.db.execute(delete(Payment).where(Payment.id == payment_id))
        return result.rowcount > 0

    async def delete_by_property(self, property_id: int) -> int:
        result = await self.db.execute(
            delete(Payment).where(Payment.property_id == property_id)
        )
        return result.rowcount

    async def db_commit(self):
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
