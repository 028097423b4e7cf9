import asyncio
import logging
from typing import Awaitable, Callable, Optional

from fastapi import BackgroundTasks

from core.cloudinary_setup import CloudinaryClient, cloudinary_client
from core.errors import SideEffectFailure
from core.event_publish import publish_event
from core.pdf_generate import ReceiptGenerator
from core.settings import settings
from email_notify.email_service import send_payment_confirmation_email
from models.enums import PaymentStatus
from repos.payment_repo import PaymentRepo

logger = logging.getLogger("receipts.pdf")

Mailer = Callable[..., Awaitable[None]]
Publisher = Callable[[str, dict], Awaitable[bool]]


class AsyncioPaymentReceipt:
    """Post-commit receipt, storage, email and event fan-out for a SUCCESS payment.

    Every step is isolated: a failure is logged and the remaining steps still
    run. Nothing here touches the payment's status.
    """

    def __init__(
        self,
        session_factory,
        storage: Optional[CloudinaryClient] = None,
        mailer: Optional[Mailer] = None,
        publisher: Optional[Publisher] = None,
        render: Callable[..., bytes] = ReceiptGenerator.generate_pdf_bytes,
    ):
        self.session_factory = session_factory
        self.storage = storage or cloudinary_client
        self.mailer = mailer or send_payment_confirmation_email
        self.publisher = publisher or publish_event
        self.render = render
        self._tasks: set[asyncio.Task] = set()

    def schedule(self, payment_id: int, background_tasks: BackgroundTasks | None = None):
        if background_tasks is not None:
            background_tasks.add_task(self.dispatch, payment_id)
            return

        task = asyncio.create_task(self.dispatch(payment_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _step(self, name: str, payment_id: int, coro):
        try:
            return await coro
        except Exception as e:
            failure = SideEffectFailure(name, payment_id, e)
            logger.exception("%s", failure)
            return None

    async def dispatch(self, payment_id: int) -> Optional[str]:
        try:
            return await self._dispatch(payment_id)
        except Exception:
            logger.exception("Receipt dispatch crashed for payment %s", payment_id)
            return None

    async def _dispatch(self, payment_id: int) -> Optional[str]:
        async with self.session_factory() as db:
            repo = PaymentRepo(db)
            payment = await repo.get_by_id(payment_id)

            if payment is None or payment.status != PaymentStatus.SUCCESS:
                logger.warning("Skipping receipt for payment %s: not successful", payment_id)
                return None

            pdf_bytes = await self._step(
                "receipt generation",
                payment_id,
                asyncio.to_thread(self.render, payment, settings.BRAND_NAME),
            )

            receipt_url = payment.receipt_url
            if pdf_bytes and not receipt_url:
                receipt_url = await self._step(
                    "receipt upload",
                    payment_id,
                    self.storage.upload_pdf_bytes(pdf_bytes, f"receipt_{payment.id}.pdf"),
                )
                if receipt_url:
                    await repo.set_receipt_url(payment.id, receipt_url)
                    await repo.db_commit()

            await self._step(
                "confirmation email",
                payment_id,
                self.mailer(payment, pdf_bytes),
            )
            await self._step(
                "event publish",
                payment_id,
                self.publisher(
                    "payment.completed",
                    {
                        "payment_id": payment.id,
                        "property_id": payment.property_id,
                        "payer_id": payment.payer_id,
                        "kind": payment.kind.value,
                        "receipt_url": receipt_url,
                    },
                ),
            )
            return receipt_url
