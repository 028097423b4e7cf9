import asyncio
import logging

from core.get_db import AsyncSessionLocal, async_engine
from core.settings import settings
from fire_and_forget.payment_receipt import AsyncioPaymentReceipt
from repos.payment_repo import PaymentRepo

logger = logging.getLogger("receipts.pdf")


async def retry_missing_receipts(session_factory, dispatcher, limit: int) -> list[int]:
    """Re-dispatch receipts for SUCCESS payments that still have no receipt_url."""
    async with session_factory() as session:
        payment_ids = await PaymentRepo(session).list_missing_receipts(limit)

    for payment_id in payment_ids:
        await dispatcher.dispatch(payment_id)

    if payment_ids:
        logger.info("Re-dispatched receipts for payments %s", payment_ids)
    return payment_ids


class _AsyncTaskMixin:
    def _run_async(self, coro):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.run_until_complete(async_engine.dispose())
            loop.close()


def create_receipt_task(app):
    class ReceiptTasks(_AsyncTaskMixin, app.Task):
        name = "regenerate_payment_receipt"

        autoretry_for = (RuntimeError, ConnectionError)
        retry_backoff = True
        retry_jitter = True
        max_retries = 3
        default_retry_delay = 10

        def run(self, payment_id: int):
            dispatcher = AsyncioPaymentReceipt(AsyncSessionLocal)
            return self._run_async(dispatcher.dispatch(int(payment_id)))

    return ReceiptTasks


def create_receipt_retry_task(app):
    class ReceiptRetryTasks(_AsyncTaskMixin, app.Task):
        name = "retry_missing_payment_receipts"

        def run(self, limit: int | None = None):
            dispatcher = AsyncioPaymentReceipt(AsyncSessionLocal)
            return self._run_async(
                retry_missing_receipts(
                    AsyncSessionLocal,
                    dispatcher,
                    limit or settings.RECEIPT_RETRY_BATCH_SIZE,
                )
            )

    return ReceiptRetryTasks
