import logging
import time
import uuid
from dataclasses import dataclass
from decimal import Decimal

import httpx

from core.breaker import CircuitBreaker, CircuitOpenError
from core.errors import GatewayUnavailable
from core.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class GatewayOrder:
    order_id: str
    amount_minor: int
    currency: str
    receipt: str
    synthetic: bool = False


def synthetic_order_id() -> str:
    return f"order_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class RazorpayClient:
    def __init__(
        self,
        config: Settings,
        breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.base_url = config.RAZORPAY_BASE_URL.rstrip("/")
        self.breaker = breaker or CircuitBreaker(name="razorpay", failure_threshold=3)
        self.transport = transport

    @property
    def configured(self) -> bool:
        return self.config.gateway_configured

    async def create_order(self, amount: Decimal, currency: str) -> GatewayOrder:
        """Create a gateway order, raising GatewayUnavailable on any failure."""
        receipt = f"txn_{int(time.time() * 1000)}"
        amount_minor = int((amount * 100).to_integral_value())

        if not self.configured:
            raise GatewayUnavailable("Razorpay credentials are not configured")

        payload = {
            "amount": amount_minor,
            "currency": currency,
            "receipt": receipt,
        }

        async def handler():
            async with httpx.AsyncClient(
                transport=self.transport,
                timeout=self.config.RAZORPAY_TIMEOUT_SECONDS,
                auth=(self.config.RAZORPAY_KEY_ID, self.config.RAZORPAY_KEY_SECRET),
            ) as client:
                res = await client.post(f"{self.base_url}/orders", json=payload)

            res.raise_for_status()
            return res.json()

        try:
            data = await self.breaker.call(handler)
        except (httpx.HTTPError, CircuitOpenError, ValueError) as e:
            # ValueError covers a 200 reply that is not JSON, e.g. a maintenance page
            raise GatewayUnavailable(f"Razorpay order creation failed: {e}") from e

        order_id = data.get("id") if isinstance(data, dict) else None
        if not order_id:
            raise GatewayUnavailable("Razorpay response did not include an order id")

        return GatewayOrder(
            order_id=order_id,
            amount_minor=amount_minor,
            currency=currency,
            receipt=receipt,
        )

    async def create_order_or_fallback(
        self, amount: Decimal, currency: str
    ) -> GatewayOrder:
        try:
            return await self.create_order(amount, currency)
        except GatewayUnavailable as e:
            order_id = synthetic_order_id()
            logger.warning("Gateway unavailable, using synthetic order %s: %s", order_id, e)
            return GatewayOrder(
                order_id=order_id,
                amount_minor=int((amount * 100).to_integral_value()),
                currency=currency,
                receipt=order_id,
                synthetic=True,
            )
