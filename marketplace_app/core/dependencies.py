from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import cache
from core.event_publish import publish_event
from core.get_db import AsyncSessionLocal, get_db_async
from core.read_model_cache import ReadModelCache
from core.settings import Settings, get_settings
from fintechs.razorpay import RazorpayClient
from fire_and_forget.payment_receipt import AsyncioPaymentReceipt
from services.payment_service import PaymentService
from services.property_service import PropertyService

_gateway: RazorpayClient | None = None
_receipts: AsyncioPaymentReceipt | None = None


def get_read_model_cache(config: Settings = Depends(get_settings)) -> ReadModelCache:
    return ReadModelCache(
        cache,
        ttl=config.READ_MODEL_CACHE_TTL,
        namespace=config.READ_MODEL_CACHE_NAMESPACE,
    )


def get_payment_gateway(config: Settings = Depends(get_settings)) -> RazorpayClient:
    global _gateway
    if _gateway is None:
        _gateway = RazorpayClient(config)
    return _gateway


def get_receipt_dispatcher() -> AsyncioPaymentReceipt:
    global _receipts
    if _receipts is None:
        _receipts = AsyncioPaymentReceipt(AsyncSessionLocal)
    return _receipts


def get_event_publisher():
    return publish_event


def get_payment_service(
    db: AsyncSession = Depends(get_db_async),
    config: Settings = Depends(get_settings),
    gateway: RazorpayClient = Depends(get_payment_gateway),
    read_cache: ReadModelCache = Depends(get_read_model_cache),
    receipts: AsyncioPaymentReceipt = Depends(get_receipt_dispatcher),
    publisher=Depends(get_event_publisher),
) -> PaymentService:
    return PaymentService(db, config, gateway, read_cache, receipts, publisher)


def get_property_service(
    db: AsyncSession = Depends(get_db_async),
    read_cache: ReadModelCache = Depends(get_read_model_cache),
    publisher=Depends(get_event_publisher),
) -> PropertyService:
    return PropertyService(db, read_cache, publisher)
