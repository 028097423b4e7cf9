import logging

from core.rabbitmq import rabbitmq
from core.settings import settings

logger = logging.getLogger(__name__)


async def publish_event(event_name: str, data: dict) -> bool:
    """Best-effort publish; the caller's write has already committed."""
    try:
        await rabbitmq.publish_json(
            exchange_name=settings.RABBITMQ_MAIN_EXCHANGE,
            routing_key=event_name,
            data=data,
        )
    except Exception:
        logger.warning("Event %s was not published", event_name, exc_info=True)
        return False
    return True
