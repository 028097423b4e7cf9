import json
import logging

import aio_pika
from aio_pika import ExchangeType, Message
from tenacity import retry, stop_after_attempt, wait_exponential

from .breaker import CircuitBreaker
from .settings import settings

logger = logging.getLogger(__name__)


class RabbitMQConnection:
    def __init__(self, url: str):
        self.url = url
        self.connection = None
        self.channel = None
        self.breaker = CircuitBreaker(name="rabbitmq", failure_threshold=3)

    @retry(
        stop=stop_after_attempt(5), wait=wait_exponential(multiplier=2, min=2, max=10)
    )
    async def connect(self):
        if not self.url:
            raise ConnectionError("RABBITMQ_URL is not configured")
        if not self.connection or self.connection.is_closed:
            logger.info("Connecting to RabbitMQ...")
            self.connection = await aio_pika.connect_robust(self.url)
            self.channel = await self.connection.channel()
            logger.info("Connected to RabbitMQ.")

    async def declare_queue_with_dlq(self, queue_name: str):
        await self.connect()

        dlx = await self.channel.declare_exchange(
            settings.RABBITMQ_DLX, ExchangeType.DIRECT
        )
        dlq = await self.channel.declare_queue(
            settings.RABBITMQ_DLX_QUEUE, durable=True
        )
        await dlq.bind(dlx, routing_key=settings.RABBITMQ_DLX_QUEUE)

        main_exchange = await self.channel.declare_exchange(
            queue_name, ExchangeType.TOPIC, durable=True
        )
        queue = await self.channel.declare_queue(
            queue_name,
            durable=True,
            arguments={
                "x-dead-letter-exchange": settings.RABBITMQ_DLX,
                "x-dead-letter-routing-key": settings.RABBITMQ_DLX_QUEUE,
            },
        )
        await queue.bind(main_exchange, routing_key="#")

        logger.info(
            "Queue '%s' declared with DLQ '%s'.", queue_name, settings.RABBITMQ_DLX_QUEUE
        )
        return main_exchange, queue

    async def publish_json(self, exchange_name: str, routing_key: str, data: dict):
        async def handler():
            if not self.connection or self.connection.is_closed:
                raise ConnectionError("RabbitMQ is not connected")
            exchange = await self.channel.get_exchange(exchange_name)
            message = Message(
                body=json.dumps(data, default=str).encode(),
                content_type="application/json",
            )
            await exchange.publish(message, routing_key=routing_key)
            logger.info("Published message to %s:%s", exchange_name, routing_key)

        await self.breaker.call(handler)

    async def close(self):
        if self.connection and not self.connection.is_closed:
            await self.connection.close()
            logger.info("RabbitMQ connection closed.")


rabbitmq = RabbitMQConnection(settings.RABBITMQ_URL)
