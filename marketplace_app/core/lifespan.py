import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.rabbitmq import rabbitmq
from core.settings import settings

from .cache import cache
from .cloudinary_setup import cloudinary_client

logger = logging.getLogger("startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Waiting for application startup...")

    try:
        logger.info("Connecting to Cloudinary")
        await cloudinary_client.connect()
    except Exception:
        logger.exception("Cannot connect to Cloudinary")

    if settings.RABBITMQ_URL:
        try:
            await rabbitmq.connect()
            await rabbitmq.declare_queue_with_dlq(settings.RABBITMQ_MAIN_EXCHANGE)
            logger.info("RabbitMQ connected.")
        except Exception:
            logger.exception("RabbitMQ connection failed")
    else:
        logger.warning("RABBITMQ_URL is not set; domain events will not be published.")

    try:
        await cache.connect()
        logger.info("Upstash Redis connected.")
    except Exception:
        logger.exception("Upstash Redis connection failed")

    logger.info("Application startup complete.")

    yield

    try:
        await rabbitmq.close()
    except Exception:
        logger.exception("Failed to close RabbitMQ connection")
