from celery import Celery
from celery.schedules import crontab

from core.settings import settings
from tasks.receipt_tasks import create_receipt_retry_task, create_receipt_task


class CeleryManager:
    def __init__(self):
        self.REDIS_URL = settings.CELERY_REDIS_URL

        self.app = Celery(
            "marketplace_tasks",
            broker=self.REDIS_URL,
            backend=self.REDIS_URL,
            include=["tasks.receipt_tasks"],
        )

        self.app.conf.update(
            task_serializer="json",
            task_track_started=True,
            accept_content=["json"],
            result_serializer="json",
            timezone="UTC",
            enable_utc=True,
            broker_connection_retry=True,
            broker_connection_retry_on_startup=True,
            broker_connection_max_retries=None,
            task_acks_late=False,
            redis_socket_keepalive=True,
            redis_socket_timeout=30,
            broker_transport_options={"visibility_timeout": 3600},
            worker_hijack_root_logger=False,
        )
        if self.REDIS_URL.startswith("rediss://"):
            self.app.conf.update(
                broker_use_ssl={"ssl_cert_reqs": "required"},
                redis_backend_use_ssl={"ssl_cert_reqs": "required"},
            )

        ReceiptTask = create_receipt_task(self.app)
        self.app.register_task(ReceiptTask())

        ReceiptRetryTask = create_receipt_retry_task(self.app)
        self.app.register_task(ReceiptRetryTask())

        self.app.conf.beat_schedule = {
            "retry-missing-payment-receipts": {
                "task": "retry_missing_payment_receipts",
                "schedule": crontab(minute="*/15"),
            },
        }


celery_app = CeleryManager()
app = celery_app.app
