# acaishop/celery_worker.py
from celery import Celery

from acaishop.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    PAYMENT_CHECK_INTERVAL_SECONDS,
)

celery_app = Celery(
    "acaishop",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks must be imported explicitly to get registered
celery_app.conf.imports = (
    "acaishop.tasks.payments",
    "acaishop.services.push_service",
)

celery_app.conf.beat_schedule = {
    "check-pending-payments": {
        "task": "acaishop.tasks.payments.check_pending_payments_task",
        "schedule": float(PAYMENT_CHECK_INTERVAL_SECONDS),
    },
}

celery_app.conf.timezone = "UTC"
# inline execution for tests and single-process demos
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
celery_app.conf.task_store_eager_result = False
