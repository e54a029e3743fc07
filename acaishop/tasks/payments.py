# acaishop/tasks/payments.py
from acaishop.celery_worker import celery_app
from acaishop.data.database import SessionLocal
from acaishop.services.lock_service import LockService
from acaishop.services.mercado_pago_client import MercadoPagoClient
from acaishop.services.payment_service import PaymentReconciler
from acaishop.utils.settings import PAYMENT_CHECK_INTERVAL_SECONDS
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)

JOB_NAME = "check-pending-payments"


def run_payment_check(lock_service: LockService, gateway: MercadoPagoClient, session_factory=SessionLocal):
    """One polling run, guarded by a redis lock so only one worker polls at a time."""
    # TTL outlives a normal run but frees the lock if a worker dies
    token = lock_service.acquire(JOB_NAME, ttl=PAYMENT_CHECK_INTERVAL_SECONDS * 4)
    if token is None:
        return {"skipped": True}

    db = session_factory()
    try:
        return PaymentReconciler(db, gateway).run()
    finally:
        db.close()
        try:
            lock_service.release(JOB_NAME, token)
        except Exception as e:
            logger.warning(f"Failed to release {JOB_NAME} lock: {e}")


@celery_app.task(name="acaishop.tasks.payments.check_pending_payments_task")
def check_pending_payments_task():
    logger.info("Pending payments check started")
    result = run_payment_check(LockService(), MercadoPagoClient())
    logger.info(f"Pending payments check result: {result}")
    return result
