# acaishop/services/push_service.py
import json
from typing import Any, Dict

from pywebpush import webpush, WebPushException
from sqlalchemy.orm import Session

from acaishop.celery_worker import celery_app
from acaishop.data.database import SessionLocal
from acaishop.data.models.push_subscription import PushSubscriptionModel
from acaishop.repos.notification_repo import PushSubscriptionRepo
from acaishop.utils.settings import VAPID_PUBLIC_KEY, VAPID_PRIVATE_KEY, VAPID_CLAIMS_EMAIL
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ICON = "/icons/icon-192x192.png"
# push service answers for subscriptions that no longer exist
GONE_STATUSES = (404, 410)


def build_payload(title: str, body: str, icon: str | None = None, data: Dict[str, Any] | None = None) -> Dict[str, Any]:
    return {
        "title": title,
        "body": body,
        "icon": icon or DEFAULT_ICON,
        "badge": DEFAULT_ICON,
        "data": data or {},
    }


class PushService:
    """
    Web push subscriptions of one store.
    Delivery goes through Celery so request handlers never wait on push services.
    """

    def __init__(self, db: Session, store_id: str):
        self.store_id = store_id
        self.repo = PushSubscriptionRepo(db, store_id)

    @staticmethod
    def vapid_public_key() -> str:
        if not VAPID_PUBLIC_KEY:
            raise LookupError("Chave VAPID não configurada")
        return VAPID_PUBLIC_KEY

    def subscribe(self, endpoint: str, keys: Dict[str, str], role: str = "customer") -> Dict[str, Any]:
        subscription = self.repo.get_by_endpoint(endpoint)
        if subscription is None:
            subscription = PushSubscriptionModel(endpoint=endpoint)
        # a browser endpoint moving between stores follows the latest subscribe
        subscription.store_id = self.store_id
        subscription.keys = dict(keys)
        subscription.role = role
        saved = self.repo.save(subscription)
        logger.info(f"Push subscription {saved.id} ({role}) saved for store {self.store_id}")
        return {"id": saved.id, "endpoint": saved.endpoint, "role": saved.role}

    def unsubscribe(self, endpoint: str) -> bool:
        subscription = self.repo.get_by_endpoint(endpoint)
        if subscription is None or subscription.store_id != self.store_id:
            return False
        self.repo.delete(subscription)
        logger.info(f"Push subscription removed for store {self.store_id}")
        return True

    def send(
        self,
        title: str,
        body: str,
        icon: str | None = None,
        data: Dict[str, Any] | None = None,
        role: str = "admin",
    ) -> Dict[str, Any]:
        if not title or not body:
            raise ValueError("Título e mensagem são obrigatórios")

        payload = build_payload(title, body, icon, data)
        send_push_task.delay(self.store_id, payload, role)
        return {"queued": True, "role": role}

    @staticmethod
    def notify_new_order(store_id: str, order_id: int, order_number: int, total: str):
        """Admin alert for a freshly placed order; never blocks checkout."""
        payload = build_payload(
            "Novo pedido!",
            f"Pedido #{order_number} recebido - {total}",
            data={"order_id": order_id, "url": "/admin/pedidos"},
        )
        try:
            send_push_task.delay(store_id, payload, "admin")
        except Exception as e:
            logger.warning(f"Could not queue push for order {order_id}: {e}")


def deliver(subscription: PushSubscriptionModel, payload: Dict[str, Any]):
    webpush(
        subscription_info={"endpoint": subscription.endpoint, "keys": subscription.keys},
        data=json.dumps(payload),
        vapid_private_key=VAPID_PRIVATE_KEY,
        vapid_claims={"sub": VAPID_CLAIMS_EMAIL},
    )


@celery_app.task(name="acaishop.services.push_service.send_push_task")
def send_push_task(store_id: str, payload: Dict[str, Any], role: str = "admin"):
    """Fan a payload out to every subscription of a role; expired ones are deleted."""
    if not VAPID_PRIVATE_KEY:
        logger.warning("VAPID keys not configured, push skipped")
        return {"sent": 0, "failed": 0, "removed": 0, "skipped": True}

    db = SessionLocal()
    sent = failed = removed = 0
    try:
        repo = PushSubscriptionRepo(db, store_id)
        for subscription in repo.list_subscriptions(role):
            try:
                deliver(subscription, payload)
                sent += 1
            except WebPushException as e:
                status = e.response.status_code if e.response is not None else None
                if status in GONE_STATUSES:
                    repo.delete(subscription)
                    removed += 1
                    logger.info(f"Push subscription {subscription.id} expired ({status}), removed")
                else:
                    failed += 1
                    logger.warning(f"Push to subscription {subscription.id} failed: {e}")
            except Exception as e:
                # bad keys or transport errors: skip this one, keep the fan-out going
                failed += 1
                logger.warning(f"Push to subscription {subscription.id} failed: {e}")
    finally:
        db.close()

    logger.info(f"[PUSH] store {store_id} role {role}: sent={sent} failed={failed} removed={removed}")
    return {"sent": sent, "failed": failed, "removed": removed}
