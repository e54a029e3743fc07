# acaishop/services/payment_service.py
import hashlib
import hmac
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from acaishop.data.models.order import OrderModel
from acaishop.repos.order_repo import OrderRepo
from acaishop.services.mercado_pago_client import MercadoPagoClient
from acaishop.services.order_service import ensure_items_list, item_total
from acaishop.utils.formatting import to_money
from acaishop.utils.settings import (
    PUBLIC_APP_URL,
    MERCADO_PAGO_WEBHOOK_SECRET,
    PAYMENT_CHECK_WINDOW_MINUTES,
    PAYMENT_CHECK_BATCH_SIZE,
)
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)

# vendor payment status -> order status
ORDER_STATUS_FOR_PAYMENT = {
    "approved": "paid",
    "pending": "pending_payment",
    "in_process": "pending_payment",
    "rejected": "payment_failed",
    "cancelled": "payment_failed",
}

# orders the kitchen already took over; payment updates never move them back
PAST_PAYMENT_STATUSES = ("preparing", "ready", "delivering", "delivered", "completed", "cancelled")

STATEMENT_DESCRIPTOR = "ACAISHOP"
PREFERENCE_TTL = timedelta(hours=24)


def _public_url() -> str | None:
    if PUBLIC_APP_URL and "localhost" not in PUBLIC_APP_URL:
        return PUBLIC_APP_URL.rstrip("/")
    return None


def _parse_vendor_datetime(value) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable vendor date: {value}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _payer_body(payer: Dict[str, Any] | None) -> Dict[str, Any]:
    if not payer:
        return {}
    body = {"email": payer["email"]}
    for key in ("first_name", "last_name"):
        if payer.get(key):
            body[key] = payer[key]
    if payer.get("identification"):
        body["identification"] = dict(payer["identification"])
    return body


def apply_payment(order: OrderModel, payment: Dict[str, Any], webhook_data: Dict[str, Any] | None = None) -> OrderModel:
    """Copies vendor payment fields onto the order (caller commits)."""
    status = payment.get("status")
    order.payment_id = str(payment.get("id")) if payment.get("id") is not None else order.payment_id
    order.payment_status = status
    order.payment_type = payment.get("payment_type_id") or order.payment_type
    order.payment_method_id = payment.get("payment_method_id") or order.payment_method_id
    if payment.get("external_reference"):
        order.payment_external_reference = str(payment["external_reference"])
    if payment.get("transaction_amount") is not None:
        order.payment_amount = to_money(payment["transaction_amount"])
    order.payment_approved_at = _parse_vendor_datetime(payment.get("date_approved"))
    if webhook_data is not None:
        order.payment_webhook_data = webhook_data

    new_status = ORDER_STATUS_FOR_PAYMENT.get(status)
    if new_status and order.status not in PAST_PAYMENT_STATUSES:
        order.status = new_status
    return order


def verify_webhook_signature(
    secret: str,
    signature_header: str | None,
    request_id: str | None,
    data_id: str | None,
) -> bool:
    """`x-signature: ts=...,v1=...` signed over "id:<data.id>;request-id:<x-request-id>;ts:<ts>;"."""
    if not signature_header:
        return False
    parts = dict(
        chunk.strip().split("=", 1) for chunk in signature_header.split(",") if "=" in chunk
    )
    ts, received = parts.get("ts"), parts.get("v1")
    if not ts or not received:
        return False

    manifest = ""
    if data_id:
        manifest += f"id:{str(data_id).lower()};"
    if request_id:
        manifest += f"request-id:{request_id};"
    manifest += f"ts:{ts};"
    expected = hmac.new(secret.encode(), manifest.encode(), hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, received)


class PaymentService:
    """
    Mercado Pago payments for orders.
    store_id None = cross-store (webhooks).
    """

    def __init__(self, db: Session, gateway: MercadoPagoClient, store_id: str | None = None):
        self.db = db
        self.gateway = gateway
        self.repo = OrderRepo(db, store_id)

    def _order(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise LookupError("Pedido não encontrado")
        return order

    @staticmethod
    def _ensure_payable(order: OrderModel):
        if order.payment_status == "approved":
            raise ValueError("Pedido já pago")
        if order.status == "cancelled":
            raise ValueError("Pedido cancelado")

    def _base_body(self, order: OrderModel, payer: Dict[str, Any]) -> Dict[str, Any]:
        body = {
            "transaction_amount": float(to_money(order.total)),
            "payer": _payer_body(payer),
            "external_reference": str(order.id),
            "description": f"Pedido #{order.order_number}",
            "statement_descriptor": STATEMENT_DESCRIPTOR,
            "metadata": {"order_id": order.id, "store_id": order.store_id},
        }
        public = _public_url()
        if public:
            body["notification_url"] = f"{public}/webhooks/mercado-pago"
        return body

    def create_pix(self, order_id: int, payer: Dict[str, Any]) -> Dict[str, Any]:
        order = self._order(order_id)
        self._ensure_payable(order)

        body = self._base_body(order, payer)
        body.update({"payment_method_id": "pix", "capture": True, "binary_mode": False})

        result = self.gateway.create_payment(body)
        apply_payment(order, result)
        # PIX always starts waiting for the transfer
        if result.get("status") != "approved":
            order.status = "pending_payment"
        self.repo.commit()
        logger.info(f"PIX payment {result.get('id')} created for order {order.id} ({result.get('status')})")

        transaction = (result.get("point_of_interaction") or {}).get("transaction_data") or {}
        return {
            "id": str(result.get("id")),
            "status": result.get("status"),
            "status_detail": result.get("status_detail"),
            "external_reference": result.get("external_reference"),
            "transaction_amount": result.get("transaction_amount"),
            "qr_code": transaction.get("qr_code"),
            "qr_code_base64": transaction.get("qr_code_base64"),
            "ticket_url": transaction.get("ticket_url"),
        }

    def create_card_payment(
        self,
        order_id: int,
        token: str,
        payment_method_id: str,
        installments: int,
        payer: Dict[str, Any],
        issuer_id: str | None = None,
    ) -> Dict[str, Any]:
        order = self._order(order_id)
        self._ensure_payable(order)

        body = self._base_body(order, payer)
        body.update({
            "token": token,
            "payment_method_id": payment_method_id,
            "installments": installments,
        })
        if issuer_id:
            body["issuer_id"] = issuer_id

        result = self.gateway.create_payment(body)
        apply_payment(order, result)
        self.repo.commit()
        logger.info(f"Card payment {result.get('id')} for order {order.id}: {result.get('status')}")

        return {
            "id": str(result.get("id")),
            "status": result.get("status"),
            "status_detail": result.get("status_detail"),
            "order_status": order.status,
        }

    def create_preference(self, order_id: int, payer: Dict[str, Any] | None = None) -> Dict[str, Any]:
        order = self._order(order_id)
        self._ensure_payable(order)

        items = []
        for item in ensure_items_list(order.items):
            quantity = int(item.get("quantity", 1))
            items.append({
                "id": str(item.get("product_id")),
                "title": f"{item.get('name')} ({item.get('size')})",
                "quantity": quantity,
                "currency_id": "BRL",
                "unit_price": float(item_total(item) / quantity),
            })
        if to_money(order.delivery_fee) > 0:
            items.append({
                "id": "delivery",
                "title": "Taxa de entrega",
                "quantity": 1,
                "currency_id": "BRL",
                "unit_price": float(to_money(order.delivery_fee)),
            })
        if not items:
            raise ValueError("Pedido sem itens")

        base = (PUBLIC_APP_URL or "http://localhost:8000").rstrip("/")
        now = datetime.now(timezone.utc)
        body = {
            "items": items,
            "back_urls": {
                "success": f"{base}/checkout/success",
                "failure": f"{base}/checkout/failure",
                "pending": f"{base}/checkout/pending",
            },
            "auto_return": "approved",
            "external_reference": str(order.id),
            "payment_methods": {
                "excluded_payment_methods": [],
                "excluded_payment_types": [],
                "installments": 12,
            },
            "statement_descriptor": STATEMENT_DESCRIPTOR,
            "expires": True,
            "expiration_date_from": now.isoformat(),
            "expiration_date_to": (now + PREFERENCE_TTL).isoformat(),
        }
        if payer:
            body["payer"] = _payer_body(payer)
        public = _public_url()
        if public:
            body["notification_url"] = f"{public}/webhooks/mercado-pago"

        result = self.gateway.create_preference(body)
        order.payment_external_reference = str(order.id)
        self.repo.commit()
        logger.info(f"Preference {result.get('id')} created for order {order.id}")
        return {
            "id": result.get("id"),
            "init_point": result.get("init_point"),
            "sandbox_init_point": result.get("sandbox_init_point"),
            "external_reference": result.get("external_reference", str(order.id)),
        }

    def check_payment(self, payment_id: str | None = None, order_id: int | None = None) -> Dict[str, Any]:
        if payment_id:
            order = self.repo.get_by_payment_id(payment_id)
            if order is None and order_id:
                order = self._order(order_id)
        elif order_id:
            order = self._order(order_id)
            payment_id = order.payment_id
        else:
            raise ValueError("Informe payment_id ou order_id")

        if not payment_id:
            raise ValueError("Pedido sem pagamento associado")

        payment = self.gateway.get_payment(payment_id)
        new_status = payment.get("status")
        old_status = order.payment_status if order else None
        updated = False

        if order is not None and new_status != old_status:
            apply_payment(order, payment)
            self.repo.commit()
            updated = True
            logger.info(f"Order {order.id} payment {old_status} -> {new_status}")

        return {
            "order_id": order.id if order else None,
            "payment_id": str(payment_id),
            "old_status": old_status,
            "new_status": new_status,
            "order_status": order.status if order else None,
            "updated": updated,
        }

    def handle_webhook(self, body: Dict[str, Any], headers: Dict[str, str], query: Dict[str, str] | None = None) -> Dict[str, Any]:
        query = query or {}
        data_id = (body.get("data") or {}).get("id") or query.get("data.id") or query.get("id")
        kind = body.get("type") or body.get("topic") or query.get("type") or query.get("topic")

        if MERCADO_PAGO_WEBHOOK_SECRET and not verify_webhook_signature(
            MERCADO_PAGO_WEBHOOK_SECRET,
            headers.get("x-signature"),
            headers.get("x-request-id"),
            data_id,
        ):
            raise PermissionError("Assinatura do webhook inválida")

        if kind != "payment" or not data_id:
            logger.info(f"Webhook {kind} acknowledged without action")
            return {"received": True}

        payment = self.gateway.get_payment(data_id)
        order = self.repo.get_by_payment_id(str(payment.get("id", data_id)))
        if order is None and str(payment.get("external_reference") or "").isdigit():
            order = self.repo.get_order(int(payment["external_reference"]))

        if order is None:
            logger.warning(f"Webhook payment {data_id} matches no order")
            return {"received": True, "order_id": None}

        old_status = order.payment_status
        if payment.get("status") == old_status:
            # redelivered notification: keep the body, leave the order alone
            order.payment_webhook_data = body
            self.repo.commit()
            logger.info(f"Webhook payment {data_id}: order {order.id} already {old_status}")
            return {"received": True, "order_id": order.id, "status": old_status, "updated": False}

        apply_payment(order, payment, webhook_data=body)
        self.repo.commit()
        logger.info(f"Webhook payment {data_id}: order {order.id} {old_status} -> {order.payment_status}")
        return {"received": True, "order_id": order.id, "status": order.payment_status, "updated": True}


class PaymentReconciler:
    """
    Polls the vendor for orders still waiting on a payment.
    Only one run at a time per process; overlapping calls are skipped.
    """

    _running = threading.Lock()

    def __init__(
        self,
        db: Session,
        gateway: MercadoPagoClient,
        store_id: str | None = None,
        window_minutes: int = PAYMENT_CHECK_WINDOW_MINUTES,
        batch_size: int = PAYMENT_CHECK_BATCH_SIZE,
    ):
        self.db = db
        self.gateway = gateway
        self.repo = OrderRepo(db, store_id)
        self.window = timedelta(minutes=window_minutes)
        self.batch_size = batch_size

    def run(self, now: datetime | None = None) -> Dict[str, Any]:
        if not self._running.acquire(blocking=False):
            logger.info("Payment check already running, skipped")
            return {"skipped": True}
        try:
            return self._check_pending(now or datetime.now(timezone.utc))
        finally:
            self._running.release()

    def _check_pending(self, now: datetime) -> Dict[str, Any]:
        orders = self.repo.list_pending_payments(now - self.window, self.batch_size)
        logger.info(f"Checking {len(orders)} pending payments")

        updated = 0
        results: List[Dict[str, Any]] = []
        for order in orders:
            entry = {"order_id": order.id, "payment_id": order.payment_id}
            try:
                payment = self.gateway.get_payment(order.payment_id)
                new_status = payment.get("status")
                if new_status != order.payment_status:
                    entry.update(old_status=order.payment_status, new_status=new_status)
                    apply_payment(order, payment)
                    self.repo.commit()
                    updated += 1
                    entry["updated"] = True
                else:
                    entry.update(status=new_status, updated=False, reason="Status inalterado")
            except Exception as e:
                # one bad payment must not stop the batch
                self.repo.rollback()
                logger.error(f"Payment check failed for order {order.id}: {e}")
                entry.update(updated=False, error=str(e))
            results.append(entry)

        logger.info(f"Payment check finished: {updated} of {len(orders)} orders updated")
        return {"checked": len(orders), "updated": updated, "results": results}
