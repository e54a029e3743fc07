# acaishop/services/order_service.py
import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from acaishop.data.models.order import OrderModel
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import ORDER_STATUSES
from acaishop.repos.order_repo import OrderRepo
from acaishop.repos.store_repo import StoreRepo
from acaishop.services.cart_service import CartService
from acaishop.services.catalog_service import table_size_price
from acaishop.services.push_service import PushService
from acaishop.services.store_service import StoreService
from acaishop.services.table_service import TableService
from acaishop.utils.formatting import to_money, format_currency
from acaishop.utils.pix import generate_pix_code, qr_code_url
from acaishop.utils.whatsapp import format_phone_number, order_confirmation_message, whatsapp_url
from acaishop.utils.settings import STORE_CITY
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)


def ensure_items_list(raw) -> List[Dict[str, Any]]:
    """Order items may arrive as a JSON string (older rows) or a list."""
    if raw is None:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Order items are not valid JSON, treating as empty")
            return []
    if not isinstance(raw, list):
        return []
    return raw


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "customer_name": order.customer_name,
        "customer_phone": order.customer_phone,
        "address": order.address or {},
        "items": ensure_items_list(order.items),
        "subtotal": to_money(order.subtotal),
        "delivery_fee": to_money(order.delivery_fee),
        "total": to_money(order.total),
        "order_type": order.order_type or "delivery",
        "table_number": order.table_number,
        "payment_method": order.payment_method,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_id": order.payment_id,
        "payment_approved_at": order.payment_approved_at,
        "printed": order.printed,
        "notified": order.notified,
        "date": order.date,
    }


class OrderService:
    """
    Orders of one store.
    Checkout turns the session cart into an order; everything else is admin side.
    """

    def __init__(self, db: Session, store: StoreModel):
        self.db = db
        self.store = store
        self.repo = OrderRepo(db, store.id)
        self.store_repo = StoreRepo(db)
        self.stores = StoreService(db)
        self.carts = CartService(db, store.id)
        self.tables = TableService(db, store)

    def _line_price(self, item, at_table: bool) -> Decimal:
        if not at_table:
            return to_money(item.price)
        product = self.carts.catalog.repo.get_product(item.product_id)
        if product is None:
            return to_money(item.price)
        return table_size_price(product, item.size)

    def checkout(
        self,
        session_id: str,
        customer_name: str,
        customer_phone: str,
        address: Dict[str, Any] | None,
        payment_method: str,
        table_number: int | None = None,
        now: datetime | None = None,
    ) -> Dict[str, Any]:
        """
        Use case: place an order.

        1. Refuses an empty cart or a closed store
        2. Copies the cart lines and computes totals
        3. Takes the next per-store order number
        4. Clears the cart in the same transaction
        5. Queues an admin push (async)

        Table orders skip the delivery fee and use the products' table prices.
        """
        items = self.carts.get_items(session_id)
        if not items:
            raise ValueError("Carrinho vazio")

        if not self.stores.is_open(self.store, now):
            raise ValueError("Loja fechada no momento")

        table = None
        if table_number is not None:
            try:
                table = self.tables.open_table(table_number)
            except LookupError as e:
                raise ValueError(str(e))
        elif not address:
            raise ValueError("Endereço de entrega obrigatório")

        config = self.stores.get_config(self.store)
        delivery_fee = to_money(config.delivery_fee) if table is None else Decimal("0.00")

        order_items = [
            {
                "product_id": i.product_id,
                "name": i.name,
                "price": str(self._line_price(i, table is not None)),
                "quantity": i.quantity,
                "size": i.size,
                "additionals": i.additionals or [],
            }
            for i in items
        ]
        subtotal = to_money(sum((item_total(i) for i in order_items), Decimal("0.00")))

        try:
            number = self.store_repo.take_order_number(self.store.id)
            self.carts.clear(session_id, commit=False)
            order = self.repo.create_order(
                OrderModel(
                    store_id=self.store.id,
                    order_number=number,
                    customer_name=customer_name,
                    customer_phone=customer_phone,
                    address=address or {},
                    items=order_items,
                    subtotal=subtotal,
                    delivery_fee=delivery_fee,
                    total=subtotal + delivery_fee,
                    order_type="table" if table is not None else "delivery",
                    table_id=table.id if table is not None else None,
                    table_number=table.number if table is not None else None,
                    payment_method=payment_method,
                    status="new",
                    date=datetime.now(timezone.utc),
                )
            )
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order.id} (#{order.order_number}) created for store {self.store.slug}")

        PushService.notify_new_order(self.store.id, order.id, order.order_number, format_currency(order.total))
        return order_to_dict(order)

    def order(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise LookupError("Pedido não encontrado")
        return order

    def get_order(self, order_id: int) -> Dict[str, Any]:
        return order_to_dict(self.order(order_id))

    def list_orders(
        self, status: str | None = None, limit: int | None = None, order_type: str | None = None
    ) -> List[Dict[str, Any]]:
        statuses = [status] if status else None
        orders = self.repo.list_orders(statuses=statuses, limit=limit, order_type=order_type)
        return [order_to_dict(o) for o in orders]

    def update_status(self, order_id: int, status: str) -> Dict[str, Any]:
        if status not in ORDER_STATUSES:
            raise ValueError(f"Status inválido: {status}")
        order = self.order(order_id)
        old = order.status
        order = self.repo.update_order(order, status=status)
        logger.info(f"Order {order_id} status {old} -> {status}")
        return order_to_dict(order)

    def mark_printed(self, order_id: int) -> Dict[str, Any]:
        return order_to_dict(self.repo.update_order(self.order(order_id), printed=True))

    def mark_notified(self, order_id: int) -> Dict[str, Any]:
        return order_to_dict(self.repo.update_order(self.order(order_id), notified=True))

    def static_pix(self, order_id: int) -> Dict[str, Any]:
        """PIX copy-and-paste code for the store's own key, used when no gateway is set up."""
        order = self.order(order_id)
        config = self.stores.get_config(self.store)
        code = generate_pix_code(
            config.pix_key or "",
            config.name,
            STORE_CITY,
            amount=order.total,
            txid=f"PEDIDO{order.order_number}",
        )
        return {
            "order_id": order.id,
            "amount": to_money(order.total),
            "pix_key": config.pix_key,
            "qr_code": code,
            "qr_code_url": qr_code_url(code),
        }

    def whatsapp_confirmation(self, order_id: int) -> Dict[str, Any]:
        """Click-to-chat link with a ready confirmation message for the customer."""
        order = self.order(order_id)
        if not order.customer_phone:
            raise ValueError("Telefone do cliente não disponível para envio de confirmação")
        message = order_confirmation_message(order.customer_name, order.date)
        return {
            "phone": format_phone_number(order.customer_phone),
            "message": message,
            "url": whatsapp_url(order.customer_phone, message),
        }


def item_total(item: Dict[str, Any]) -> Decimal:
    """(price + additionals) x quantity of one stored order line."""
    extras = sum(
        (to_money(a.get("price")) * int(a.get("quantity", 1)) for a in item.get("additionals") or []),
        Decimal("0.00"),
    )
    return to_money((to_money(item.get("price")) + extras) * int(item.get("quantity", 1)))
