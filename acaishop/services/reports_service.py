# acaishop/services/reports_service.py
from collections import defaultdict
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Dict, List
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from acaishop.repos.order_repo import OrderRepo
from acaishop.services.order_service import ensure_items_list, item_total, order_to_dict
from acaishop.utils.formatting import to_money
from acaishop.utils.settings import STORE_TIMEZONE
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_METHOD_LABELS = {
    "pix": "PIX",
    "money": "Dinheiro",
    "card": "Cartão",
}
TOP_PRODUCTS = 10
RECENT_ORDERS = 10


def payment_method_label(method: str | None) -> str:
    return PAYMENT_METHOD_LABELS.get(method or "", "Outros")


def calculate_metrics(orders) -> Dict[str, Any]:
    total_sales = to_money(sum((to_money(o.total) for o in orders), Decimal("0.00")))
    count = len(orders)
    return {
        "total_sales": total_sales,
        "total_orders": count,
        "average_order_value": to_money(total_sales / count) if count else Decimal("0.00"),
        "total_delivery_fees": to_money(sum((to_money(o.delivery_fee) for o in orders), Decimal("0.00"))),
    }


def local_day(value: datetime, tz: ZoneInfo | None = None) -> date:
    """Calendar day of a stored timestamp in the store's zone (naive means UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz or ZoneInfo(STORE_TIMEZONE)).date()


def day_bounds(start: date | None, end: date | None, tz: ZoneInfo | None = None):
    """Store-local [start 00:00, end 23:59:59.999999] as UTC instants."""
    tz = tz or ZoneInfo(STORE_TIMEZONE)
    lower = datetime.combine(start, time.min, tzinfo=tz).astimezone(timezone.utc) if start else None
    upper = datetime.combine(end, time.max, tzinfo=tz).astimezone(timezone.utc) if end else None
    return lower, upper


def calculate_daily_sales(orders) -> List[Dict[str, Any]]:
    tz = ZoneInfo(STORE_TIMEZONE)
    by_day: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"sales": Decimal("0.00"), "orders": 0})
    for order in orders:
        day = local_day(order.date, tz).isoformat()
        by_day[day]["sales"] += to_money(order.total)
        by_day[day]["orders"] += 1
    return [{"date": day, **stats} for day, stats in sorted(by_day.items())]


def calculate_top_products(orders, limit: int = TOP_PRODUCTS) -> List[Dict[str, Any]]:
    stats: Dict[str, Dict[str, Any]] = {}
    for order in orders:
        for item in ensure_items_list(order.items):
            name = item.get("name") or "Produto sem nome"
            entry = stats.setdefault(
                name, {"total_quantity": 0, "total_revenue": Decimal("0.00"), "orders": set()}
            )
            entry["total_quantity"] += int(item.get("quantity") or 0)
            entry["total_revenue"] += item_total(item)
            entry["orders"].add(order.id)

    ranked = sorted(stats.items(), key=lambda kv: kv[1]["total_revenue"], reverse=True)[:limit]
    return [
        {
            "product_name": name,
            "total_quantity": entry["total_quantity"],
            "total_revenue": to_money(entry["total_revenue"]),
            "order_count": len(entry["orders"]),
        }
        for name, entry in ranked
    ]


def calculate_payment_methods(orders) -> List[Dict[str, Any]]:
    grouped: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"count": 0, "total_amount": Decimal("0.00")})
    for order in orders:
        entry = grouped[payment_method_label(order.payment_method)]
        entry["count"] += 1
        entry["total_amount"] += to_money(order.total)

    total = len(orders)
    rows = [
        {
            "method": method,
            "count": entry["count"],
            "percentage": round(entry["count"] / total * 100, 2) if total else 0.0,
            "total_amount": to_money(entry["total_amount"]),
        }
        for method, entry in grouped.items()
    ]
    return sorted(rows, key=lambda r: r["count"], reverse=True)


class ReportsService:
    def __init__(self, db: Session, store_id: str):
        self.repo = OrderRepo(db, store_id)

    def sales_report(
        self,
        start: date | None = None,
        end: date | None = None,
        statuses: List[str] | None = None,
        payment_methods: List[str] | None = None,
    ) -> Dict[str, Any]:
        """Dashboard numbers; cancelled orders are left out unless asked for."""
        exclude = None if statuses and "cancelled" in statuses else ["cancelled"]
        lower, upper = day_bounds(start, end)
        orders = self.repo.list_orders(
            statuses=statuses,
            exclude_statuses=exclude,
            payment_methods=payment_methods,
            start=lower,
            end=upper,
        )
        logger.info(f"Sales report over {len(orders)} orders")

        return {
            "metrics": calculate_metrics(orders),
            "daily_sales": calculate_daily_sales(orders),
            "top_products": calculate_top_products(orders),
            "payment_methods": calculate_payment_methods(orders),
            "recent_orders": [order_to_dict(o) for o in orders[:RECENT_ORDERS]],
        }
