# acaishop/repos/order_repo.py
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from acaishop.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session, store_id: str | None = None):
        # store_id None = cross-tenant access (webhooks, payment polling)
        self.db = db
        self.store_id = store_id

    def _scoped(self, stmt):
        if self.store_id is not None:
            stmt = stmt.where(OrderModel.store_id == self.store_id)
        return stmt

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        order = self.db.get(OrderModel, order_id)
        if order is None:
            return None
        if self.store_id is not None and order.store_id != self.store_id:
            return None
        return order

    def get_by_payment_id(self, payment_id: str) -> OrderModel | None:
        stmt = self._scoped(select(OrderModel).where(OrderModel.payment_id == str(payment_id)))
        return self.db.execute(stmt.limit(1)).scalar_one_or_none()

    def list_orders(
        self,
        statuses: list[str] | None = None,
        exclude_statuses: list[str] | None = None,
        payment_methods: list[str] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        order_type: str | None = None,
    ) -> list[OrderModel]:
        stmt = self._scoped(select(OrderModel))
        if statuses:
            stmt = stmt.where(OrderModel.status.in_(statuses))
        if exclude_statuses:
            stmt = stmt.where(OrderModel.status.not_in(exclude_statuses))
        if payment_methods:
            stmt = stmt.where(OrderModel.payment_method.in_(payment_methods))
        if order_type:
            stmt = stmt.where(OrderModel.order_type == order_type)
        if start is not None:
            stmt = stmt.where(OrderModel.date >= start)
        if end is not None:
            stmt = stmt.where(OrderModel.date <= end)
        stmt = stmt.order_by(OrderModel.date.desc(), OrderModel.id.desc())
        if limit:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars())

    def list_pending_payments(self, since: datetime, limit: int) -> list[OrderModel]:
        stmt = self._scoped(
            select(OrderModel).where(
                OrderModel.payment_status.in_(("pending", "pending_payment")),
                OrderModel.payment_id.is_not(None),
                OrderModel.created_at >= since,
            )
        )
        stmt = stmt.order_by(OrderModel.created_at.desc()).limit(limit)
        return list(self.db.execute(stmt).scalars())

    def update_order(self, order: OrderModel, **fields) -> OrderModel:
        for key, value in fields.items():
            setattr(order, key, value)
        self.db.commit()
        self.db.refresh(order)
        return order

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
