# acaishop/data/models/order.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey, JSON

from acaishop.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    order_number = Column(Integer, nullable=False)

    customer_name = Column(String(160), nullable=False)
    customer_phone = Column(String(32), nullable=False)
    address = Column(JSON, nullable=False, default=dict)
    items = Column(JSON, nullable=False, default=list)

    subtotal = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    # delivery | table
    order_type = Column(String(16), nullable=False, default="delivery")
    table_id = Column(Integer, ForeignKey("tables.id", ondelete="SET NULL"), nullable=True, index=True)
    table_number = Column(Integer, nullable=True)

    payment_method = Column(String(40), nullable=False)
    status = Column(String(32), nullable=False, default="new")

    # filled in by the payment integration
    payment_id = Column(String(64), nullable=True, index=True)
    payment_status = Column(String(32), nullable=True)
    payment_type = Column(String(40), nullable=True)
    payment_method_id = Column(String(40), nullable=True)
    payment_external_reference = Column(String(64), nullable=True)
    payment_amount = Column(Numeric(10, 2), nullable=True)
    payment_approved_at = Column(DateTime(timezone=True), nullable=True)
    payment_webhook_data = Column(JSON, nullable=True)

    printed = Column(Boolean, nullable=False, default=False)
    notified = Column(Boolean, nullable=False, default=False)

    date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
