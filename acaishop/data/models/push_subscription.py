# acaishop/data/models/push_subscription.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON

from acaishop.data.database import Base


class PushSubscriptionModel(Base):
    __tablename__ = "push_subscriptions"

    id = Column(Integer, primary_key=True)
    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)

    endpoint = Column(String(1024), nullable=False, unique=True)
    keys = Column(JSON, nullable=False)  # {"p256dh": ..., "auth": ...}
    role = Column(String(16), nullable=False, default="customer")  # admin | customer

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
