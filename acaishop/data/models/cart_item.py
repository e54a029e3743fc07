# acaishop/data/models/cart_item.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, JSON

from acaishop.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    session_id = Column(String(64), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(160), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)  # size price, without additionals
    quantity = Column(Integer, nullable=False)
    image = Column(String(512), nullable=False, default="")
    size = Column(String(60), nullable=False)
    # [{"id": 1, "name": "Granola", "price": "2.00", "quantity": 1}]
    additionals = Column(JSON, nullable=False, default=list)
    category_name = Column(String(120), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
