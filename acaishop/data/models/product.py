# acaishop/data/models/product.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from acaishop.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)

    name = Column(String(160), nullable=False)
    description = Column(Text, nullable=False, default="")
    image = Column(String(512), nullable=False, default="")
    # [{"size": "500ml", "price": "18.90"}]
    sizes = Column(JSON, nullable=False, default=list)
    # dine-in prices, same shape; sizes missing here fall back to `sizes`
    table_sizes = Column(JSON, nullable=True, default=None)
    # None: every active additional; []: none at all
    allowed_additionals = Column(JSON, nullable=True, default=None)

    active = Column(Boolean, nullable=False, default=True)
    hidden = Column(Boolean, nullable=False, default=False)
    needs_spoon = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    category = relationship("CategoryModel")
