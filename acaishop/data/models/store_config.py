# acaishop/data/models/store_config.py
from datetime import datetime, timezone

from sqlalchemy import Column, String, Boolean, DateTime, Numeric, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship

from acaishop.data.database import Base


class StoreConfigModel(Base):
    __tablename__ = "store_config"

    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), primary_key=True)

    name = Column(String(120), nullable=False)
    logo_url = Column(String(512), nullable=False, default="")
    theme_color = Column(String(16), nullable=False, default="#8B5CF6")
    whatsapp_number = Column(String(32), nullable=True)
    pix_key = Column(String(120), nullable=True)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    is_open = Column(Boolean, nullable=False, default=True)

    # {"monday": {"open": true, "hours": "14:00 - 22:00"}, ...}
    operating_hours = Column(JSON, nullable=False, default=dict)
    # [{"date": "2025-12-25", "open": false, "hours": null, "description": "Natal"}]
    special_dates = Column(JSON, nullable=False, default=list)

    next_order_number = Column(Integer, nullable=False, default=1)
    last_updated = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    store = relationship("StoreModel", back_populates="config")
