# acaishop/data/models/table.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint

from acaishop.data.database import Base


class TableModel(Base):
    """Dine-in table ("mesa"); customers reach it through its QR code."""

    __tablename__ = "tables"
    __table_args__ = (UniqueConstraint("store_id", "number", name="uq_tables_store_number"),)

    id = Column(Integer, primary_key=True)
    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)

    number = Column(Integer, nullable=False)
    name = Column(String(80), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    qr_code = Column(String(80), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
