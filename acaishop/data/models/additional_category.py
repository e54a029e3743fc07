# acaishop/data/models/additional_category.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey

from acaishop.data.database import Base


class AdditionalCategoryModel(Base):
    __tablename__ = "additional_categories"

    id = Column(Integer, primary_key=True)
    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(120), nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    selection_limit = Column(Integer, nullable=True)  # None = only the per-size cap applies
