# acaishop/data/models/additional.py
from sqlalchemy import Column, Integer, String, Boolean, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from acaishop.data.database import Base


class AdditionalModel(Base):
    __tablename__ = "additionals"

    id = Column(Integer, primary_key=True)
    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("additional_categories.id"), nullable=False)

    name = Column(String(120), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    image = Column(String(512), nullable=False, default="")

    category = relationship("AdditionalCategoryModel")
