# acaishop/data/seed.py
from decimal import Decimal

from sqlalchemy.orm import Session

from acaishop.data.database import Base, SessionLocal, engine
from acaishop.data.models import (
    StoreModel,
    CategoryModel,
    ProductModel,
    AdditionalCategoryModel,
    AdditionalModel,
)
from acaishop.services.store_service import StoreService
from acaishop.utils.settings import DEFAULT_STORE_SLUG, DEFAULT_STORE_NAME, DEFAULT_DELIVERY_FEE
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORIES = [("Açaí Tradicional", 1), ("Açaí Especial", 2), ("Sorvetes", 3)]

DEFAULT_ADDITIONAL_CATEGORIES = [("Frutas", 1), ("Coberturas", 2), ("Complementos", 3)]

DEFAULT_ADDITIONALS = [
    ("Banana", "2.00", "Frutas"),
    ("Morango", "3.00", "Frutas"),
    ("Kiwi", "3.50", "Frutas"),
    ("Leite Condensado", "2.50", "Coberturas"),
    ("Nutella", "5.00", "Coberturas"),
    ("Granola", "2.00", "Complementos"),
    ("Leite Ninho", "3.00", "Complementos"),
    ("Paçoca", "2.00", "Complementos"),
]

DEFAULT_PRODUCTS = [
    (
        "Açaí Tradicional",
        "Açaí puro, batido na hora com xarope de guaraná.",
        [("300ml", "12.90"), ("500ml", "16.90"), ("700ml", "22.90"), ("1 Litro", "32.90")],
        "Açaí Tradicional",
    ),
    (
        "Açaí com Frutas",
        "Açaí com banana, morango e granola.",
        [("300ml", "15.90"), ("500ml", "19.90"), ("700ml", "25.90")],
        "Açaí Tradicional",
    ),
    (
        "Açaí Especial",
        "Açaí com leite condensado, banana, morango, kiwi e granola.",
        [("300ml", "17.90"), ("500ml", "22.90"), ("700ml", "28.90")],
        "Açaí Especial",
    ),
    (
        "Açaí Proteico",
        "Açaí com whey protein, banana, amendoim e granola.",
        [("300ml", "18.90"), ("500ml", "23.90"), ("700ml", "29.90")],
        "Açaí Especial",
    ),
]


def _seed_catalog(db: Session, store: StoreModel):
    # not forcing: each table only when the store has none
    if not db.query(AdditionalCategoryModel).filter_by(store_id=store.id).first():
        groups = {
            name: AdditionalCategoryModel(store_id=store.id, name=name, display_order=order)
            for name, order in DEFAULT_ADDITIONAL_CATEGORIES
        }
        db.add_all(groups.values())
        db.flush()
        for name, price, group in DEFAULT_ADDITIONALS:
            db.add(
                AdditionalModel(
                    store_id=store.id,
                    category_id=groups[group].id,
                    name=name,
                    price=Decimal(price),
                )
            )
        db.flush()
        logger.info(f"Seeded additionals for {store.slug}")

    if not db.query(CategoryModel).filter_by(store_id=store.id).first():
        categories = {
            name: CategoryModel(store_id=store.id, name=name, order=order)
            for name, order in DEFAULT_CATEGORIES
        }
        db.add_all(categories.values())
        db.flush()
        additional_ids = [a.id for a in db.query(AdditionalModel).filter_by(store_id=store.id)]
        for name, description, sizes, category in DEFAULT_PRODUCTS:
            db.add(
                ProductModel(
                    store_id=store.id,
                    category_id=categories[category].id,
                    name=name,
                    description=description,
                    sizes=[{"size": size, "price": price} for size, price in sizes],
                    needs_spoon=True,
                    allowed_additionals=list(additional_ids),
                )
            )
        logger.info(f"Seeded categories and products for {store.slug}")

    db.commit()


def seed_defaults(db: Session) -> StoreModel:
    """Idempotent: default store, its config and a starter catalog."""
    stores = StoreService(db)
    store = stores.repo.get_by_slug(DEFAULT_STORE_SLUG)
    if store is None:
        store = stores.create_store(DEFAULT_STORE_SLUG, DEFAULT_STORE_NAME, Decimal(DEFAULT_DELIVERY_FEE))
    else:
        stores.get_config(store)

    _seed_catalog(db, store)
    return store


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        store = seed_defaults(db)
        logger.info(f"Default store ready: {store.slug}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
