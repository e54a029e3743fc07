# acaishop/repos/catalog_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from acaishop.data.models.category import CategoryModel
from acaishop.data.models.product import ProductModel
from acaishop.data.models.additional_category import AdditionalCategoryModel
from acaishop.data.models.additional import AdditionalModel


class CatalogRepo:
    """Categories, products and additionals of one store."""

    def __init__(self, db: Session, store_id: str):
        self.db = db
        self.store_id = store_id

    # categories
    def list_categories(self, only_active: bool = False) -> list[CategoryModel]:
        stmt = select(CategoryModel).where(CategoryModel.store_id == self.store_id)
        if only_active:
            stmt = stmt.where(CategoryModel.active.is_(True))
        stmt = stmt.order_by(CategoryModel.order, CategoryModel.name)
        return list(self.db.execute(stmt).scalars())

    def get_category(self, category_id: int) -> CategoryModel | None:
        category = self.db.get(CategoryModel, category_id)
        if category is None or category.store_id != self.store_id:
            return None
        return category

    def count_products_in_category(self, category_id: int) -> int:
        return self.db.execute(
            select(func.count(ProductModel.id)).where(ProductModel.category_id == category_id)
        ).scalar_one()

    # products
    def list_products(
        self,
        only_visible: bool = False,
        category_id: int | None = None,
    ) -> list[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.store_id == self.store_id)
        if only_visible:
            stmt = stmt.where(ProductModel.active.is_(True), ProductModel.hidden.is_(False))
        if category_id is not None:
            stmt = stmt.where(ProductModel.category_id == category_id)
        stmt = stmt.order_by(ProductModel.name)
        return list(self.db.execute(stmt).scalars())

    def get_product(self, product_id: int) -> ProductModel | None:
        product = self.db.get(ProductModel, product_id)
        if product is None or product.store_id != self.store_id:
            return None
        return product

    # additional categories
    def list_additional_categories(self, only_active: bool = False) -> list[AdditionalCategoryModel]:
        stmt = select(AdditionalCategoryModel).where(AdditionalCategoryModel.store_id == self.store_id)
        if only_active:
            stmt = stmt.where(AdditionalCategoryModel.active.is_(True))
        stmt = stmt.order_by(AdditionalCategoryModel.display_order, AdditionalCategoryModel.name)
        return list(self.db.execute(stmt).scalars())

    def get_additional_category(self, category_id: int) -> AdditionalCategoryModel | None:
        category = self.db.get(AdditionalCategoryModel, category_id)
        if category is None or category.store_id != self.store_id:
            return None
        return category

    def count_additionals_in_category(self, category_id: int) -> int:
        return self.db.execute(
            select(func.count(AdditionalModel.id)).where(AdditionalModel.category_id == category_id)
        ).scalar_one()

    # additionals
    def list_additionals(
        self,
        only_active: bool = False,
        ids: list[int] | None = None,
    ) -> list[AdditionalModel]:
        stmt = select(AdditionalModel).where(AdditionalModel.store_id == self.store_id)
        if only_active:
            stmt = stmt.where(AdditionalModel.active.is_(True))
        if ids:
            stmt = stmt.where(AdditionalModel.id.in_(ids))
        stmt = stmt.order_by(AdditionalModel.name)
        return list(self.db.execute(stmt).scalars())

    def get_additional(self, additional_id: int) -> AdditionalModel | None:
        additional = self.db.get(AdditionalModel, additional_id)
        if additional is None or additional.store_id != self.store_id:
            return None
        return additional

    # shared
    def save(self, obj):
        obj.store_id = self.store_id
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def delete(self, obj) -> None:
        self.db.delete(obj)
        self.db.commit()
