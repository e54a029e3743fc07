# acaishop/services/catalog_service.py
from decimal import Decimal

from sqlalchemy.orm import Session

from acaishop.data.models.category import CategoryModel
from acaishop.data.models.product import ProductModel
from acaishop.data.models.additional_category import AdditionalCategoryModel
from acaishop.data.models.additional import AdditionalModel
from acaishop.repos.catalog_repo import CatalogRepo
from acaishop.utils.formatting import to_money, price_label
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)


def min_price(sizes: list[dict]) -> Decimal:
    """Smallest size price, shown as "A PARTIR DE" on the storefront."""
    if not sizes:
        return Decimal("0.00")
    return min(to_money(s.get("price")) for s in sizes)


def size_price(product: ProductModel, size: str) -> Decimal:
    for entry in product.sizes or []:
        if entry.get("size") == size:
            return to_money(entry.get("price"))
    raise ValueError(f"Tamanho '{size}' não disponível para {product.name}")


def table_size_price(product: ProductModel, size: str) -> Decimal:
    """Dine-in price of a size, the regular one when no table price is set."""
    for entry in product.table_sizes or []:
        if entry.get("size") == size:
            return to_money(entry.get("price"))
    return size_price(product, size)


def _stored_sizes(sizes) -> list:
    # JSON column, Decimals stored as strings
    return [{"size": s["size"], "price": str(to_money(s["price"]))} for s in sizes]


def category_to_dict(category: CategoryModel) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "order": category.order,
        "active": category.active,
    }


def product_to_dict(product: ProductModel) -> dict:
    lowest = min_price(product.sizes)
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "image": product.image,
        "sizes": [{"size": s["size"], "price": to_money(s["price"])} for s in product.sizes or []],
        "category_id": product.category_id,
        "category_name": product.category.name if product.category else "",
        "active": product.active,
        "hidden": product.hidden,
        "needs_spoon": product.needs_spoon,
        "table_sizes": (
            [{"size": s["size"], "price": to_money(s["price"])} for s in product.table_sizes]
            if product.table_sizes is not None
            else None
        ),
        "allowed_additionals": (
            list(product.allowed_additionals) if product.allowed_additionals is not None else None
        ),
        "min_price": lowest,
        "price_label": price_label(lowest),
    }


def additional_category_to_dict(category: AdditionalCategoryModel) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "order": category.display_order,
        "active": category.active,
        "selection_limit": category.selection_limit,
    }


def additional_to_dict(additional: AdditionalModel) -> dict:
    return {
        "id": additional.id,
        "name": additional.name,
        "price": to_money(additional.price),
        "category_id": additional.category_id,
        "category_name": additional.category.name if additional.category else "",
        "active": additional.active,
        "image": additional.image,
        "price_label": price_label(additional.price),
    }


class CatalogService:
    """Catalog CRUD of one store: categories, products, additionals."""

    def __init__(self, db: Session, store_id: str):
        self.db = db
        self.store_id = store_id
        self.repo = CatalogRepo(db, store_id)

    # -- categories ---------------------------------------------------------

    def list_categories(self, only_active: bool = False) -> list[dict]:
        return [category_to_dict(c) for c in self.repo.list_categories(only_active)]

    def _category(self, category_id: int) -> CategoryModel:
        category = self.repo.get_category(category_id)
        if not category:
            raise LookupError("Categoria não encontrada")
        return category

    def get_category(self, category_id: int) -> dict:
        return category_to_dict(self._category(category_id))

    def save_category(self, data: dict, category_id: int | None = None) -> dict:
        category = self._category(category_id) if category_id else CategoryModel()
        for key, value in data.items():
            setattr(category, key, value)
        saved = self.repo.save(category)
        logger.info(f"Category {saved.id} saved for store {self.store_id}")
        return category_to_dict(saved)

    def delete_category(self, category_id: int):
        category = self._category(category_id)
        if self.repo.count_products_in_category(category_id):
            raise ValueError("Categoria possui produtos vinculados")
        self.repo.delete(category)
        logger.info(f"Category {category_id} deleted for store {self.store_id}")

    # -- products -----------------------------------------------------------

    def list_products(self, only_visible: bool = False, category_id: int | None = None) -> list[dict]:
        return [product_to_dict(p) for p in self.repo.list_products(only_visible, category_id)]

    def product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise LookupError("Produto não encontrado")
        return product

    def get_product(self, product_id: int, only_visible: bool = False) -> dict:
        product = self.product(product_id)
        if only_visible and (not product.active or product.hidden):
            raise LookupError("Produto não encontrado")
        return product_to_dict(product)

    def _validate_product(self, data: dict):
        if not self.repo.get_category(data["category_id"]):
            raise ValueError("Categoria inválida")

        names = [s["size"] for s in data["sizes"]]
        if len(names) != len(set(names)):
            raise ValueError("Tamanhos duplicados")

        table_names = [s["size"] for s in data.get("table_sizes") or []]
        if len(table_names) != len(set(table_names)):
            raise ValueError("Tamanhos duplicados nos preços de mesa")
        unknown = sorted(set(table_names) - set(names))
        if unknown:
            raise ValueError(f"Preço de mesa para tamanho inexistente: {', '.join(unknown)}")

        allowed = data.get("allowed_additionals")
        if allowed:
            known = {a.id for a in self.repo.list_additionals(ids=allowed)}
            missing = sorted(set(allowed) - known)
            if missing:
                raise ValueError(f"Adicionais inexistentes: {missing}")

    def save_product(self, data: dict, product_id: int | None = None) -> dict:
        self._validate_product(data)
        product = self.product(product_id) if product_id else ProductModel()

        data = dict(data)
        data["sizes"] = _stored_sizes(data["sizes"])
        if data.get("table_sizes") is not None:
            data["table_sizes"] = _stored_sizes(data["table_sizes"])
        for key, value in data.items():
            setattr(product, key, value)

        saved = self.repo.save(product)
        logger.info(f"Product {saved.id} saved for store {self.store_id}")
        return product_to_dict(saved)

    def delete_product(self, product_id: int):
        self.repo.delete(self.product(product_id))
        logger.info(f"Product {product_id} deleted for store {self.store_id}")

    def set_visibility(self, product_id: int, hidden: bool) -> dict:
        product = self.product(product_id)
        product.hidden = hidden
        return product_to_dict(self.repo.save(product))

    # -- additional categories ---------------------------------------------

    def list_additional_categories(self, only_active: bool = False) -> list[dict]:
        return [additional_category_to_dict(c) for c in self.repo.list_additional_categories(only_active)]

    def _additional_category(self, category_id: int) -> AdditionalCategoryModel:
        category = self.repo.get_additional_category(category_id)
        if not category:
            raise LookupError("Categoria de adicionais não encontrada")
        return category

    def save_additional_category(self, data: dict, category_id: int | None = None) -> dict:
        category = self._additional_category(category_id) if category_id else AdditionalCategoryModel()
        category.name = data["name"]
        category.display_order = data.get("order", 0)
        category.active = data.get("active", True)
        category.selection_limit = data.get("selection_limit")
        return additional_category_to_dict(self.repo.save(category))

    def delete_additional_category(self, category_id: int):
        category = self._additional_category(category_id)
        if self.repo.count_additionals_in_category(category_id):
            raise ValueError("Categoria possui adicionais vinculados")
        self.repo.delete(category)

    # -- additionals --------------------------------------------------------

    def list_additionals(self, only_active: bool = False) -> list[dict]:
        return [additional_to_dict(a) for a in self.repo.list_additionals(only_active)]

    def _additional(self, additional_id: int) -> AdditionalModel:
        additional = self.repo.get_additional(additional_id)
        if not additional:
            raise LookupError("Adicional não encontrado")
        return additional

    def get_additional(self, additional_id: int) -> dict:
        return additional_to_dict(self._additional(additional_id))

    def save_additional(self, data: dict, additional_id: int | None = None) -> dict:
        if not self.repo.get_additional_category(data["category_id"]):
            raise ValueError("Categoria de adicionais inválida")

        additional = self._additional(additional_id) if additional_id else AdditionalModel()
        for key, value in data.items():
            setattr(additional, key, value)
        saved = self.repo.save(additional)
        logger.info(f"Additional {saved.id} saved for store {self.store_id}")
        return additional_to_dict(saved)

    def delete_additional(self, additional_id: int):
        self.repo.delete(self._additional(additional_id))
