# acaishop/services/additionals_service.py
from sqlalchemy.orm import Session

from acaishop.data.models.product import ProductModel
from acaishop.repos.catalog_repo import CatalogRepo
from acaishop.services.additionals_rules import AdditionalSelection
from acaishop.services.catalog_service import (
    additional_category_to_dict,
    additional_to_dict,
    size_price,
)
from acaishop.utils.formatting import to_money


class AdditionalsService:
    """Storefront view of additionals for a given product."""

    def __init__(self, db: Session, store_id: str):
        self.db = db
        self.repo = CatalogRepo(db, store_id)

    def _available(self, product: ProductModel):
        additionals = self.repo.list_additionals(only_active=True)
        if product.allowed_additionals is not None:
            allowed = set(product.allowed_additionals)
            additionals = [a for a in additionals if a.id in allowed]
        return additionals

    def list_for_product(self, product: ProductModel) -> list[dict]:
        additionals = self._available(product)
        groups = []
        for category in self.repo.list_additional_categories(only_active=True):
            members = [additional_to_dict(a) for a in additionals if a.category_id == category.id]
            if members:
                groups.append({"category": additional_category_to_dict(category), "additionals": members})
        return groups

    def build_selection(self, product: ProductModel, size: str, additional_ids: list[int]) -> AdditionalSelection:
        """Replays the picks through the selection rules (raises ValueError on any violation)."""
        size_price(product, size)

        available = {a.id: a for a in self._available(product)}
        selection = AdditionalSelection(size)
        seen = set()
        for additional_id in additional_ids:
            if additional_id in seen:
                raise ValueError("Adicional repetido")
            seen.add(additional_id)

            additional = available.get(additional_id)
            # inactive category hides its additionals too
            if additional is None or (additional.category and not additional.category.active):
                raise ValueError(f"Adicional {additional_id} indisponível para este produto")

            selection.toggle(
                {
                    "id": additional.id,
                    "name": additional.name,
                    "price": additional.price,
                    "category_id": additional.category_id,
                    "category_name": additional.category.name if additional.category else None,
                    "selection_limit": additional.category.selection_limit if additional.category else None,
                }
            )
        return selection

    def quote(self, product: ProductModel, size: str, additional_ids: list[int]) -> dict:
        selection = self.build_selection(product, size, additional_ids)
        base = size_price(product, size)
        additionals_total = selection.total()
        return {
            "size": size,
            "size_price": base,
            "has_free_additionals": selection.has_free_additionals,
            "additionals_total": additionals_total,
            "line_unit_price": to_money(base + additionals_total),
            "count_text": selection.count_text(),
            "groups": selection.grouped(),
        }
