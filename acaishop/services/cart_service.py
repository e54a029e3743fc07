# acaishop/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any, List

from sqlalchemy.orm import Session

from acaishop.data.models.cart_item import CartItemModel
from acaishop.repos.cart_repo import CartRepo
from acaishop.services.additionals_service import AdditionalsService
from acaishop.services.catalog_service import CatalogService, size_price
from acaishop.utils.formatting import to_money
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)


def _additionals_key(additionals: list) -> list:
    return sorted((int(a["id"]), int(a.get("quantity", 1))) for a in additionals or [])


def line_unit_price(item) -> Decimal:
    """Size price plus every additional on the line."""
    extras = sum(
        (to_money(a.get("price")) * int(a.get("quantity", 1)) for a in item.additionals or []),
        Decimal("0.00"),
    )
    return to_money(item.price) + extras


def cart_total(items) -> Decimal:
    return to_money(sum((line_unit_price(i) * i.quantity for i in items), Decimal("0.00")))


class CartService:
    """
    Session-keyed cart of one store.
    Commands (add, update, remove, clear) modify state, get_cart only reads.
    """

    def __init__(self, db: Session, store_id: str):
        self.repo = CartRepo(db, store_id)
        self.catalog = CatalogService(db, store_id)
        self.additionals = AdditionalsService(db, store_id)

    # query
    def get_cart(self, session_id: str) -> Dict[str, Any]:
        items = self.repo.get_items(session_id)
        return {
            "session_id": session_id,
            "items": [self._item_to_dict(i) for i in items],
            "total": cart_total(items),
            "item_count": sum(i.quantity for i in items),
        }

    def get_items(self, session_id: str) -> List[CartItemModel]:
        return self.repo.get_items(session_id)

    @staticmethod
    def _item_to_dict(item: CartItemModel) -> Dict[str, Any]:
        return {
            "id": item.id,
            "product_id": item.product_id,
            "name": item.name,
            "price": to_money(item.price),
            "quantity": item.quantity,
            "image": item.image,
            "size": item.size,
            "additionals": item.additionals or [],
            "category_name": item.category_name,
            "line_total": to_money(line_unit_price(item) * item.quantity),
        }

    # commands
    def add_item(
        self,
        session_id: str,
        product_id: int,
        size: str,
        quantity: int = 1,
        additional_ids: List[int] | None = None,
    ) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantidade deve ser maior que zero")

        product = self.catalog.product(product_id)
        if not product.active or product.hidden:
            raise ValueError("Produto indisponível")

        # prices always come from the catalog
        price = size_price(product, size)
        selection = self.additionals.build_selection(product, size, additional_ids or [])
        additionals = selection.as_line_additionals()

        key = _additionals_key(additionals)
        for line in self.repo.find_lines(session_id, product_id, size):
            if _additionals_key(line.additionals) == key:
                logger.info(
                    f"Product {product_id} ({size}) already in cart {session_id}, "
                    f"quantity {line.quantity} -> {line.quantity + quantity}"
                )
                line.quantity += quantity
                self.repo.add_item(line)
                return self.get_cart(session_id)

        logger.info(f"Adding product {product_id} ({size}) to cart {session_id}")
        self.repo.add_item(
            CartItemModel(
                session_id=session_id,
                product_id=product.id,
                name=product.name,
                price=price,
                quantity=quantity,
                image=product.image,
                size=size,
                additionals=additionals,
                category_name=product.category.name if product.category else None,
            )
        )
        return self.get_cart(session_id)

    def update_quantity(self, session_id: str, item_id: int, quantity: int) -> Dict[str, Any]:
        item = self.repo.get_item(session_id, item_id)
        if not item:
            raise LookupError("Item não encontrado no carrinho")

        if quantity <= 0:
            self.repo.delete_item(item)
        else:
            item.quantity = quantity
            self.repo.add_item(item)
        return self.get_cart(session_id)

    def remove_item(self, session_id: str, item_id: int) -> Dict[str, Any]:
        item = self.repo.get_item(session_id, item_id)
        if not item:
            raise LookupError("Item não encontrado no carrinho")

        self.repo.delete_item(item)
        logger.info(f"Item {item_id} removed from cart {session_id}")
        return self.get_cart(session_id)

    def clear(self, session_id: str, commit: bool = True) -> int:
        removed = self.repo.clear(session_id, commit=commit)
        logger.info(f"Cart {session_id} cleared ({removed} lines)")
        return removed
