# acaishop/repos/cart_repo.py
from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from acaishop.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session, store_id: str):
        self.db = db
        self.store_id = store_id

    def get_items(self, session_id: str) -> list[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(
                CartItemModel.store_id == self.store_id,
                CartItemModel.session_id == session_id,
            )
            .order_by(CartItemModel.id)
        )
        return list(self.db.execute(stmt).scalars())

    def get_item(self, session_id: str, item_id: int) -> CartItemModel | None:
        item = self.db.get(CartItemModel, item_id)
        if item is None or item.store_id != self.store_id or item.session_id != session_id:
            return None
        return item

    def find_lines(self, session_id: str, product_id: int, size: str) -> list[CartItemModel]:
        stmt = select(CartItemModel).where(
            CartItemModel.store_id == self.store_id,
            CartItemModel.session_id == session_id,
            CartItemModel.product_id == product_id,
            CartItemModel.size == size,
        )
        return list(self.db.execute(stmt).scalars())

    def add_item(self, item: CartItemModel) -> CartItemModel:
        item.store_id = self.store_id
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.commit()

    def clear(self, session_id: str, commit: bool = True) -> int:
        rowcount = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.store_id == self.store_id,
                CartItemModel.session_id == session_id,
            )
        ).rowcount
        if commit:
            self.db.commit()
        return rowcount
