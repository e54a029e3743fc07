# acaishop/repos/table_repo.py
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from acaishop.data.models.order import OrderModel
from acaishop.data.models.table import TableModel


class TableRepo:
    def __init__(self, db: Session, store_id: str):
        self.db = db
        self.store_id = store_id

    def list_tables(self, only_active: bool = False) -> list[TableModel]:
        stmt = select(TableModel).where(TableModel.store_id == self.store_id)
        if only_active:
            stmt = stmt.where(TableModel.active.is_(True))
        return list(self.db.execute(stmt.order_by(TableModel.number)).scalars())

    def get_table(self, table_id: int) -> TableModel | None:
        table = self.db.get(TableModel, table_id)
        if table is None or table.store_id != self.store_id:
            return None
        return table

    def get_by_number(self, number: int) -> TableModel | None:
        stmt = select(TableModel).where(TableModel.store_id == self.store_id, TableModel.number == number)
        return self.db.execute(stmt).scalar_one_or_none()

    def save(self, table: TableModel) -> TableModel:
        table.store_id = self.store_id
        self.db.add(table)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValueError(f"Mesa {table.number} já existe")
        self.db.refresh(table)
        return table

    def delete(self, table: TableModel) -> None:
        self.db.delete(table)
        self.db.commit()

    def count_orders(self, table_id: int) -> int:
        stmt = select(func.count(OrderModel.id)).where(
            OrderModel.store_id == self.store_id, OrderModel.table_id == table_id
        )
        return self.db.execute(stmt).scalar_one()

    def tables_with_orders(self) -> int:
        stmt = select(func.count(func.distinct(OrderModel.table_id))).where(
            OrderModel.store_id == self.store_id,
            OrderModel.order_type == "table",
            OrderModel.table_id.is_not(None),
        )
        return self.db.execute(stmt).scalar_one()
