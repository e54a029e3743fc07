# acaishop/services/table_service.py
import uuid
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from acaishop.data.models.store import StoreModel
from acaishop.data.models.table import TableModel
from acaishop.repos.table_repo import TableRepo
from acaishop.utils.settings import PUBLIC_APP_URL
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)


def new_qr_code(number: int) -> str:
    return f"mesa-{number}-{uuid.uuid4().hex[:12]}"


def table_url(store_slug: str, number: int) -> str:
    """Storefront address the printed QR code points to."""
    base = (PUBLIC_APP_URL or "http://localhost:3000").rstrip("/")
    return f"{base}/{store_slug}/mesa/{number}"


def table_to_dict(table: TableModel, store_slug: str) -> Dict[str, Any]:
    return {
        "id": table.id,
        "number": table.number,
        "name": table.name,
        "active": table.active,
        "qr_code": table.qr_code,
        "url": table_url(store_slug, table.number),
        "created_at": table.created_at,
        "updated_at": table.updated_at,
    }


class TableService:
    """Dine-in tables of one store."""

    def __init__(self, db: Session, store: StoreModel):
        self.store = store
        self.repo = TableRepo(db, store.id)

    def _dict(self, table: TableModel) -> Dict[str, Any]:
        return table_to_dict(table, self.store.slug)

    def table(self, table_id: int) -> TableModel:
        table = self.repo.get_table(table_id)
        if not table:
            raise LookupError("Mesa não encontrada")
        return table

    def open_table(self, number: int) -> TableModel:
        """Active table by its number; what a customer scanning the QR code lands on."""
        table = self.repo.get_by_number(number)
        if table is None or not table.active:
            raise LookupError("Mesa não encontrada ou inativa")
        return table

    def list_tables(self, only_active: bool = False) -> List[Dict[str, Any]]:
        return [self._dict(t) for t in self.repo.list_tables(only_active)]

    def get_table(self, table_id: int) -> Dict[str, Any]:
        return self._dict(self.table(table_id))

    def get_by_number(self, number: int) -> Dict[str, Any]:
        return self._dict(self.open_table(number))

    def create_table(self, data: Dict[str, Any]) -> Dict[str, Any]:
        number = data["number"]
        if self.repo.get_by_number(number):
            raise ValueError(f"Mesa {number} já existe")
        table = self.repo.save(
            TableModel(
                number=number,
                name=data.get("name") or f"Mesa {number}",
                active=data.get("active", True),
                qr_code=new_qr_code(number),
            )
        )
        logger.info(f"Table {table.number} created for store {self.store.slug}")
        return self._dict(table)

    def update_table(self, table_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        table = self.table(table_id)
        number = data.get("number")
        if number is not None and number != table.number:
            if self.repo.get_by_number(number):
                raise ValueError(f"Mesa {number} já existe")
            table.number = number
        if data.get("name") is not None:
            table.name = data["name"]
        if data.get("active") is not None:
            table.active = data["active"]
        return self._dict(self.repo.save(table))

    def delete_table(self, table_id: int):
        table = self.table(table_id)
        if self.repo.count_orders(table.id):
            raise ValueError("Não é possível excluir mesa com pedidos associados")
        self.repo.delete(table)
        logger.info(f"Table {table.number} deleted for store {self.store.slug}")

    def regenerate_qr_code(self, table_id: int) -> Dict[str, Any]:
        table = self.table(table_id)
        old = table.qr_code
        table.qr_code = new_qr_code(table.number)
        saved = self.repo.save(table)
        logger.info(f"Table {saved.number} QR code {old} -> {saved.qr_code}")
        return self._dict(saved)

    def stats(self) -> Dict[str, int]:
        tables = self.repo.list_tables()
        active = sum(1 for t in tables if t.active)
        return {
            "total": len(tables),
            "active": active,
            "inactive": len(tables) - active,
            "with_orders": self.repo.tables_with_orders(),
        }
