# acaishop/repos/store_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from acaishop.data.models.store import StoreModel
from acaishop.data.models.store_config import StoreConfigModel


class StoreRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_store(self, store_id: str) -> StoreModel | None:
        return self.db.get(StoreModel, store_id)

    def get_by_slug(self, slug: str) -> StoreModel | None:
        return self.db.execute(
            select(StoreModel).where(StoreModel.slug == slug)
        ).scalar_one_or_none()

    def list_stores(self) -> list[StoreModel]:
        return list(self.db.execute(select(StoreModel).order_by(StoreModel.name)).scalars())

    def create_store(self, store: StoreModel, config: StoreConfigModel) -> StoreModel:
        self.db.add(store)
        self.db.flush()  # assign PK
        config.store_id = store.id
        self.db.add(config)
        self.db.commit()
        self.db.refresh(store)
        return store

    def get_config(self, store_id: str) -> StoreConfigModel | None:
        return self.db.get(StoreConfigModel, store_id)

    def save_config(self, config: StoreConfigModel) -> StoreConfigModel:
        self.db.add(config)
        self.db.commit()
        self.db.refresh(config)
        return config

    def take_order_number(self, store_id: str) -> int:
        """Reserve the next per-store order number (caller commits)."""
        # UPDATE ... SET n = n + 1 keeps concurrent checkouts from sharing a number
        self.db.execute(
            update(StoreConfigModel)
            .where(StoreConfigModel.store_id == store_id)
            .values(next_order_number=StoreConfigModel.next_order_number + 1)
        )
        current = self.db.execute(
            select(StoreConfigModel.next_order_number).where(StoreConfigModel.store_id == store_id)
        ).scalar_one()
        return current - 1

    def reset_order_counter(self, store_id: str) -> int:
        rowcount = self.db.execute(
            update(StoreConfigModel)
            .where(StoreConfigModel.store_id == store_id)
            .values(next_order_number=1)
        ).rowcount
        self.db.commit()
        return rowcount
