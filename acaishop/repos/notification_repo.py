# acaishop/repos/notification_repo.py
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from acaishop.data.models.notification import NotificationModel
from acaishop.data.models.push_subscription import PushSubscriptionModel


class NotificationRepo:
    def __init__(self, db: Session, store_id: str):
        self.db = db
        self.store_id = store_id

    def list_notifications(
        self,
        at: datetime | None = None,
        only_unread: bool = False,
    ) -> list[NotificationModel]:
        stmt = select(NotificationModel).where(NotificationModel.store_id == self.store_id)
        if at is not None:
            stmt = stmt.where(
                NotificationModel.active.is_(True),
                NotificationModel.start_date <= at,
                NotificationModel.end_date >= at,
            )
        if only_unread:
            stmt = stmt.where(NotificationModel.read.is_(False))
        stmt = stmt.order_by(NotificationModel.priority.desc(), NotificationModel.created_at.desc())
        return list(self.db.execute(stmt).scalars())

    def get_notification(self, notification_id: int) -> NotificationModel | None:
        notification = self.db.get(NotificationModel, notification_id)
        if notification is None or notification.store_id != self.store_id:
            return None
        return notification

    def save(self, notification: NotificationModel) -> NotificationModel:
        notification.store_id = self.store_id
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def delete(self, notification: NotificationModel) -> None:
        self.db.delete(notification)
        self.db.commit()


class PushSubscriptionRepo:
    def __init__(self, db: Session, store_id: str | None = None):
        self.db = db
        self.store_id = store_id

    def get_by_endpoint(self, endpoint: str) -> PushSubscriptionModel | None:
        return self.db.execute(
            select(PushSubscriptionModel).where(PushSubscriptionModel.endpoint == endpoint)
        ).scalar_one_or_none()

    def list_subscriptions(self, role: str | None = None) -> list[PushSubscriptionModel]:
        stmt = select(PushSubscriptionModel)
        if self.store_id is not None:
            stmt = stmt.where(PushSubscriptionModel.store_id == self.store_id)
        if role:
            stmt = stmt.where(PushSubscriptionModel.role == role)
        return list(self.db.execute(stmt).scalars())

    def save(self, subscription: PushSubscriptionModel) -> PushSubscriptionModel:
        self.db.add(subscription)
        self.db.commit()
        self.db.refresh(subscription)
        return subscription

    def delete(self, subscription: PushSubscriptionModel) -> None:
        self.db.delete(subscription)
        self.db.commit()
