# acaishop/services/notification_service.py
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from acaishop.data.models.notification import NotificationModel
from acaishop.repos.notification_repo import NotificationRepo
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)


def _utc(value: datetime) -> datetime:
    # naive input is taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def notification_to_dict(notification: NotificationModel) -> Dict[str, Any]:
    return {
        "id": notification.id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type,
        "active": notification.active,
        "start_date": notification.start_date,
        "end_date": notification.end_date,
        "priority": notification.priority,
        "read": notification.read,
        "created_at": notification.created_at,
    }


class NotificationService:
    """Store announcements shown on the storefront between start and end date."""

    def __init__(self, db: Session, store_id: str):
        self.repo = NotificationRepo(db, store_id)

    def list_all(self) -> List[Dict[str, Any]]:
        return [notification_to_dict(n) for n in self.repo.list_notifications()]

    def list_active(self, now: datetime | None = None) -> List[Dict[str, Any]]:
        now = now or datetime.now(timezone.utc)
        return [notification_to_dict(n) for n in self.repo.list_notifications(at=now)]

    def list_unread(self, now: datetime | None = None) -> List[Dict[str, Any]]:
        now = now or datetime.now(timezone.utc)
        return [notification_to_dict(n) for n in self.repo.list_notifications(at=now, only_unread=True)]

    def _notification(self, notification_id: int) -> NotificationModel:
        notification = self.repo.get_notification(notification_id)
        if not notification:
            raise LookupError("Notificação não encontrada")
        return notification

    def save(self, data: Dict[str, Any], notification_id: int | None = None) -> Dict[str, Any]:
        data = dict(data, start_date=_utc(data["start_date"]), end_date=_utc(data["end_date"]))
        if data["end_date"] < data["start_date"]:
            raise ValueError("Data final anterior à data inicial")

        notification = self._notification(notification_id) if notification_id else NotificationModel()
        for key, value in data.items():
            setattr(notification, key, value)
        saved = self.repo.save(notification)
        logger.info(f"Notification {saved.id} saved")
        return notification_to_dict(saved)

    def delete(self, notification_id: int):
        self.repo.delete(self._notification(notification_id))

    def mark_read(self, notification_id: int) -> Dict[str, Any]:
        notification = self._notification(notification_id)
        notification.read = True
        return notification_to_dict(self.repo.save(notification))
