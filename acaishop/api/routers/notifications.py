# acaishop/api/routers/notifications.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from acaishop.api.deps import get_store, require_admin
from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import NotificationIn, NotificationOut
from acaishop.services.notification_service import NotificationService

router = APIRouter(prefix="/stores/{slug}/notifications", tags=["notifications"])
admin_router = APIRouter(
    prefix="/stores/{slug}/admin/notifications",
    tags=["notifications-admin"],
    dependencies=[Depends(require_admin)],
)


def get_service(db: Session, store: StoreModel):
    return NotificationService(db, store.id)


@router.get("", response_model=List[NotificationOut])
def list_active(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db, store).list_active()


@router.get("/unread", response_model=List[NotificationOut])
def list_unread(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db, store).list_unread()


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).mark_read(notification_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@admin_router.get("", response_model=List[NotificationOut])
def list_all(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db, store).list_all()


@admin_router.post("", response_model=NotificationOut, status_code=201)
def create_notification(payload: NotificationIn, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).save(payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.put("/{notification_id}", response_model=NotificationOut)
def update_notification(
    notification_id: int,
    payload: NotificationIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    svc = get_service(db, store)
    try:
        return svc.save(payload.model_dump(), notification_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.delete("/{notification_id}", status_code=204)
def delete_notification(notification_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        get_service(db, store).delete(notification_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
