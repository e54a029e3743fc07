# acaishop/api/routers/push.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from acaishop.api.deps import get_store, require_admin
from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import PushSendIn, PushSubscriptionIn
from acaishop.services.push_service import PushService

router = APIRouter(tags=["push"])


@router.get("/push/vapid-public-key")
def vapid_public_key():
    try:
        return {"publicKey": PushService.vapid_public_key()}
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/stores/{slug}/push/subscribe", status_code=201)
def subscribe(payload: PushSubscriptionIn, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return PushService(db, store.id).subscribe(payload.endpoint, payload.keys.model_dump(), payload.role)


@router.post("/stores/{slug}/push/unsubscribe")
def unsubscribe(payload: PushSubscriptionIn, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return {"removed": PushService(db, store.id).unsubscribe(payload.endpoint)}


@router.post("/stores/{slug}/admin/push/send", status_code=202, dependencies=[Depends(require_admin)])
def send_push(payload: PushSendIn, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    svc = PushService(db, store.id)
    try:
        return svc.send(payload.title, payload.body, payload.icon, payload.data, payload.role)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
