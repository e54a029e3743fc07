# acaishop/api/routers/stores.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from acaishop.api.deps import get_store, require_admin
from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import (
    StoreCreate,
    StoreOut,
    StoreConfigIn,
    StoreConfigOut,
    StoreStatusOut,
)
from acaishop.services.store_service import (
    StoreService,
    format_operating_hours,
    simplified_operating_hours,
)

router = APIRouter(prefix="/stores", tags=["stores"])


def get_service(db: Session):
    return StoreService(db)


@router.post("/", response_model=StoreOut, status_code=201, dependencies=[Depends(require_admin)])
def create_store(payload: StoreCreate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.create_store(payload.slug, payload.name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=List[StoreOut])
def list_stores(db: Session = Depends(get_db)):
    return get_service(db).list_stores()


@router.get("/{slug}", response_model=StoreOut)
def get_store_by_slug(store: StoreModel = Depends(get_store)):
    return store


@router.get("/{slug}/config", response_model=StoreConfigOut)
def get_config(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db).get_config(store)


@router.put("/{slug}/config", response_model=StoreConfigOut, dependencies=[Depends(require_admin)])
def save_config(
    payload: StoreConfigIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    """Saves the whole config; hours and special dates are stored as JSON."""
    data = payload.model_dump(mode="json")
    data["delivery_fee"] = payload.delivery_fee
    return get_service(db).save_config(store, data)


@router.get("/{slug}/status", response_model=StoreStatusOut)
def store_status(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db).status(store)


@router.get("/{slug}/hours")
def store_hours(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    config = get_service(db).get_config(store)
    return {
        "summary": simplified_operating_hours(config),
        "detailed": format_operating_hours(config),
    }
