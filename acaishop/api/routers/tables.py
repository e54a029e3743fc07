# acaishop/api/routers/tables.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from acaishop.api.deps import get_store, require_admin
from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import TableIn, TableOut, TableStatsOut, TableUpdate
from acaishop.services.table_service import TableService

router = APIRouter(prefix="/stores/{slug}/tables", tags=["tables"])
admin_router = APIRouter(
    prefix="/stores/{slug}/admin/tables",
    tags=["tables-admin"],
    dependencies=[Depends(require_admin)],
)


def get_service(db: Session, store: StoreModel):
    return TableService(db, store)


@router.get("/{number}", response_model=TableOut)
def get_open_table(number: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    """Where a scanned QR code lands; inactive tables are not found."""
    try:
        return get_service(db, store).get_by_number(number)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


# admin

@admin_router.get("", response_model=List[TableOut])
def list_tables(active: bool = False, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db, store).list_tables(only_active=active)


@admin_router.get("/stats", response_model=TableStatsOut)
def table_stats(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db, store).stats()


@admin_router.get("/{table_id}", response_model=TableOut)
def get_table(table_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).get_table(table_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@admin_router.post("", response_model=TableOut, status_code=201)
def create_table(payload: TableIn, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).create_table(payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.put("/{table_id}", response_model=TableOut)
def update_table(
    table_id: int,
    payload: TableUpdate,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    svc = get_service(db, store)
    try:
        return svc.update_table(table_id, payload.model_dump(exclude_unset=True))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.delete("/{table_id}", status_code=204)
def delete_table(table_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    svc = get_service(db, store)
    try:
        svc.delete_table(table_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.post("/{table_id}/qr-code", response_model=TableOut)
def regenerate_qr_code(table_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    """Issues a fresh QR code identifier for a reprinted code."""
    try:
        return get_service(db, store).regenerate_qr_code(table_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
