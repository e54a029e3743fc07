# acaishop/api/routers/reports.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from acaishop.api.deps import get_store, require_admin
from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import SalesReportOut
from acaishop.services.reports_service import ReportsService

router = APIRouter(
    prefix="/stores/{slug}/admin/reports",
    tags=["reports"],
    dependencies=[Depends(require_admin)],
)


@router.get("/sales", response_model=SalesReportOut)
def sales_report(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    status: Optional[List[str]] = Query(None),
    payment_method: Optional[List[str]] = Query(None),
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    if start and end and end < start:
        raise HTTPException(status_code=400, detail="Período inválido")
    return ReportsService(db, store.id).sales_report(start, end, status, payment_method)
