# acaishop/api/routers/orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from acaishop.api.deps import cart_session, get_store, require_admin
from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import CheckoutIn, OrderOut, OrderStatusIn, WhatsAppLinkOut
from acaishop.services.order_service import OrderService
from acaishop.services.store_service import StoreService

router = APIRouter(prefix="/stores/{slug}/orders", tags=["orders"])
admin_router = APIRouter(
    prefix="/stores/{slug}/admin/orders",
    tags=["orders-admin"],
    dependencies=[Depends(require_admin)],
)


def get_service(db: Session, store: StoreModel):
    return OrderService(db, store)


@router.post("", response_model=OrderOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    session_id: str = Depends(cart_session),
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    """
    Places an order from the session cart.
    Admins get a push notification asynchronously.
    """
    svc = get_service(db, store)
    try:
        return svc.checkout(
            session_id=session_id,
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
            address=payload.address.model_dump() if payload.address else None,
            payment_method=payload.payment_method,
            table_number=payload.table_number,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).get_order(order_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{order_id}/pix-code")
def static_pix_code(order_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    svc = get_service(db, store)
    try:
        return svc.static_pix(order_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# admin

@admin_router.get("", response_model=List[OrderOut])
def list_orders(
    status: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, gt=0, le=500),
    order_type: Optional[str] = Query(None, pattern=r"^(delivery|table)$"),
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    return get_service(db, store).list_orders(status=status, limit=limit, order_type=order_type)


@admin_router.get("/{order_id}", response_model=OrderOut)
def admin_get_order(order_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).get_order(order_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@admin_router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: int,
    payload: OrderStatusIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    svc = get_service(db, store)
    try:
        return svc.update_status(order_id, payload.status)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.post("/{order_id}/printed", response_model=OrderOut)
def mark_printed(order_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).mark_printed(order_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@admin_router.get("/{order_id}/whatsapp", response_model=WhatsAppLinkOut)
def whatsapp_confirmation(order_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    """Link the attendant opens to confirm the order with the customer."""
    svc = get_service(db, store)
    try:
        return svc.whatsapp_confirmation(order_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.post("/{order_id}/notified", response_model=OrderOut)
def mark_notified(order_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).mark_notified(order_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@admin_router.post("/reset-counter")
def reset_order_counter(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return StoreService(db).reset_order_counter(store)
