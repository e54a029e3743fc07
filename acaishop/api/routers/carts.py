# acaishop/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from acaishop.api.deps import cart_session, get_store
from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import CartItemIn, CartOut, CartQuantityIn
from acaishop.services.cart_service import CartService

router = APIRouter(prefix="/stores/{slug}/cart", tags=["cart"])


def get_service(db: Session, store: StoreModel):
    return CartService(db, store.id)


@router.get("", response_model=CartOut)
def get_cart(
    session_id: str = Depends(cart_session),
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    return get_service(db, store).get_cart(session_id)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: CartItemIn,
    session_id: str = Depends(cart_session),
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    """Same product, size and additionals add up on one line."""
    svc = get_service(db, store)
    try:
        return svc.add_item(
            session_id=session_id,
            product_id=payload.product_id,
            size=payload.size,
            quantity=payload.quantity,
            additional_ids=payload.additional_ids,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/items/{item_id}", response_model=CartOut)
def update_quantity(
    item_id: int,
    payload: CartQuantityIn,
    session_id: str = Depends(cart_session),
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db, store).update_quantity(session_id, item_id, payload.quantity)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(
    item_id: int,
    session_id: str = Depends(cart_session),
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db, store).remove_item(session_id, item_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("", response_model=CartOut)
def clear_cart(
    session_id: str = Depends(cart_session),
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    svc = get_service(db, store)
    svc.clear(session_id)
    return svc.get_cart(session_id)
