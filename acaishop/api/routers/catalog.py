# acaishop/api/routers/catalog.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from acaishop.api.deps import get_store, require_admin
from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import (
    CategoryIn,
    CategoryOut,
    ProductIn,
    ProductOut,
    VisibilityIn,
)
from acaishop.services.catalog_service import CatalogService

router = APIRouter(prefix="/stores/{slug}", tags=["catalog"])
admin_router = APIRouter(
    prefix="/stores/{slug}/admin",
    tags=["catalog-admin"],
    dependencies=[Depends(require_admin)],
)


def get_service(db: Session, store: StoreModel):
    return CatalogService(db, store.id)


# storefront

@router.get("/categories", response_model=List[CategoryOut])
def list_categories(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db, store).list_categories(only_active=True)


@router.get("/products", response_model=List[ProductOut])
def list_products(
    category_id: Optional[int] = Query(None),
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    """Active, not hidden products (optionally of one category)."""
    return get_service(db, store).list_products(only_visible=True, category_id=category_id)


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).get_product(product_id, only_visible=True)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


# admin: categories

@admin_router.get("/categories", response_model=List[CategoryOut])
def admin_list_categories(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db, store).list_categories()


@admin_router.post("/categories", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryIn, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db, store).save_category(payload.model_dump())


@admin_router.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db, store).save_category(payload.model_dump(), category_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@admin_router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    svc = get_service(db, store)
    try:
        svc.delete_category(category_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# admin: products

@admin_router.get("/products", response_model=List[ProductOut])
def admin_list_products(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return get_service(db, store).list_products()


@admin_router.get("/products/{product_id}", response_model=ProductOut)
def admin_get_product(product_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).get_product(product_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@admin_router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return get_service(db, store).save_product(payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.put("/products/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    svc = get_service(db, store)
    try:
        return svc.save_product(payload.model_dump(), product_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.patch("/products/{product_id}/visibility", response_model=ProductOut)
def set_visibility(
    product_id: int,
    payload: VisibilityIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db, store).set_visibility(product_id, payload.hidden)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@admin_router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        get_service(db, store).delete_product(product_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
