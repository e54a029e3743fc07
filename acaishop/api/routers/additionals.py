# acaishop/api/routers/additionals.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from acaishop.api.deps import get_store, require_admin
from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import (
    AdditionalCategoryIn,
    AdditionalCategoryOut,
    AdditionalIn,
    AdditionalOut,
    AdditionalGroupOut,
    AdditionalsQuoteIn,
    AdditionalsQuoteOut,
)
from acaishop.services.additionals_service import AdditionalsService
from acaishop.services.catalog_service import CatalogService

router = APIRouter(prefix="/stores/{slug}", tags=["additionals"])
admin_router = APIRouter(
    prefix="/stores/{slug}/admin",
    tags=["additionals-admin"],
    dependencies=[Depends(require_admin)],
)


def _visible_product(catalog: CatalogService, product_id: int):
    product = catalog.product(product_id)
    if not product.active or product.hidden:
        raise LookupError("Produto não encontrado")
    return product


# storefront

@router.get("/additional-categories", response_model=List[AdditionalCategoryOut])
def list_additional_categories(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return CatalogService(db, store.id).list_additional_categories(only_active=True)


@router.get("/products/{product_id}/additionals", response_model=List[AdditionalGroupOut])
def list_for_product(product_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    """Additionals a product accepts, grouped by category."""
    try:
        product = _visible_product(CatalogService(db, store.id), product_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AdditionalsService(db, store.id).list_for_product(product)


@router.post("/products/{product_id}/additionals/quote", response_model=AdditionalsQuoteOut)
def quote_additionals(
    product_id: int,
    payload: AdditionalsQuoteIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    try:
        product = _visible_product(CatalogService(db, store.id), product_id)
        return AdditionalsService(db, store.id).quote(product, payload.size, payload.additional_ids)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# admin: additional categories

@admin_router.get("/additional-categories", response_model=List[AdditionalCategoryOut])
def admin_list_additional_categories(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return CatalogService(db, store.id).list_additional_categories()


@admin_router.post("/additional-categories", response_model=AdditionalCategoryOut, status_code=201)
def create_additional_category(
    payload: AdditionalCategoryIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    return CatalogService(db, store.id).save_additional_category(payload.model_dump())


@admin_router.put("/additional-categories/{category_id}", response_model=AdditionalCategoryOut)
def update_additional_category(
    category_id: int,
    payload: AdditionalCategoryIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    try:
        return CatalogService(db, store.id).save_additional_category(payload.model_dump(), category_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@admin_router.delete("/additional-categories/{category_id}", status_code=204)
def delete_additional_category(category_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        CatalogService(db, store.id).delete_additional_category(category_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# admin: additionals

@admin_router.get("/additionals", response_model=List[AdditionalOut])
def admin_list_additionals(store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    return CatalogService(db, store.id).list_additionals()


@admin_router.post("/additionals", response_model=AdditionalOut, status_code=201)
def create_additional(payload: AdditionalIn, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        return CatalogService(db, store.id).save_additional(payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.put("/additionals/{additional_id}", response_model=AdditionalOut)
def update_additional(
    additional_id: int,
    payload: AdditionalIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
):
    try:
        return CatalogService(db, store.id).save_additional(payload.model_dump(), additional_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.delete("/additionals/{additional_id}", status_code=204)
def delete_additional(additional_id: int, store: StoreModel = Depends(get_store), db: Session = Depends(get_db)):
    try:
        CatalogService(db, store.id).delete_additional(additional_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
