# acaishop/api/routers/payments.py
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from acaishop.api.deps import get_gateway, get_store, require_admin
from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.domain.schemas import (
    CardPaymentIn,
    PaymentCheckIn,
    PixPaymentIn,
    PreferenceIn,
)
from acaishop.services.mercado_pago_client import MercadoPagoClient, PaymentGatewayError
from acaishop.services.payment_service import PaymentReconciler, PaymentService

router = APIRouter(prefix="/stores/{slug}/payments", tags=["payments"])


def get_service(db: Session, store: StoreModel, gateway: MercadoPagoClient):
    return PaymentService(db, gateway, store.id)


def gateway_error(e: PaymentGatewayError) -> JSONResponse:
    # vendor status is forwarded, transport failures come as 502
    return JSONResponse(status_code=e.status, content={"detail": e.message, "vendor": e.details})


@router.post("/pix")
def create_pix(
    payload: PixPaymentIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
    gateway: MercadoPagoClient = Depends(get_gateway),
):
    svc = get_service(db, store, gateway)
    try:
        return svc.create_pix(payload.order_id, payload.payer.model_dump())
    except PaymentGatewayError as e:
        return gateway_error(e)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/card")
def create_card_payment(
    payload: CardPaymentIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
    gateway: MercadoPagoClient = Depends(get_gateway),
):
    svc = get_service(db, store, gateway)
    try:
        return svc.create_card_payment(
            order_id=payload.order_id,
            token=payload.token,
            payment_method_id=payload.payment_method_id,
            installments=payload.installments,
            payer=payload.payer.model_dump(),
            issuer_id=payload.issuer_id,
        )
    except PaymentGatewayError as e:
        return gateway_error(e)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/preference")
def create_preference(
    payload: PreferenceIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
    gateway: MercadoPagoClient = Depends(get_gateway),
):
    """Checkout Pro preference (redirect flow)."""
    svc = get_service(db, store, gateway)
    payer = payload.payer.model_dump() if payload.payer else None
    try:
        return svc.create_preference(payload.order_id, payer)
    except PaymentGatewayError as e:
        return gateway_error(e)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/check")
def check_payment(
    payload: PaymentCheckIn,
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
    gateway: MercadoPagoClient = Depends(get_gateway),
):
    svc = get_service(db, store, gateway)
    try:
        return svc.check_payment(payment_id=payload.payment_id, order_id=payload.order_id)
    except PaymentGatewayError as e:
        return gateway_error(e)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/auto-check", dependencies=[Depends(require_admin)])
def auto_check_payments(
    store: StoreModel = Depends(get_store),
    db: Session = Depends(get_db),
    gateway: MercadoPagoClient = Depends(get_gateway),
):
    """Runs the pending-payment poll for this store right away."""
    return PaymentReconciler(db, gateway, store_id=store.id).run()
