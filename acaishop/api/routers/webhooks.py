# acaishop/api/routers/webhooks.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from acaishop.api.deps import get_gateway
from acaishop.data.database import get_db
from acaishop.services.mercado_pago_client import MercadoPagoClient, PaymentGatewayError
from acaishop.services.payment_service import PaymentService
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/mercado-pago")
def mercado_pago_webhook(
    request: Request,
    body: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
    gateway: MercadoPagoClient = Depends(get_gateway),
):
    svc = PaymentService(db, gateway)
    try:
        return svc.handle_webhook(
            body or {},
            {k.lower(): v for k, v in request.headers.items()},
            dict(request.query_params),
        )
    except PermissionError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except PaymentGatewayError as e:
        logger.error(f"Webhook lookup failed: {e.message}")
        return JSONResponse(status_code=e.status, content={"detail": e.message})


@router.get("/mercado-pago")
def mercado_pago_webhook_alive():
    return {"message": "Webhook endpoint ativo"}
