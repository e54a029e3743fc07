# acaishop/api/deps.py
import hmac
import uuid

from fastapi import Depends, Header, HTTPException, Response
from sqlalchemy.orm import Session

from acaishop.data.database import get_db
from acaishop.data.models.store import StoreModel
from acaishop.services.mercado_pago_client import MercadoPagoClient
from acaishop.services.store_service import StoreService
from acaishop.utils.settings import ADMIN_API_KEY

CART_SESSION_HEADER = "X-Cart-Session"


def get_store(slug: str, db: Session = Depends(get_db)) -> StoreModel:
    try:
        return StoreService(db).get_store_by_slug(slug)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


def require_admin(x_admin_key: str | None = Header(None, alias="X-Admin-Key")):
    if not x_admin_key or not hmac.compare_digest(x_admin_key, ADMIN_API_KEY):
        raise HTTPException(status_code=403, detail="Acesso restrito ao administrador")


def cart_session(
    response: Response,
    x_cart_session: str | None = Header(None, alias=CART_SESSION_HEADER),
) -> str:
    session_id = (x_cart_session or "").strip() or str(uuid.uuid4())
    response.headers[CART_SESSION_HEADER] = session_id
    return session_id


def get_gateway() -> MercadoPagoClient:
    return MercadoPagoClient()
