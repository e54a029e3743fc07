# acaishop/services/mercado_pago_client.py
import uuid

import requests

from acaishop.utils.retry import http_retry
from acaishop.utils.settings import (
    MERCADO_PAGO_ACCESS_TOKEN,
    MERCADO_PAGO_API_URL,
    MERCADO_PAGO_TIMEOUT,
)
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentGatewayError(Exception):
    """Vendor refused or failed a call; `status` is the HTTP status to forward."""

    def __init__(self, status: int, message: str, details=None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.details = details


class MercadoPagoClient:
    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        timeout: int = MERCADO_PAGO_TIMEOUT,
    ):
        self.access_token = access_token if access_token is not None else MERCADO_PAGO_ACCESS_TOKEN
        self.base_url = (base_url or MERCADO_PAGO_API_URL).rstrip("/")
        self.timeout = timeout

    def _headers(self, idempotent: bool = False) -> dict:
        if not self.access_token:
            raise PaymentGatewayError(400, "Credenciais do Mercado Pago não configuradas")
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        if idempotent:
            headers["X-Idempotency-Key"] = str(uuid.uuid4())
        return headers

    @staticmethod
    def _parse(resp: requests.Response) -> dict:
        if resp.ok:
            return resp.json()

        try:
            details = resp.json()
            message = details.get("message") or details.get("error") or resp.reason
        except ValueError:
            details, message = None, resp.text or resp.reason
        logger.warning(f"Mercado Pago answered {resp.status_code}: {message}")
        raise PaymentGatewayError(resp.status_code, message, details)

    @http_retry()
    def _post(self, path: str, body: dict, headers: dict) -> requests.Response:
        return requests.post(f"{self.base_url}{path}", json=body, headers=headers, timeout=self.timeout)

    @http_retry()
    def _get(self, path: str, headers: dict) -> requests.Response:
        return requests.get(f"{self.base_url}{path}", headers=headers, timeout=self.timeout)

    def _call(self, send) -> dict:
        try:
            resp = send()
        except requests.RequestException as e:
            logger.error(f"Mercado Pago unreachable: {e}")
            raise PaymentGatewayError(502, "Mercado Pago indisponível") from e
        return self._parse(resp)

    def create_payment(self, body: dict) -> dict:
        # one idempotency key per logical call, shared by the retries
        headers = self._headers(idempotent=True)
        logger.info(f"MercadoPago POST /v1/payments ref={body.get('external_reference')}")
        return self._call(lambda: self._post("/v1/payments", body, headers))

    def get_payment(self, payment_id) -> dict:
        headers = self._headers()
        logger.info(f"MercadoPago GET /v1/payments/{payment_id}")
        return self._call(lambda: self._get(f"/v1/payments/{payment_id}", headers))

    def create_preference(self, body: dict) -> dict:
        headers = self._headers()
        logger.info(f"MercadoPago POST /checkout/preferences ref={body.get('external_reference')}")
        return self._call(lambda: self._post("/checkout/preferences", body, headers))
