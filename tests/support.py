# tests/support.py
import unittest

from fastapi.testclient import TestClient

from acaishop.main import app
from acaishop.api.deps import get_gateway
from acaishop.data.database import Base, SessionLocal, engine
from acaishop.data.seed import seed_defaults
from acaishop.services.mercado_pago_client import PaymentGatewayError
from acaishop.utils.settings import ADMIN_API_KEY

ADMIN = {"X-Admin-Key": ADMIN_API_KEY}
ALL_DAY = {day: {"open": True, "hours": "00:00 - 24:00"} for day in (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
)}


class FakeGateway:
    """In-memory stand-in for the Mercado Pago API."""

    def __init__(self):
        self.payments = {}
        self.created = []
        self.preferences = []
        self.fail_lookup = set()
        self._next_id = 1000

    def create_payment(self, body):
        self._next_id += 1
        self.created.append(body)
        payment = {
            "id": self._next_id,
            "status": "approved" if body.get("token") == "approve-me" else "pending",
            "status_detail": "pending_waiting_transfer",
            "external_reference": body.get("external_reference"),
            "transaction_amount": body.get("transaction_amount"),
            "payment_method_id": body.get("payment_method_id"),
            "payment_type_id": "bank_transfer" if body.get("payment_method_id") == "pix" else "credit_card",
            "date_approved": None,
            "point_of_interaction": {
                "transaction_data": {
                    "qr_code": "00020126-fake-pix",
                    "qr_code_base64": "aGVsbG8=",
                    "ticket_url": "https://mp.example/ticket",
                }
            },
        }
        self.payments[str(payment["id"])] = payment
        return dict(payment)

    def get_payment(self, payment_id):
        if str(payment_id) in self.fail_lookup:
            raise PaymentGatewayError(500, "boom")
        if str(payment_id) not in self.payments:
            raise PaymentGatewayError(404, "Payment not found")
        return dict(self.payments[str(payment_id)])

    def create_preference(self, body):
        self.preferences.append(body)
        return {
            "id": "pref-1",
            "init_point": "https://mp.example/init",
            "sandbox_init_point": "https://sandbox.mp.example/init",
            "external_reference": body.get("external_reference"),
        }

    def approve(self, payment_id, when="2025-03-01T15:30:00.000-03:00"):
        self.payments[str(payment_id)].update(status="approved", date_approved=when)


def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


class ApiTestCase(unittest.TestCase):
    """Fresh tables, the seeded default store (open all day) and a fake gateway per test."""

    def setUp(self):
        reset_database()
        self.db = SessionLocal()
        self.store = seed_defaults(self.db)
        self.store.config.operating_hours = dict(ALL_DAY)
        self.db.commit()
        self.slug = self.store.slug

        self.gateway = FakeGateway()
        app.dependency_overrides[get_gateway] = lambda: self.gateway
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.db.close()

    def url(self, path: str) -> str:
        return f"/stores/{self.slug}{path}"

    def product_id(self, name: str) -> int:
        for product in self.client.get(self.url("/admin/products"), headers=ADMIN).json():
            if product["name"] == name:
                return product["id"]
        raise AssertionError(f"product {name} not seeded")

    def additional_ids(self, *names: str) -> list:
        rows = {a["name"]: a["id"] for a in self.client.get(self.url("/admin/additionals"), headers=ADMIN).json()}
        return [rows[n] for n in names]

    def add_to_cart(self, session: str, name: str = "Açaí Tradicional", size: str = "500ml", quantity: int = 1, additionals=()):
        resp = self.client.post(
            self.url("/cart/items"),
            json={
                "product_id": self.product_id(name),
                "size": size,
                "quantity": quantity,
                "additional_ids": self.additional_ids(*additionals),
            },
            headers={"X-Cart-Session": session},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def place_order(self, session: str = "sess-1", payment_method: str = "pix"):
        self.add_to_cart(session)
        resp = self.client.post(
            self.url("/orders"),
            json={
                "customer_name": "Maria",
                "customer_phone": "11999990000",
                "address": {
                    "street": "Rua A",
                    "number": "10",
                    "neighborhood": "Centro",
                    "city": "São Paulo",
                    "state": "SP",
                },
                "payment_method": payment_method,
            },
            headers={"X-Cart-Session": session},
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()