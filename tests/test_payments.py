# tests/test_payments.py
import hashlib
import hmac
import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

import requests

from acaishop.data.models.order import OrderModel
from acaishop.services.mercado_pago_client import MercadoPagoClient, PaymentGatewayError
from acaishop.services.payment_service import (
    PaymentReconciler,
    apply_payment,
    verify_webhook_signature,
)

from tests.support import ADMIN, ApiTestCase

PAYER = {"email": "cliente@example.com", "first_name": "Maria"}


class ApplyPaymentTests(unittest.TestCase):
    """Vendor status to order status mapping."""

    def check(self, vendor_status, expected_order_status):
        order = OrderModel(status="new")
        apply_payment(order, {"id": 55, "status": vendor_status, "transaction_amount": 20})
        self.assertEqual(order.payment_status, vendor_status)
        self.assertEqual(order.payment_id, "55")
        self.assertEqual(order.status, expected_order_status)

    def test_mapping(self):
        self.check("approved", "paid")
        self.check("pending", "pending_payment")
        self.check("in_process", "pending_payment")
        self.check("rejected", "payment_failed")
        self.check("cancelled", "payment_failed")

    def test_unknown_status_keeps_order_status(self):
        self.check("authorized", "new")

    def test_orders_in_the_kitchen_are_not_dragged_back(self):
        for status in ("preparing", "delivered", "cancelled"):
            order = OrderModel(status=status)
            apply_payment(order, {"id": 7, "status": "approved"})
            self.assertEqual(order.status, status)
            self.assertEqual(order.payment_status, "approved")

    def test_approval_date_is_stored_in_utc(self):
        order = OrderModel(status="pending_payment")
        apply_payment(order, {"id": 1, "status": "approved", "date_approved": "2025-03-01T15:30:00.000-03:00"})
        self.assertEqual(order.payment_approved_at, datetime(2025, 3, 1, 18, 30, tzinfo=timezone.utc))


class WebhookSignatureTests(unittest.TestCase):
    def sign(self, secret, manifest):
        return hmac.new(secret.encode(), manifest.encode(), hashlib.sha256).hexdigest()

    def test_valid_signature(self):
        digest = self.sign("s3cret", "id:123;request-id:req-1;ts:1700000000;")
        header = f"ts=1700000000,v1={digest}"
        self.assertTrue(verify_webhook_signature("s3cret", header, "req-1", "123"))

    def test_tampered_or_missing_signature(self):
        digest = self.sign("s3cret", "id:123;request-id:req-1;ts:1700000000;")
        self.assertFalse(verify_webhook_signature("s3cret", f"ts=1700000000,v1={digest}", "req-1", "999"))
        self.assertFalse(verify_webhook_signature("s3cret", None, "req-1", "123"))
        self.assertFalse(verify_webhook_signature("s3cret", "garbage", "req-1", "123"))


class MercadoPagoClientTests(unittest.TestCase):
    def response(self, status, body):
        resp = mock.Mock(status_code=status, ok=200 <= status < 300, reason="x", text="")
        resp.json.return_value = body
        return resp

    def test_missing_token_is_refused_before_any_call(self):
        with mock.patch("acaishop.services.mercado_pago_client.requests.get") as get:
            with self.assertRaises(PaymentGatewayError) as ctx:
                MercadoPagoClient(access_token="").get_payment(1)
        self.assertEqual(ctx.exception.status, 400)
        get.assert_not_called()

    def test_create_payment_sends_idempotency_key(self):
        with mock.patch(
            "acaishop.services.mercado_pago_client.requests.post",
            return_value=self.response(201, {"id": 1, "status": "pending"}),
        ) as post:
            result = MercadoPagoClient(access_token="tok").create_payment({"external_reference": "1"})
        self.assertEqual(result["status"], "pending")
        headers = post.call_args.kwargs["headers"]
        self.assertEqual(headers["Authorization"], "Bearer tok")
        self.assertIn("X-Idempotency-Key", headers)

    def test_vendor_error_keeps_status(self):
        with mock.patch(
            "acaishop.services.mercado_pago_client.requests.get",
            return_value=self.response(404, {"message": "Payment not found"}),
        ):
            with self.assertRaises(PaymentGatewayError) as ctx:
                MercadoPagoClient(access_token="tok").get_payment(1)
        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(ctx.exception.message, "Payment not found")

    def test_transport_failures_are_retried_then_reported_as_502(self):
        with mock.patch(
            "acaishop.services.mercado_pago_client.requests.get",
            side_effect=requests.ConnectionError("down"),
        ) as get:
            with self.assertRaises(PaymentGatewayError) as ctx:
                MercadoPagoClient(access_token="tok").get_payment(1)
        self.assertEqual(ctx.exception.status, 502)
        self.assertEqual(get.call_count, 3)


class PaymentApiTests(ApiTestCase):
    def create_pix(self, order_id):
        resp = self.client.post(self.url("/payments/pix"), json={"order_id": order_id, "payer": PAYER})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def order(self, order_id):
        return self.client.get(self.url(f"/admin/orders/{order_id}"), headers=ADMIN).json()

    def test_pix_payment_marks_order_pending(self):
        order = self.place_order()
        pix = self.create_pix(order["id"])
        self.assertEqual(pix["status"], "pending")
        self.assertEqual(pix["qr_code"], "00020126-fake-pix")

        body = self.gateway.created[0]
        self.assertEqual(body["payment_method_id"], "pix")
        self.assertEqual(body["external_reference"], str(order["id"]))
        self.assertEqual(body["transaction_amount"], float(order["total"]))
        self.assertEqual(body["notification_url"], "https://loja.example.com/webhooks/mercado-pago")

        saved = self.order(order["id"])
        self.assertEqual(saved["status"], "pending_payment")
        self.assertEqual(saved["payment_status"], "pending")
        self.assertEqual(saved["payment_id"], pix["id"])

    def test_card_payment_approved(self):
        order = self.place_order(payment_method="card")
        resp = self.client.post(
            self.url("/payments/card"),
            json={
                "order_id": order["id"],
                "token": "approve-me",
                "payment_method_id": "visa",
                "installments": 2,
                "payer": PAYER,
            },
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["order_status"], "paid")
        self.assertEqual(self.gateway.created[0]["installments"], 2)

        again = self.client.post(self.url("/payments/pix"), json={"order_id": order["id"], "payer": PAYER})
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["detail"], "Pedido já pago")

    def test_cancelled_order_cannot_be_paid(self):
        order = self.place_order()
        self.client.patch(self.url(f"/admin/orders/{order['id']}/status"), json={"status": "cancelled"}, headers=ADMIN)
        resp = self.client.post(self.url("/payments/pix"), json={"order_id": order["id"], "payer": PAYER})
        self.assertEqual(resp.status_code, 400)

    def test_unknown_order_is_404(self):
        resp = self.client.post(self.url("/payments/pix"), json={"order_id": 999, "payer": PAYER})
        self.assertEqual(resp.status_code, 404)

    def test_invalid_payer_email_is_422(self):
        order = self.place_order()
        resp = self.client.post(
            self.url("/payments/pix"), json={"order_id": order["id"], "payer": {"email": "nope"}}
        )
        self.assertEqual(resp.status_code, 422)

    def test_gateway_error_is_forwarded(self):
        order = self.place_order()
        self.gateway.create_payment = mock.Mock(side_effect=PaymentGatewayError(401, "invalid token", {"x": 1}))
        resp = self.client.post(self.url("/payments/pix"), json={"order_id": order["id"], "payer": PAYER})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "invalid token")

    def test_preference_lists_items_and_delivery(self):
        self.add_to_cart("p1", additionals=("Banana",))
        order = self.place_order("p1")
        resp = self.client.post(self.url("/payments/preference"), json={"order_id": order["id"]})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["init_point"], "https://mp.example/init")

        body = self.gateway.preferences[0]
        titles = [i["title"] for i in body["items"]]
        self.assertIn("Açaí Tradicional (500ml)", titles)
        self.assertEqual(body["auto_return"], "approved")
        self.assertEqual(body["payment_methods"]["installments"], 12)
        total = sum(i["unit_price"] * i["quantity"] for i in body["items"])
        self.assertAlmostEqual(total, float(order["total"]), places=2)

    def test_manual_check_updates_order(self):
        order = self.place_order()
        pix = self.create_pix(order["id"])
        self.gateway.approve(pix["id"])

        resp = self.client.post(self.url("/payments/check"), json={"order_id": order["id"]})
        self.assertEqual(resp.status_code, 200, resp.text)
        result = resp.json()
        self.assertTrue(result["updated"])
        self.assertEqual((result["old_status"], result["new_status"]), ("pending", "approved"))
        self.assertEqual(result["order_status"], "paid")

        again = self.client.post(self.url("/payments/check"), json={"payment_id": pix["id"]}).json()
        self.assertFalse(again["updated"])

    def test_check_needs_a_reference(self):
        self.assertEqual(self.client.post(self.url("/payments/check"), json={}).status_code, 400)
        order = self.place_order()
        resp = self.client.post(self.url("/payments/check"), json={"order_id": order["id"]})
        self.assertEqual(resp.status_code, 400)


class WebhookApiTests(ApiTestCase):
    def test_alive(self):
        self.assertEqual(self.client.get("/webhooks/mercado-pago").json(), {"message": "Webhook endpoint ativo"})

    def test_payment_webhook_reconciles_order(self):
        order = self.place_order()
        pix = self.client.post(self.url("/payments/pix"), json={"order_id": order["id"], "payer": PAYER}).json()
        self.gateway.approve(pix["id"])

        resp = self.client.post("/webhooks/mercado-pago", json={"type": "payment", "data": {"id": pix["id"]}})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["status"], "approved")

        saved = self.client.get(self.url(f"/admin/orders/{order['id']}"), headers=ADMIN).json()
        self.assertEqual(saved["status"], "paid")
        self.assertIsNotNone(saved["payment_approved_at"])

    def test_redelivered_webhook_keeps_kitchen_status(self):
        order = self.place_order()
        pix = self.client.post(self.url("/payments/pix"), json={"order_id": order["id"], "payer": PAYER}).json()
        self.gateway.approve(pix["id"])
        notification = {"type": "payment", "data": {"id": pix["id"]}}

        self.assertTrue(self.client.post("/webhooks/mercado-pago", json=notification).json()["updated"])
        resp = self.client.patch(
            self.url(f"/admin/orders/{order['id']}/status"), json={"status": "preparing"}, headers=ADMIN
        )
        self.assertEqual(resp.status_code, 200, resp.text)

        again = self.client.post("/webhooks/mercado-pago", json=notification)
        self.assertEqual(again.status_code, 200, again.text)
        self.assertFalse(again.json()["updated"])
        self.assertEqual(again.json()["status"], "approved")

        saved = self.client.get(self.url(f"/admin/orders/{order['id']}"), headers=ADMIN).json()
        self.assertEqual(saved["status"], "preparing")
        self.assertEqual(saved["payment_status"], "approved")

    def test_other_topics_are_acknowledged(self):
        resp = self.client.post("/webhooks/mercado-pago", json={"type": "merchant_order", "data": {"id": "1"}})
        self.assertEqual(resp.json(), {"received": True})
        self.assertEqual(self.client.post("/webhooks/mercado-pago").json(), {"received": True})

    def test_bad_signature_is_rejected_when_secret_is_set(self):
        with mock.patch("acaishop.services.payment_service.MERCADO_PAGO_WEBHOOK_SECRET", "s3cret"):
            resp = self.client.post(
                "/webhooks/mercado-pago",
                json={"type": "payment", "data": {"id": "1"}},
                headers={"x-signature": "ts=1,v1=deadbeef", "x-request-id": "r"},
            )
        self.assertEqual(resp.status_code, 401)


class ReconcilerTests(ApiTestCase):
    """Background poll of orders still waiting on a payment."""

    def pending_order(self, session):
        order = self.place_order(session)
        pix = self.client.post(self.url("/payments/pix"), json={"order_id": order["id"], "payer": PAYER}).json()
        return order, pix

    def test_updates_changed_payments_only(self):
        paid, paid_pix = self.pending_order("r1")
        waiting, _ = self.pending_order("r2")
        self.gateway.approve(paid_pix["id"])

        result = PaymentReconciler(self.db, self.gateway).run()
        self.assertEqual(result["checked"], 2)
        self.assertEqual(result["updated"], 1)
        by_order = {r["order_id"]: r for r in result["results"]}
        self.assertEqual(by_order[paid["id"]]["new_status"], "approved")
        self.assertEqual(by_order[waiting["id"]]["reason"], "Status inalterado")

    def test_one_failure_does_not_stop_the_batch(self):
        broken, broken_pix = self.pending_order("r1")
        ok, ok_pix = self.pending_order("r2")
        self.gateway.fail_lookup.add(broken_pix["id"])
        self.gateway.approve(ok_pix["id"])

        result = PaymentReconciler(self.db, self.gateway).run()
        by_order = {r["order_id"]: r for r in result["results"]}
        self.assertIn("error", by_order[broken["id"]])
        self.assertTrue(by_order[ok["id"]]["updated"])

    def test_orders_outside_the_window_are_ignored(self):
        self.pending_order("r1")
        later = datetime.now(timezone.utc) + timedelta(hours=2)
        result = PaymentReconciler(self.db, self.gateway, window_minutes=30).run(now=later)
        self.assertEqual(result["checked"], 0)

    def test_overlapping_runs_are_skipped(self):
        self.assertTrue(PaymentReconciler._running.acquire(blocking=False))
        try:
            self.assertEqual(PaymentReconciler(self.db, self.gateway).run(), {"skipped": True})
        finally:
            PaymentReconciler._running.release()

    def test_admin_auto_check_is_scoped_to_store(self):
        _, pix = self.pending_order("r1")
        self.gateway.approve(pix["id"])
        resp = self.client.post(self.url("/payments/auto-check"), headers=ADMIN)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["updated"], 1)

        self.client.post("/stores/", json={"slug": "filial", "name": "Filial"}, headers=ADMIN)
        resp = self.client.post("/stores/filial/payments/auto-check", headers=ADMIN)
        self.assertEqual(resp.json()["checked"], 0)
