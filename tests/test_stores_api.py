# tests/test_stores_api.py
from acaishop.utils.settings import DEFAULT_STORE_SLUG

from tests.support import ADMIN, ApiTestCase


class StoreApiTests(ApiTestCase):
    """Tenants, their config and open/closed status."""

    def test_health_reports_persistence_mode(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["persistence_mode"], "database")

    def test_default_store_is_seeded(self):
        resp = self.client.get(f"/stores/{DEFAULT_STORE_SLUG}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["slug"], DEFAULT_STORE_SLUG)

    def test_unknown_store_is_404(self):
        self.assertEqual(self.client.get("/stores/nao-existe").status_code, 404)
        self.assertEqual(self.client.get("/stores/nao-existe/products").status_code, 404)

    def test_create_store_requires_admin_key(self):
        payload = {"slug": "acai-do-centro", "name": "Açaí do Centro"}
        self.assertEqual(self.client.post("/stores/", json=payload).status_code, 403)
        self.assertEqual(
            self.client.post("/stores/", json=payload, headers={"X-Admin-Key": "wrong"}).status_code, 403
        )

        resp = self.client.post("/stores/", json=payload, headers=ADMIN)
        self.assertEqual(resp.status_code, 201, resp.text)
        config = self.client.get("/stores/acai-do-centro/config").json()
        self.assertEqual(config["name"], "Açaí do Centro")
        self.assertEqual(config["next_order_number"], 1)

        again = self.client.post("/stores/", json=payload, headers=ADMIN)
        self.assertEqual(again.status_code, 400)

    def test_new_store_starts_with_empty_catalog(self):
        self.client.post("/stores/", json={"slug": "outra", "name": "Outra"}, headers=ADMIN)
        self.assertEqual(self.client.get("/stores/outra/products").json(), [])
        self.assertTrue(len(self.client.get(self.url("/products")).json()) > 0)

    def test_save_config_round_trips(self):
        config = self.client.get(self.url("/config")).json()
        config.update(
            delivery_fee="7.50",
            pix_key="loja@example.com",
            special_dates=[{"date": "2025-12-25", "open": False, "hours": None, "description": "Natal"}],
        )
        for key in ("store_id", "next_order_number", "last_updated"):
            config.pop(key)

        resp = self.client.put(self.url("/config"), json=config, headers=ADMIN)
        self.assertEqual(resp.status_code, 200, resp.text)
        saved = self.client.get(self.url("/config")).json()
        self.assertEqual(saved["delivery_fee"], "7.50")
        self.assertEqual(saved["pix_key"], "loja@example.com")
        self.assertEqual(saved["special_dates"][0]["description"], "Natal")

    def test_config_rejects_unknown_day(self):
        config = self.client.get(self.url("/config")).json()
        config["operating_hours"]["funday"] = {"open": True, "hours": "10:00 - 12:00"}
        resp = self.client.put(self.url("/config"), json=config, headers=ADMIN)
        self.assertEqual(resp.status_code, 422)

    def test_config_rejects_malformed_special_date(self):
        config = self.client.get(self.url("/config")).json()
        for key in ("store_id", "next_order_number", "last_updated"):
            config.pop(key)

        config["special_dates"] = [{"date": "2025-12-24", "open": True, "hours": "10h-18h"}]
        self.assertEqual(self.client.put(self.url("/config"), json=config, headers=ADMIN).status_code, 422)

        config["special_dates"] = [{"date": "2025-12-24", "open": True}]
        self.assertEqual(self.client.put(self.url("/config"), json=config, headers=ADMIN).status_code, 422)

        # nothing was saved, so status still answers
        self.assertEqual(self.client.get(self.url("/status")).status_code, 200)

        config["special_dates"] = [{"date": "2025-12-24", "open": True, "hours": "10:00 - 18:00"}]
        self.assertEqual(self.client.put(self.url("/config"), json=config, headers=ADMIN).status_code, 200)

    def test_status_and_hours(self):
        status = self.client.get(self.url("/status")).json()
        self.assertTrue(status["is_open"])
        self.assertEqual(status["status_text"], "Aberto agora")
        self.assertEqual(status["hours_summary"], "Todos os dias: 00:00 - 24:00")

        hours = self.client.get(self.url("/hours")).json()
        self.assertIn("Segunda-feira: 00:00 - 24:00", hours["detailed"])

    def test_manual_close_shows_on_status(self):
        self.store.config.is_open = False
        self.db.commit()
        status = self.client.get(self.url("/status")).json()
        self.assertFalse(status["is_open"])
        self.assertEqual(status["message"], "Loja temporariamente fechada")
