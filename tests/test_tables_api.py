# tests/test_tables_api.py
from decimal import Decimal

from tests.support import ADMIN, ApiTestCase

SESSION = {"X-Cart-Session": "mesa-1"}


class TableAdminTests(ApiTestCase):
    """Dine-in tables: CRUD, QR codes and stats."""

    def create(self, number, **extra):
        resp = self.client.post(self.url("/admin/tables"), json={"number": number, **extra}, headers=ADMIN)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def test_admin_routes_need_the_key(self):
        self.assertEqual(self.client.get(self.url("/admin/tables")).status_code, 403)

    def test_create_names_the_table_and_builds_its_link(self):
        table = self.create(3)
        self.assertEqual(table["name"], "Mesa 3")
        self.assertTrue(table["active"])
        self.assertTrue(table["qr_code"].startswith("mesa-3-"))
        self.assertEqual(table["url"], f"https://loja.example.com/{self.slug}/mesa/3")

    def test_numbers_are_unique_per_store(self):
        self.create(1)
        dup = self.client.post(self.url("/admin/tables"), json={"number": 1}, headers=ADMIN)
        self.assertEqual(dup.status_code, 400)

        self.client.post("/stores/", json={"slug": "filial", "name": "Filial"}, headers=ADMIN)
        other = self.client.post("/stores/filial/admin/tables", json={"number": 1}, headers=ADMIN)
        self.assertEqual(other.status_code, 201, other.text)

    def test_list_is_ordered_by_number(self):
        self.create(5)
        self.create(2, name="Varanda")
        self.create(9, active=False)
        tables = self.client.get(self.url("/admin/tables"), headers=ADMIN).json()
        self.assertEqual([t["number"] for t in tables], [2, 5, 9])
        self.assertEqual(tables[0]["name"], "Varanda")

        active = self.client.get(self.url("/admin/tables"), params={"active": True}, headers=ADMIN).json()
        self.assertEqual([t["number"] for t in active], [2, 5])

    def test_update_and_renumber(self):
        table = self.create(4)
        self.create(7)
        resp = self.client.put(
            self.url(f"/admin/tables/{table['id']}"), json={"name": "Mesa do Canto", "active": False}, headers=ADMIN
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["name"], "Mesa do Canto")
        self.assertFalse(resp.json()["active"])
        self.assertEqual(resp.json()["number"], 4)

        taken = self.client.put(self.url(f"/admin/tables/{table['id']}"), json={"number": 7}, headers=ADMIN)
        self.assertEqual(taken.status_code, 400)

        missing = self.client.put(self.url("/admin/tables/999"), json={"name": "X"}, headers=ADMIN)
        self.assertEqual(missing.status_code, 404)

    def test_regenerate_qr_code(self):
        table = self.create(6)
        resp = self.client.post(self.url(f"/admin/tables/{table['id']}/qr-code"), headers=ADMIN)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertNotEqual(resp.json()["qr_code"], table["qr_code"])
        self.assertTrue(resp.json()["qr_code"].startswith("mesa-6-"))

    def test_storefront_only_finds_active_tables(self):
        self.create(1)
        self.create(2, active=False)
        self.assertEqual(self.client.get(self.url("/tables/1")).json()["name"], "Mesa 1")
        self.assertEqual(self.client.get(self.url("/tables/2")).status_code, 404)
        self.assertEqual(self.client.get(self.url("/tables/42")).status_code, 404)

    def test_delete_refused_while_orders_point_to_the_table(self):
        used = self.create(1)
        spare = self.create(2)
        self.add_to_cart("mesa-1")
        order = self.client.post(
            self.url("/orders"),
            json={"customer_name": "Ana", "customer_phone": "11988887777", "table_number": 1, "payment_method": "money"},
            headers=SESSION,
        )
        self.assertEqual(order.status_code, 201, order.text)

        resp = self.client.delete(self.url(f"/admin/tables/{used['id']}"), headers=ADMIN)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Não é possível excluir mesa com pedidos associados")
        self.assertEqual(self.client.delete(self.url(f"/admin/tables/{spare['id']}"), headers=ADMIN).status_code, 204)

        stats = self.client.get(self.url("/admin/tables/stats"), headers=ADMIN).json()
        self.assertEqual(stats, {"total": 1, "active": 1, "inactive": 0, "with_orders": 1})

    def test_stats(self):
        self.create(1)
        self.create(2, active=False)
        stats = self.client.get(self.url("/admin/tables/stats"), headers=ADMIN).json()
        self.assertEqual(stats, {"total": 2, "active": 1, "inactive": 1, "with_orders": 0})


class TableCheckoutTests(ApiTestCase):
    """Orders placed from a table: no address, no delivery fee, table prices."""

    def setUp(self):
        super().setUp()
        self.client.post(self.url("/admin/tables"), json={"number": 8}, headers=ADMIN)

    def set_table_price(self, name, size, price):
        product_id = self.product_id(name)
        product = self.client.get(self.url(f"/admin/products/{product_id}"), headers=ADMIN).json()
        for key in ("id", "category_name", "min_price", "price_label"):
            product.pop(key)
        product["table_sizes"] = [{"size": size, "price": price}]
        resp = self.client.put(self.url(f"/admin/products/{product_id}"), json=product, headers=ADMIN)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def checkout(self, **fields):
        body = {"customer_name": "Ana", "customer_phone": "11988887777", "payment_method": "money"}
        body.update(fields)
        return self.client.post(self.url("/orders"), json=body, headers=SESSION)

    def test_table_order_has_no_delivery_fee(self):
        self.add_to_cart("mesa-1")
        resp = self.checkout(table_number=8)
        self.assertEqual(resp.status_code, 201, resp.text)
        order = resp.json()
        self.assertEqual(order["order_type"], "table")
        self.assertEqual(order["table_number"], 8)
        self.assertEqual(order["address"], {})
        self.assertEqual(Decimal(order["delivery_fee"]), Decimal("0.00"))
        self.assertEqual(Decimal(order["total"]), Decimal("16.90"))

    def test_table_prices_replace_regular_prices(self):
        saved = self.set_table_price("Açaí Tradicional", "500ml", "14.50")
        self.assertEqual(Decimal(saved["table_sizes"][0]["price"]), Decimal("14.50"))

        self.add_to_cart("mesa-1", quantity=2, additionals=("Banana",))
        self.add_to_cart("mesa-1", name="Açaí Especial")
        order = self.checkout(table_number=8).json()

        prices = {i["name"]: Decimal(i["price"]) for i in order["items"]}
        self.assertEqual(prices["Açaí Tradicional"], Decimal("14.50"))
        # no table price for this one
        self.assertEqual(prices["Açaí Especial"], Decimal("22.90"))
        self.assertEqual(Decimal(order["subtotal"]), Decimal("55.90"))

    def test_delivery_orders_keep_regular_prices(self):
        self.set_table_price("Açaí Tradicional", "500ml", "14.50")
        order = self.place_order("mesa-1")
        self.assertEqual(order["order_type"], "delivery")
        self.assertIsNone(order["table_number"])
        self.assertEqual(Decimal(order["subtotal"]), Decimal("16.90"))

    def test_table_price_needs_an_existing_size(self):
        product_id = self.product_id("Açaí Tradicional")
        product = self.client.get(self.url(f"/admin/products/{product_id}"), headers=ADMIN).json()
        for key in ("id", "category_name", "min_price", "price_label"):
            product.pop(key)
        product["table_sizes"] = [{"size": "5 Litros", "price": "90.00"}]
        resp = self.client.put(self.url(f"/admin/products/{product_id}"), json=product, headers=ADMIN)
        self.assertEqual(resp.status_code, 400)

    def test_unknown_or_inactive_table_is_refused(self):
        self.add_to_cart("mesa-1")
        self.assertEqual(self.checkout(table_number=99).status_code, 400)
        # cart is untouched
        cart = self.client.get(self.url("/cart"), headers=SESSION).json()
        self.assertEqual(cart["item_count"], 1)

    def test_address_or_table_is_required(self):
        self.add_to_cart("mesa-1")
        self.assertEqual(self.checkout().status_code, 422)

    def test_admin_can_list_table_orders_only(self):
        self.add_to_cart("mesa-1")
        table_order = self.checkout(table_number=8).json()
        self.place_order("delivery-1")

        rows = self.client.get(self.url("/admin/orders"), params={"order_type": "table"}, headers=ADMIN).json()
        self.assertEqual([o["id"] for o in rows], [table_order["id"]])
