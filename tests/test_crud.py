import json
import os
import sys
import tempfile
import unittest
from contextlib import asynccontextmanager

import httpx

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api import cache, client, crud  # noqa: E402
from api.client import ApiError  # noqa: E402
from store.cart import Cart, ProductSnapshot  # noqa: E402
from utils import config  # noqa: E402

PRODUCT_JSON = {
    "id": 7,
    "nama": "Kemeja Linen",
    "deskripsi": "Kemeja linen lengan panjang",
    "harga": 175000,
    "jumlah": 4,
    "gambar": None,
    "ukuran": "L",
    "warna": "Putih",
    "kategoriId": 2,
    "kategori": {"id": 2, "nama": "Atasan"},
}

ORDER_JSON = {
    "id": "ORD-1",
    "namaDepan": "Ana",
    "namaBelakang": "Putri",
    "email": "ana@example.com",
    "totalHarga": 375000,
    "statusPembayaran": "paid",
    "itemPesanan": [
        {"id": 1, "produkId": 7, "jumlah": 2, "harga": 175000, "produk": {"nama": "Kemeja Linen"}}
    ],
}


class ApiTestCase(unittest.IsolatedAsyncioTestCase):
    """
    Routes requests to self.handler through httpx.MockTransport and points the
    cache at a temporary file.
    """

    def setUp(self):
        self.requests = []
        self.routes = {}

        self.temp_dir = tempfile.TemporaryDirectory()
        self._old_cache_path = config.CACHE_PATH
        config.CACHE_PATH = os.path.join(self.temp_dir.name, "cache.sqlite")
        cache.reset()

        self._old_connect = client.connect

        @asynccontextmanager
        async def fake_connect():
            transport = httpx.MockTransport(self.handler)
            async with httpx.AsyncClient(
                transport=transport, base_url="http://test", headers=client._headers()
            ) as c:
                yield c

        client.connect = fake_connect

    def tearDown(self):
        client.connect = self._old_connect
        client.set_token(None)
        config.CACHE_PATH = self._old_cache_path
        cache.reset()
        self.temp_dir.cleanup()

    def route(self, method, path, status=200, body=None):
        self.routes[(method, path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"pesan": "Not found"})
        status, body = self.routes[key]
        if isinstance(body, Exception):
            raise body
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def last_json(self):
        return json.loads(self.requests[-1].content)


class ClientTestCase(ApiTestCase):
    # ---------- envelopes & errors ----------

    async def test_bare_and_enveloped_lists_are_accepted(self):
        self.route("GET", "/kategori", body=[{"id": 1, "nama": "Atasan"}])
        self.assertEqual([c.name for c in await crud.list_categories()], ["Atasan"])

        self.route(
            "GET",
            "/kategori",
            body={"status": True, "pesan": "ok", "data": [{"id": 1, "nama": "Bawahan"}]},
        )
        self.assertEqual([c.name for c in await crud.list_categories()], ["Bawahan"])

    async def test_envelope_with_false_status_raises(self):
        self.route("POST", "/kategori", body={"status": False, "pesan": "Nama sudah ada"})
        with self.assertRaises(ApiError) as ctx:
            await crud.create_category("Atasan")
        self.assertEqual(ctx.exception.message, "Nama sudah ada")

    async def test_http_error_message_taken_from_body(self):
        self.route("DELETE", "/kategori/3", status=409, body={"message": "Category in use"})
        with self.assertRaises(ApiError) as ctx:
            await crud.delete_category("3")
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(str(ctx.exception), "Category in use")
        self.assertFalse(ctx.exception.unreachable)

    async def test_transport_failure_is_unreachable(self):
        self.route("GET", "/pesanan", body=httpx.ConnectError("refused"))
        with self.assertRaises(ApiError) as ctx:
            await crud.list_orders()
        self.assertTrue(ctx.exception.unreachable)

    async def test_bearer_token_is_sent_when_set(self):
        self.route("GET", "/pengguna", body=[])
        await crud.list_users()
        self.assertNotIn("authorization", self.requests[-1].headers)

        client.set_token("abc")
        await crud.list_users()
        self.assertEqual(self.requests[-1].headers["authorization"], "Bearer abc")

    # ---------- auth ----------

    async def test_login_returns_token(self):
        self.route("POST", "/login", body={"token": "t0k"})
        self.assertEqual(await crud.login("ana@example.com", "secret"), "t0k")
        self.assertEqual(self.last_json(), {"email": "ana@example.com", "sandi": "secret"})

    async def test_login_wrong_password(self):
        self.route("POST", "/login", status=401, body={"pesan": "Unauthorized"})
        with self.assertRaises(ApiError) as ctx:
            await crud.login("ana@example.com", "nope")
        self.assertEqual(ctx.exception.message, "Wrong email or password.")

    async def test_login_without_token_in_answer(self):
        self.route("POST", "/login", body={"status": True, "pesan": "ok", "data": {}})
        with self.assertRaises(ApiError):
            await crud.login("ana@example.com", "secret")

    async def test_register_sends_api_field_names(self):
        self.route("POST", "/pengguna", status=201, body={"id": 9})
        await crud.register("Ana", "ana@example.com", "secret1")
        self.assertEqual(
            self.last_json(), {"nama": "Ana", "email": "ana@example.com", "sandi": "secret1"}
        )


class ProductsTestCase(ApiTestCase):
    async def test_list_products_maps_fields(self):
        self.route("GET", "/produk", body=[PRODUCT_JSON])
        [prod] = await crud.list_products()
        self.assertEqual(prod.id, "7")
        self.assertEqual(prod.name, "Kemeja Linen")
        self.assertEqual(prod.price, 175000)
        self.assertEqual(prod.stock, 4)
        self.assertEqual(prod.category_id, "2")
        self.assertEqual(prod.category_name, "Atasan")
        self.assertTrue(prod.low_stock)

    async def test_snapshot_uses_placeholder_without_image(self):
        self.route("GET", "/produk", body=[PRODUCT_JSON])
        [prod] = await crud.list_products()
        snap = prod.to_snapshot()
        self.assertEqual(snap.image, "/placeholder.svg")
        self.assertEqual(snap.category, "Atasan")

    async def test_list_products_falls_back_to_cache_when_offline(self):
        self.route("GET", "/produk", body=[PRODUCT_JSON])
        await crud.list_products()

        self.route("GET", "/produk", body=httpx.ConnectError("offline"))
        [prod] = await crud.list_products()
        self.assertEqual(prod.name, "Kemeja Linen")

    async def test_list_products_offline_without_cache_raises(self):
        self.route("GET", "/produk", body=httpx.ConnectError("offline"))
        with self.assertRaises(ApiError):
            await crud.list_products()

    async def test_server_errors_are_not_masked_by_cache(self):
        self.route("GET", "/produk", body=[PRODUCT_JSON])
        await crud.list_products()

        self.route("GET", "/produk", status=500, body={"pesan": "boom"})
        with self.assertRaises(ApiError) as ctx:
            await crud.list_products()
        self.assertEqual(ctx.exception.status_code, 500)

    async def test_unwritable_cache_does_not_fail_a_good_fetch(self):
        blocker = os.path.join(self.temp_dir.name, "not-a-folder")
        with open(blocker, "w") as f:
            f.write("x")
        config.CACHE_PATH = os.path.join(blocker, "cache.sqlite")
        cache.reset()

        self.route("GET", "/produk", body=[PRODUCT_JSON])
        [prod] = await crud.list_products()
        self.assertEqual(prod.name, "Kemeja Linen")

        # offline with a broken cache reports the network error
        self.route("GET", "/produk", body=httpx.ConnectError("offline"))
        with self.assertRaises(ApiError) as ctx:
            await crud.list_products()
        self.assertTrue(ctx.exception.unreachable)

    async def test_get_product_missing_is_none(self):
        self.assertIsNone(await crud.get_product("404"))

        self.route("GET", "/produk/7", body={"status": True, "data": PRODUCT_JSON})
        self.assertEqual((await crud.get_product("7")).name, "Kemeja Linen")

    async def test_create_and_update_product_payload(self):
        data = crud.product_payload("Topi", "2", "Topi rajut hangat", 50000, 3)
        self.route("POST", "/produk", status=201, body=dict(PRODUCT_JSON, nama="Topi"))
        created = await crud.create_product(data)
        self.assertEqual(created.name, "Topi")
        self.assertEqual(self.last_json()["kategoriId"], "2")
        self.assertEqual(self.last_json()["harga"], 50000)

        self.route("PATCH", "/produk/7", status=204)
        self.assertIsNone(await crud.update_product("7", data))
        self.assertEqual(self.requests[-1].method, "PATCH")

    async def test_delete_product(self):
        self.route("DELETE", "/produk/7", status=204)
        await crud.delete_product("7")
        self.assertEqual(self.requests[-1].url.path, "/produk/7")


class UsersTestCase(ApiTestCase):
    def test_user_payload_omits_blank_password(self):
        self.assertNotIn("sandi", crud.user_payload("Ana", "a@b.id", "ADMIN"))
        self.assertEqual(crud.user_payload("Ana", "a@b.id", "ADMIN", "pw1234")["sandi"], "pw1234")

    async def test_list_users(self):
        self.route(
            "GET",
            "/pengguna",
            body=[{"id": 1, "nama": "Ana", "email": "ana@example.com", "peran": "ADMIN"}],
        )
        [user] = await crud.list_users()
        self.assertEqual((user.name, user.role), ("Ana", "ADMIN"))

    async def test_update_user(self):
        self.route("PATCH", "/pengguna/1", body={"status": True, "pesan": "ok"})
        await crud.update_user("1", crud.user_payload("Ana", "ana@example.com", "PENGGUNA"))
        self.assertEqual(self.last_json()["peran"], "PENGGUNA")


class OrdersTestCase(ApiTestCase):
    FORM = {
        "first_name": "Ana",
        "last_name": "Putri",
        "email": "ana@example.com",
        "phone": "081234567890",
        "address": "Jl. Merdeka No. 10",
        "city": "Bandung",
        "province": "Jawa Barat",
        "postal_code": "40111",
    }

    def cart(self):
        cart = Cart()
        cart.add_many(ProductSnapshot(id="7", name="Kemeja Linen", price=175000), 2)
        cart.add(ProductSnapshot(id="9", name="Topi", price=25000))
        return cart

    def test_order_payload(self):
        payload = crud.order_payload(self.FORM, self.cart().lines)
        self.assertEqual(payload["namaDepan"], "Ana")
        self.assertEqual(payload["kodePos"], "40111")
        self.assertEqual(payload["catatan"], "")
        self.assertEqual(
            payload["items"], [{"id": "7", "jumlah": 2}, {"id": "9", "jumlah": 1}]
        )

    async def test_create_order_returns_receipt_and_keeps_cart(self):
        cart = self.cart()
        self.route(
            "POST",
            "/pesanan",
            status=201,
            body={"idPesanan": "ORD-1", "token": "snap-123", "redirectUrl": None},
        )
        receipt = await crud.create_order(self.FORM, cart.lines)
        self.assertEqual((receipt.order_id, receipt.token), ("ORD-1", "snap-123"))
        self.assertEqual(cart.state.item_count, 3)

    async def test_create_order_without_token_raises(self):
        self.route("POST", "/pesanan", status=201, body={"idPesanan": "ORD-1"})
        with self.assertRaises(ApiError):
            await crud.create_order(self.FORM, self.cart().lines)

    async def test_get_order_looks_up_list(self):
        self.route("GET", "/pesanan", body=[ORDER_JSON])
        order = await crud.get_order("ORD-1")
        self.assertEqual(order.payment_status, "PAID")
        self.assertEqual(order.full_name, "Ana Putri")
        self.assertEqual(order.items[0].subtotal, 350000)
        self.assertIsNone(await crud.get_order("ORD-2"))

    async def test_dashboard_counts(self):
        self.route("GET", "/produk", body=[PRODUCT_JSON, PRODUCT_JSON])
        self.route("GET", "/kategori", body=[{"id": 1, "nama": "Atasan"}])
        self.route("GET", "/pengguna", body={"status": True, "data": []})
        self.route("GET", "/pesanan", body=[ORDER_JSON])
        counts = await crud.dashboard_counts()
        self.assertEqual(
            (counts.products, counts.categories, counts.users, counts.orders), (2, 1, 0, 1)
        )


if __name__ == "__main__":
    unittest.main()
