import os
import sys
import tempfile
import time
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api import cache  # noqa: E402
from utils import config  # noqa: E402


class CacheTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point the cache to a temporary file (in a folder that does not exist yet)
        self.temp_dir = tempfile.TemporaryDirectory()
        self._old_path = config.CACHE_PATH
        config.CACHE_PATH = os.path.join(self.temp_dir.name, "nested", "cache.sqlite")
        cache.reset()

    async def asyncSetUp(self):
        # Touch initialization by opening a connection
        async with cache.connect() as conn:
            cur = await conn.execute("SELECT name FROM sqlite_master WHERE type='table';")
            self.tables = {row[0] for row in await cur.fetchall()}
            await cur.close()

    def tearDown(self):
        config.CACHE_PATH = self._old_path
        cache.reset()
        self.temp_dir.cleanup()

    async def test_schema_created(self):
        self.assertTrue(os.path.exists(config.CACHE_PATH))
        self.assertTrue({"payload_cache", "session"} <= self.tables)

    # ---------- payloads ----------

    async def test_missing_payload_is_none(self):
        self.assertIsNone(await cache.load_payload("nothing"))

    async def test_store_and_overwrite_payload(self):
        await cache.store_payload("x", [1, 2])
        await cache.store_payload("x", {"a": "b"})
        self.assertEqual(await cache.load_payload("x"), {"a": "b"})

    async def test_products_expire_after_max_age(self):
        stored = time.time()
        await cache.store_products([{"id": 1}], when=stored)

        fresh = stored + config.PRODUCTS_CACHE_MAX_AGE - 1
        self.assertEqual(await cache.load_products(now=fresh), [{"id": 1}])

        stale = stored + config.PRODUCTS_CACHE_MAX_AGE + 1
        self.assertIsNone(await cache.load_products(now=stale))

    # ---------- token ----------

    async def test_token_roundtrip_and_clear(self):
        self.assertIsNone(await cache.load_token())
        await cache.save_token("first")
        await cache.save_token("second")
        self.assertEqual(await cache.load_token(), "second")
        await cache.clear_token()
        self.assertIsNone(await cache.load_token())


if __name__ == "__main__":
    unittest.main()
