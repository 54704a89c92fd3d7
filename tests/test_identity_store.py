"""
Tests for cart identity stores
"""
import json
from unittest.mock import AsyncMock

import pytest

from sidecart.cart.storage import CART_ID_KEY, FileIdentityStore, MemoryIdentityStore, RedisIdentityStore


class TestMemoryIdentityStore:

    @pytest.mark.asyncio
    async def test_set_get_clear(self):
        store = MemoryIdentityStore()

        assert await store.get() is None
        await store.set("gid://shopify/Cart/c1")
        assert await store.get() == "gid://shopify/Cart/c1"
        await store.clear()
        assert await store.get() is None

    @pytest.mark.asyncio
    async def test_empty_initial_value_means_no_cart(self):
        assert await MemoryIdentityStore("").get() is None


class TestFileIdentityStore:

    @pytest.mark.asyncio
    async def test_missing_file_means_no_cart(self, tmp_path):
        store = FileIdentityStore(tmp_path / "state.json")

        assert await store.get() is None

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "state.json"
        await FileIdentityStore(path).set("gid://shopify/Cart/c1")

        assert await FileIdentityStore(path).get() == "gid://shopify/Cart/c1"
        assert json.loads(path.read_text())[CART_ID_KEY] == "gid://shopify/Cart/c1"

    @pytest.mark.asyncio
    async def test_clear_keeps_other_keys(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"theme": "dark", CART_ID_KEY: "gid://shopify/Cart/c1"}))
        store = FileIdentityStore(path)

        await store.clear()

        assert await store.get() is None
        assert json.loads(path.read_text()) == {"theme": "dark"}

    @pytest.mark.asyncio
    async def test_corrupted_file_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        store = FileIdentityStore(path)

        assert await store.get() is None
        await store.set("gid://shopify/Cart/c2")
        assert await store.get() == "gid://shopify/Cart/c2"


class TestRedisIdentityStore:

    @pytest.fixture
    def redis(self):
        client = AsyncMock()
        client.get.return_value = None
        return client

    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self, redis):
        redis.get.return_value = b"gid://shopify/Cart/c1"
        store = RedisIdentityStore(redis, "visitor-1")

        assert await store.get() == "gid://shopify/Cart/c1"
        redis.get.assert_awaited_once_with("sidecart:cart:visitor-1")

    @pytest.mark.asyncio
    async def test_missing_key_means_no_cart(self, redis):
        assert await RedisIdentityStore(redis, "visitor-1").get() is None

    @pytest.mark.asyncio
    async def test_set_with_ttl(self, redis):
        store = RedisIdentityStore(redis, "visitor-1", ttl=3600)

        await store.set("gid://shopify/Cart/c1")

        redis.set.assert_awaited_once_with("sidecart:cart:visitor-1", "gid://shopify/Cart/c1", ex=3600)

    @pytest.mark.asyncio
    async def test_clear_deletes_key(self, redis):
        await RedisIdentityStore(redis, "visitor-1").clear()

        redis.delete.assert_awaited_once_with("sidecart:cart:visitor-1")

    def test_namespace_required(self, redis):
        with pytest.raises(ValueError):
            RedisIdentityStore(redis, "")
