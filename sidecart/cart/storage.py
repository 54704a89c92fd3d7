"""
Cart identity storage.

The identity store is the only component allowed to read, write or clear
the persisted cart identifier. Writers never coordinate: the last write wins,
which is fine because every write either stores the active cart id or
clears it.
"""
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from sidecart.logging import get_logger, sanitize_id_for_logging

logger = get_logger(__name__)

# Same key the browser widget uses in localStorage
CART_ID_KEY = "shopifyCartId"


class CartIdentityStore(ABC):
    """Persisted pointer to the current remote cart."""

    @abstractmethod
    async def get(self) -> Optional[str]:
        """Return the stored cart identifier, or None when there is no cart."""

    @abstractmethod
    async def set(self, identifier: str) -> None:
        """Persist the cart identifier."""

    @abstractmethod
    async def clear(self) -> None:
        """Forget the cart identifier."""


class MemoryIdentityStore(CartIdentityStore):
    """Process-local store."""

    def __init__(self, identifier: Optional[str] = None):
        self._identifier = identifier or None

    async def get(self) -> Optional[str]:
        return self._identifier

    async def set(self, identifier: str) -> None:
        self._identifier = identifier

    async def clear(self) -> None:
        self._identifier = None


class FileIdentityStore(CartIdentityStore):
    """
    Store backed by a small JSON file, the command-line analog of browser
    local storage. Other keys in the file are preserved.
    """

    def __init__(self, path: Path, key: str = CART_ID_KEY):
        self.path = Path(path).expanduser()
        self.key = key

    def _read(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            # Corrupted file - treat as no cart, it is rewritten on next set()
            logger.warning(f"Corrupted identity file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    async def get(self) -> Optional[str]:
        value = self._read().get(self.key)
        return value if isinstance(value, str) and value else None

    async def set(self, identifier: str) -> None:
        data = self._read()
        data[self.key] = identifier
        self._write(data)

    async def clear(self) -> None:
        data = self._read()
        if data.pop(self.key, None) is not None:
            self._write(data)


class RedisIdentityStore(CartIdentityStore):
    """
    Store backed by Upstash Redis, for server-side sessions.

    Args:
        redis: Async Upstash Redis client (see ``get_redis``)
        namespace: Session or visitor id the cart belongs to
        ttl: Optional expiry in seconds, refreshed on every set()
    """

    KEY_PREFIX = "sidecart:cart:"

    def __init__(self, redis, namespace: str, ttl: Optional[int] = None):
        if not namespace:
            raise ValueError("namespace must be a non-empty string")
        self._redis = redis
        self.key = f"{self.KEY_PREFIX}{namespace}"
        self.ttl = ttl

    async def get(self) -> Optional[str]:
        value = await self._redis.get(self.key)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value or None

    async def set(self, identifier: str) -> None:
        if self.ttl:
            await self._redis.set(self.key, identifier, ex=self.ttl)
        else:
            await self._redis.set(self.key, identifier)
        logger.debug(f"Stored cart id {sanitize_id_for_logging(identifier)} under {self.key}")

    async def clear(self) -> None:
        await self._redis.delete(self.key)


def get_redis(url: str, token: str):
    """
    Create an async Upstash Redis client.

    Args:
        url: UPSTASH_REDIS_REST_URL
        token: UPSTASH_REDIS_REST_TOKEN
    """
    from upstash_redis.asyncio import Redis as AsyncRedis

    if not url or not token:
        raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
    return AsyncRedis(url=url, token=token)
