"""Wiring: builds the executor, repositories, suggestion engine and controller."""
import asyncio
import random
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from sidecart.cart.repository import CartRepository
from sidecart.cart.storage import CartIdentityStore
from sidecart.catalog.buy_box import BuyBox
from sidecart.catalog.registry import load_registry
from sidecart.catalog.repository import CatalogRepository
from sidecart.catalog.suggestions import SuggestionEngine
from sidecart.config import SidecartSettings
from sidecart.controller import CartController
from sidecart.ports import CartChangeListener
from sidecart.services.storefront import Sleep, StorefrontClient


@dataclass
class Sidecart:
    """One cart widget and its collaborators."""
    settings: SidecartSettings
    client: StorefrontClient
    repository: CartRepository
    catalog: CatalogRepository
    suggestions: SuggestionEngine
    controller: CartController

    def buy_boxes(self, registry: Any) -> list[BuyBox]:
        """Create a buy box per valid registry entry, all adding through the controller."""
        return [BuyBox(entry, self.catalog, self.controller) for entry in load_registry(registry)]

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "Sidecart":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def build_sidecart(
    settings: SidecartSettings,
    identity: CartIdentityStore,
    listener: Optional[CartChangeListener] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    rng: Optional[random.Random] = None,
    sleep: Sleep = asyncio.sleep,
) -> Sidecart:
    """
    Build a ready-to-use cart widget.

    Args:
        settings: Storefront configuration
        identity: Where the cart identifier lives
        listener: View layer hook
        http_client: Optional shared httpx client
        rng: Random source for suggestions
        sleep: Retry delay function
    """
    client = StorefrontClient(settings, http_client=http_client, sleep=sleep)
    repository = CartRepository(client, identity)
    catalog = CatalogRepository(client)
    suggestions = SuggestionEngine(catalog, target=settings.suggestion_target, rng=rng)
    controller = CartController(
        repository,
        suggestions,
        free_shipping_threshold=settings.free_shipping_threshold,
        listener=listener,
    )
    return Sidecart(
        settings=settings,
        client=client,
        repository=repository,
        catalog=catalog,
        suggestions=suggestions,
        controller=controller,
    )
