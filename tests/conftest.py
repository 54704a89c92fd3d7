"""Pytest configuration and fixtures"""
import json
import re
from decimal import Decimal
from typing import Any, Optional

import httpx
import pytest

from sidecart.cart.repository import CartRepository
from sidecart.cart.storage import MemoryIdentityStore
from sidecart.config import SidecartSettings
from sidecart.services.storefront import StorefrontClient

STORE_URL = "https://shop.test/api/2025-01/graphql.json"

BOURBON_VARIANT = "gid://shopify/ProductVariant/1"
SHIRT_VARIANT = "gid://shopify/ProductVariant/2"
GLASS_VARIANT = "gid://shopify/ProductVariant/3"


def _variant(variant_id, title, price, product_id, product_title, category=None, options=None, image=None):
    return {
        "id": variant_id,
        "title": title,
        "image": {"url": image} if image else None,
        "price": {"amount": price},
        "selectedOptions": options or [{"name": "Title", "value": "Default Title"}],
        "product": {
            "id": product_id,
            "title": product_title,
            "category": {"id": f"cat-{category}", "name": category} if category else None,
            "images": {"edges": [{"node": {"url": f"https://cdn.test/{product_title}.jpg"}}]},
        },
    }


VARIANTS = {
    BOURBON_VARIANT: _variant(BOURBON_VARIANT, "Default Title", "60.00", "gid://shopify/Product/10",
                              "Reserve Bourbon", category="Spirits"),
    SHIRT_VARIANT: _variant(SHIRT_VARIANT, "M", "25.00", "gid://shopify/Product/20", "Logo Shirt",
                            category="Apparel", options=[{"name": "Size", "value": "M"}],
                            image="https://cdn.test/shirt-m.jpg"),
    GLASS_VARIANT: _variant(GLASS_VARIANT, "Default Title", "15.00", "gid://shopify/Product/30",
                            "Tasting Glass"),
}


def _product_node(number: int, title: str, category: Optional[str], price: str = "20.00") -> dict:
    return {
        "id": f"gid://shopify/Product/{number}",
        "title": title,
        "handle": title.lower().replace(" ", "-"),
        "category": {"id": f"cat-{category}", "name": category} if category else None,
        "priceRange": {"minVariantPrice": {"amount": price}},
        "images": {"edges": [{"node": {"url": f"https://cdn.test/{number}.jpg"}}]},
    }


CATALOG = [
    _product_node(10, "Reserve Bourbon", "Spirits", "60.00"),
    _product_node(11, "Small Batch Bourbon", "Spirits"),
    _product_node(12, "Single Barrel", "Spirits"),
    _product_node(13, "Rye Whiskey", "Spirits"),
    _product_node(14, "Wheated Bourbon", "Spirits"),
    _product_node(15, "Cask Strength", "Spirits"),
    _product_node(20, "Logo Shirt", "Apparel", "25.00"),
    _product_node(21, "Logo Hat", "Apparel"),
    _product_node(22, "Hoodie", "Apparel"),
    _product_node(30, "Tasting Glass", None, "15.00"),
    _product_node(40, "Decanter", "Barware"),
    _product_node(41, "Ice Mold", "Barware"),
    _product_node(50, "Gift Card", None),
]


def operation_name(query: str) -> str:
    match = re.search(r"(?:query|mutation)\s+(\w+)", query)
    return match.group(1) if match else ""


class FakeStorefront:
    """
    In-memory storefront behind an httpx.MockTransport.

    Records every operation as ``(name, variables)``; ``failures`` maps an
    operation name to a number of upcoming calls that answer HTTP 503.
    """

    def __init__(self, catalog: Optional[list[dict]] = None):
        self.carts: dict[str, dict[str, Any]] = {}
        self.catalog = CATALOG if catalog is None else catalog
        self.products: dict[str, dict] = {}
        self.calls: list[tuple[str, dict]] = []
        self.failures: dict[str, int] = {}
        self._cart_seq = 0
        self._line_seq = 0

    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        name = operation_name(body["query"])
        variables = body.get("variables") or {}
        self.calls.append((name, variables))

        if self.failures.get(name):
            self.failures[name] -= 1
            return httpx.Response(503, text="unavailable")

        data = getattr(self, f"_op_{name}")(variables)
        return httpx.Response(200, json={"data": data})

    def _new_line(self, line_input: dict) -> dict:
        self._line_seq += 1
        return {
            "id": f"gid://shopify/CartLine/l{self._line_seq}",
            "merchandiseId": line_input["merchandiseId"],
            "quantity": line_input["quantity"],
            "attributes": line_input.get("attributes") or [],
        }

    def cart_payload(self, cart_id: str) -> Optional[dict]:
        cart = self.carts.get(cart_id)
        if cart is None:
            return None
        edges = []
        subtotal = Decimal("0")
        for line in cart["lines"]:
            variant = VARIANTS[line["merchandiseId"]]
            total = Decimal(variant["price"]["amount"]) * line["quantity"]
            subtotal += total
            edges.append({"node": {
                "id": line["id"],
                "quantity": line["quantity"],
                "attributes": line["attributes"],
                "cost": {"totalAmount": {"amount": str(total)}},
                "merchandise": variant,
            }})
        return {
            "id": cart_id,
            "checkoutUrl": f"https://shop.test/checkout/{cart_id.rsplit('/', 1)[-1]}",
            "cost": {"totalAmount": {"amount": str(subtotal)}},
            "lines": {"edges": edges},
        }

    def _op_cartCreate(self, variables):
        self._cart_seq += 1
        cart_id = f"gid://shopify/Cart/c{self._cart_seq}?key=secret"
        self.carts[cart_id] = {"lines": [self._new_line(line) for line in variables.get("lines") or []]}
        return {"cartCreate": {"cart": {"id": cart_id}, "userErrors": []}}

    def _op_cartLinesAdd(self, variables):
        cart = self.carts.get(variables["cartId"])
        if cart is None:
            return {"cartLinesAdd": {"cart": None, "userErrors": [
                {"field": ["cartId"], "message": "The specified cart does not exist."}]}}
        for line_input in variables["lines"]:
            cart["lines"].append(self._new_line(line_input))
        return {"cartLinesAdd": {"cart": {"id": variables["cartId"]}, "userErrors": []}}

    def _op_cartLinesUpdate(self, variables):
        cart = self.carts[variables["cartId"]]
        for update in variables["lines"]:
            for line in cart["lines"]:
                if line["id"] == update["id"]:
                    line["quantity"] = update["quantity"]
        return {"cartLinesUpdate": {"cart": {"id": variables["cartId"]}, "userErrors": []}}

    def _op_cartLinesRemove(self, variables):
        cart = self.carts[variables["cartId"]]
        cart["lines"] = [line for line in cart["lines"] if line["id"] not in variables["lineIds"]]
        return {"cartLinesRemove": {"cart": {"id": variables["cartId"]}, "userErrors": []}}

    def _op_cart(self, variables):
        return {"cart": self.cart_payload(variables["cartId"])}

    def _op_products(self, variables):
        nodes = self.catalog[: variables["first"]]
        return {"products": {"edges": [{"node": node} for node in nodes]}}

    def _op_getProduct(self, variables):
        return {"node": self.products.get(variables["id"])}


class SleepRecorder:
    """Stands in for asyncio.sleep between retry attempts."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def settings():
    """Configured settings with a small retry budget"""
    return SidecartSettings(
        endpoint_url=STORE_URL,
        access_token="test_token",
        free_shipping_threshold=15000,
        max_attempts=3,
        retry_delay=1.0,
    )


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def fake_storefront():
    return FakeStorefront()


@pytest.fixture
def storefront_client(settings, fake_storefront, sleep_recorder):
    """Executor wired to the in-memory storefront"""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_storefront.handler))
    return StorefrontClient(settings, http_client=http_client, sleep=sleep_recorder)


@pytest.fixture
def identity():
    return MemoryIdentityStore()


@pytest.fixture
def repository(storefront_client, identity):
    return CartRepository(storefront_client, identity)
