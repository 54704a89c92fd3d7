"""Catalog models parsed from storefront payloads."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional

from sidecart.services.money import round_money

PRODUCT_GID_PREFIX = "gid://shopify/Product/"


def product_gid(product_id: str | int) -> str:
    """Turn a numeric product id into a global id; global ids pass through."""
    product_id = str(product_id)
    if product_id.startswith("gid://"):
        return product_id
    return f"{PRODUCT_GID_PREFIX}{product_id}"


@dataclass(frozen=True)
class Suggestion:
    """A recommended product shown under the cart."""
    product_id: str
    title: str
    handle: str
    min_price: Decimal
    image_url: str = ""
    category: Optional[str] = None

    @property
    def url(self) -> str:
        return f"/product/{self.handle}"

    @classmethod
    def from_node(cls, node: Mapping[str, Any]) -> "Suggestion":
        """Create from a ``products.edges[].node`` payload."""
        price = ((node.get("priceRange") or {}).get("minVariantPrice") or {}).get("amount")
        image_edges = (node.get("images") or {}).get("edges") or []
        image_url = (image_edges[0].get("node") or {}).get("url", "") if image_edges else ""
        return cls(
            product_id=node["id"],
            title=node.get("title", ""),
            handle=node.get("handle", ""),
            min_price=round_money(price),
            image_url=image_url or "",
            category=(node.get("category") or {}).get("name") or None,
        )


@dataclass(frozen=True)
class ProductOption:
    name: str
    values: tuple[str, ...]

    @property
    def is_selectable(self) -> bool:
        """Only options with a real choice get a picker."""
        return len(self.values) > 1


@dataclass(frozen=True)
class ProductVariant:
    id: str
    title: str
    available_for_sale: bool
    price: Decimal
    selected_options: dict[str, str] = field(default_factory=dict)

    def matches(self, selection: Mapping[str, str]) -> bool:
        """True when every option of this variant agrees with ``selection``."""
        return all(selection.get(name) == value for name, value in self.selected_options.items())

    @classmethod
    def from_node(cls, node: Mapping[str, Any]) -> "ProductVariant":
        return cls(
            id=node["id"],
            title=node.get("title", ""),
            available_for_sale=bool(node.get("availableForSale")),
            price=round_money((node.get("price") or {}).get("amount")),
            selected_options={
                opt.get("name", ""): opt.get("value", "") for opt in node.get("selectedOptions") or []
            },
        )


@dataclass(frozen=True)
class Product:
    id: str
    title: str
    handle: str = ""
    options: tuple[ProductOption, ...] = ()
    variants: tuple[ProductVariant, ...] = ()

    @property
    def has_multiple_options(self) -> bool:
        return any(option.is_selectable for option in self.options)

    @property
    def selectable_options(self) -> tuple[ProductOption, ...]:
        return tuple(option for option in self.options if option.is_selectable)

    @classmethod
    def from_node(cls, node: Mapping[str, Any]) -> "Product":
        """Create from a ``node(id:)`` Product payload."""
        return cls(
            id=node["id"],
            title=node.get("title", ""),
            handle=node.get("handle", ""),
            options=tuple(
                ProductOption(name=opt.get("name", ""), values=tuple(opt.get("values") or []))
                for opt in node.get("options") or []
            ),
            variants=tuple(
                ProductVariant.from_node(variant)
                for variant in (node.get("variants") or {}).get("nodes") or []
            ),
        )
