"""Cart models built from storefront payloads, with Decimal-based pricing."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional

from sidecart.errors import InvalidQuantity
from sidecart.services.money import round_money

# Variant title the storefront uses for products without real options
DEFAULT_VARIANT_TITLE = "Default Title"
# Attribute keys starting with this prefix are internal to the storefront
HIDDEN_ATTRIBUTE_PREFIX = "_"


def _first_image_url(images: Optional[Mapping[str, Any]]) -> str:
    edges = (images or {}).get("edges") or []
    if not edges:
        return ""
    return (edges[0].get("node") or {}).get("url") or ""


@dataclass(frozen=True)
class CartLineInput:
    """A line to be added to a cart."""
    merchandise_id: str
    quantity: int = 1
    attributes: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.merchandise_id:
            raise ValueError("merchandise_id must be a non-empty string")
        if not isinstance(self.quantity, int) or self.quantity < 1:
            raise InvalidQuantity("quantity must be a positive integer")

    def to_variables(self) -> dict[str, Any]:
        """Serialize as a ``CartLineInput`` GraphQL object."""
        return {
            "merchandiseId": self.merchandise_id,
            "quantity": self.quantity,
            "attributes": [{"key": key, "value": value} for key, value in self.attributes.items()],
        }


@dataclass(frozen=True)
class CartLine:
    """Single merchandise line of an authoritative cart."""
    line_id: str
    merchandise_id: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    product_id: str
    product_title: str
    variant_title: str = ""
    image_url: str = ""
    category: Optional[str] = None
    selected_options: tuple[tuple[str, str], ...] = ()
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def original_total(self) -> Decimal:
        """Undiscounted price for all units."""
        return round_money(self.unit_price * self.quantity)

    @property
    def has_discount(self) -> bool:
        """True when the server-side line total is below the undiscounted price."""
        return self.line_total < self.original_total

    @property
    def visible_options(self) -> tuple[tuple[str, str], ...]:
        return tuple(
            (name, value) for name, value in self.selected_options if value != DEFAULT_VARIANT_TITLE
        )

    @property
    def visible_attributes(self) -> dict[str, str]:
        return {
            key: value
            for key, value in self.attributes.items()
            if not key.startswith(HIDDEN_ATTRIBUTE_PREFIX)
        }

    @classmethod
    def from_node(cls, node: Mapping[str, Any]) -> "CartLine":
        """Create from a ``cart.lines.edges[].node`` payload."""
        merchandise = node.get("merchandise") or {}
        product = merchandise.get("product") or {}
        category = product.get("category") or {}
        image_url = (merchandise.get("image") or {}).get("url") or _first_image_url(product.get("images"))

        return cls(
            line_id=node["id"],
            merchandise_id=merchandise.get("id", ""),
            quantity=int(node.get("quantity") or 0),
            unit_price=round_money((merchandise.get("price") or {}).get("amount")),
            line_total=round_money(((node.get("cost") or {}).get("totalAmount") or {}).get("amount")),
            product_id=product.get("id", ""),
            product_title=product.get("title", ""),
            variant_title=merchandise.get("title", ""),
            image_url=image_url,
            category=category.get("name") or None,
            selected_options=tuple(
                (opt.get("name", ""), opt.get("value", ""))
                for opt in merchandise.get("selectedOptions") or []
            ),
            attributes={attr["key"]: attr.get("value") or "" for attr in node.get("attributes") or []},
        )


@dataclass(frozen=True)
class CartSnapshot:
    """
    Authoritative view of a remote cart at one point in time.

    Built fresh from every fetch and never patched; lines keep the order the
    server returned them in.
    """
    identifier: str
    lines: tuple[CartLine, ...]
    subtotal: Decimal
    checkout_url: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        """Total number of units in the cart."""
        return sum(line.quantity for line in self.lines)

    @property
    def product_ids(self) -> tuple[str, ...]:
        """Distinct product ids, first-seen order."""
        return tuple(dict.fromkeys(line.product_id for line in self.lines if line.product_id))

    @property
    def categories(self) -> tuple[str, ...]:
        """Distinct product categories, first-seen order."""
        return tuple(dict.fromkeys(line.category for line in self.lines if line.category))

    def find_line(self, line_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.line_id == line_id), None)

    @classmethod
    def from_cart(cls, cart: Mapping[str, Any]) -> "CartSnapshot":
        """Create from a ``cart`` query payload."""
        edges = (cart.get("lines") or {}).get("edges") or []
        return cls(
            identifier=cart["id"],
            lines=tuple(CartLine.from_node(edge["node"]) for edge in edges),
            subtotal=round_money(((cart.get("cost") or {}).get("totalAmount") or {}).get("amount")),
            checkout_url=cart.get("checkoutUrl") or "",
        )
