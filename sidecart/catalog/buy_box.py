"""
Buy box logic: variant resolution, button state and add-to-cart.

The picker widgets themselves belong to the page; this module only decides
which variant a selection means and what the button should say.
"""
from dataclasses import dataclass
from typing import Mapping, Optional

from sidecart.errors import SidecartError
from sidecart.logging import get_logger
from sidecart.ports import CartMutationPort

from .models import Product, ProductVariant
from .registry import BuyBoxEntry
from .repository import CatalogRepository

logger = get_logger(__name__)

LABEL_ADD = "Add to Cart"
LABEL_OUT_OF_STOCK = "Out of Stock"
LABEL_NOT_AVAILABLE = "Not Available"


@dataclass(frozen=True)
class ButtonState:
    label: str
    enabled: bool
    variant_id: Optional[str] = None


class BuyBox:
    """
    One product widget.

    Args:
        entry: Registry entry (product, container, optional promo)
        catalog: Catalog reads
        cart: Where "Add to Cart" goes
    """

    def __init__(self, entry: BuyBoxEntry, catalog: CatalogRepository, cart: CartMutationPort):
        self.entry = entry
        self.catalog = catalog
        self.cart = cart
        self.product: Optional[Product] = None
        self.error: Optional[str] = None

    async def load(self) -> Optional[Product]:
        """Fetch the product; on failure keep the message for the widget to show."""
        try:
            self.product = await self.catalog.fetch_product(self.entry.product_id)
        except SidecartError as e:
            logger.error(f"Error fetching product {self.entry.product_id}: {e!r}")
            self.error = f"Failed to load product data: {e}"
            return None
        if self.product is None:
            self.error = "Product not found or unavailable."
        elif not self.product.variants:
            self.error = "No variants found for this product."
        return self.product

    def default_selection(self) -> dict[str, str]:
        """First value of every selectable option."""
        if self.product is None:
            return {}
        return {option.name: option.values[0] for option in self.product.selectable_options}

    def resolve_variant(self, selection: Optional[Mapping[str, str]] = None) -> Optional[ProductVariant]:
        """
        Map an option selection to a variant.

        Products without a real choice resolve to their first variant.
        Options with a single value are filled in automatically.
        """
        if self.product is None or not self.product.variants:
            return None
        if not self.product.has_multiple_options:
            return self.product.variants[0]

        full_selection = {option.name: option.values[0] for option in self.product.options if option.values}
        full_selection.update(self.default_selection())
        full_selection.update(selection or {})
        return next((v for v in self.product.variants if v.matches(full_selection)), None)

    def button_state(self, selection: Optional[Mapping[str, str]] = None) -> ButtonState:
        variant = self.resolve_variant(selection)
        if variant is None:
            return ButtonState(LABEL_NOT_AVAILABLE, enabled=False)
        if not variant.available_for_sale:
            return ButtonState(LABEL_OUT_OF_STOCK, enabled=False, variant_id=variant.id)
        return ButtonState(LABEL_ADD, enabled=True, variant_id=variant.id)

    async def promo_variants(self) -> list[ProductVariant]:
        """Variants of the promo product that can be chosen (available for sale)."""
        if self.entry.promo is None:
            return []
        promo_product = await self.catalog.fetch_product(self.entry.promo.product_id)
        if promo_product is None:
            return []
        return [variant for variant in promo_product.variants if variant.available_for_sale]

    async def add_to_cart(
        self,
        selection: Optional[Mapping[str, str]] = None,
        promo_variant_id: Optional[str] = None,
    ) -> bool:
        """
        Add the selected variant (quantity 1). With a promo, the chosen promo
        variant is added right after the main one.

        Returns:
            False when nothing was added (button disabled, promo choice missing)
        """
        state = self.button_state(selection)
        if not state.enabled or state.variant_id is None:
            logger.error("Cannot add to cart: variant missing or button disabled")
            return False

        if self.entry.promo is not None:
            if not promo_variant_id:
                logger.warning(f"Promo choice required for product {self.entry.product_id}")
                return False
            # The cart reports a failed main add on its own; the promo line is added either way
            await self.cart.add_to_cart(state.variant_id, 1)
            await self.cart.add_to_cart(promo_variant_id, 1)
            return True

        await self.cart.add_to_cart(state.variant_id, 1)
        return True
