"""
Render/reconciliation controller.

Every initial load and every mutation ends in ``refresh()``, which re-reads
the cart and rebuilds the whole view from scratch. The rendered cart is
therefore always what the storefront last reported, including server-side
discounts and stock corrections, and never an assumed mutation result.

Known consistency gap: mutations are not coalesced or sequenced. When a
user fires several quantity changes quickly, each runs its own
mutate-then-refresh chain and whichever refresh completes last is what
gets rendered, even if it belongs to an earlier mutation.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Union

from sidecart.cart.models import CartLine, CartLineInput, CartSnapshot
from sidecart.cart.repository import CartRepository
from sidecart.catalog.models import Suggestion
from sidecart.catalog.suggestions import SuggestionEngine
from sidecart.errors import (
    ERROR_ADD_TO_CART,
    ERROR_LOAD_CART,
    ERROR_NOT_CONFIGURED,
    ERROR_UPDATE_CART,
    MESSAGE_EMPTY_CART,
    MESSAGE_NO_PRODUCTS,
    ConfigurationError,
    SidecartError,
)
from sidecart.logging import get_logger, sanitize_id_for_logging
from sidecart.ports import CartChangeListener, CartMutationPort, Notice
from sidecart.services.money import format_money, from_minor_units, round_money, to_decimal

logger = get_logger(__name__)

CART_HEADER = "Cart"
MESSAGE_SHIPPING_UNLOCKED = "You've unlocked Free Shipping"
MESSAGE_SHIPPING_REMAINING = "Add {amount} for Free Shipping"

Attributes = Union[Mapping[str, str], Iterable[Mapping[str, str]], None]


class WidgetState(str, Enum):
    """Lifecycle of the cart widget."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    MUTATING = "mutating"
    ERROR = "error"


@dataclass(frozen=True)
class ShippingProgress:
    """Progress towards the free-shipping threshold."""
    percent: Decimal
    unlocked: bool
    remaining: Decimal
    threshold: Decimal

    @property
    def message(self) -> str:
        if self.unlocked:
            return MESSAGE_SHIPPING_UNLOCKED
        return MESSAGE_SHIPPING_REMAINING.format(amount=format_money(self.remaining))

    @classmethod
    def compute(cls, subtotal: Decimal, threshold_minor_units: int) -> "ShippingProgress":
        """
        Args:
            subtotal: Cart subtotal in major units (120.00)
            threshold_minor_units: Free-shipping threshold in minor units (15000)
        """
        subtotal = to_decimal(subtotal)
        threshold = from_minor_units(threshold_minor_units)
        if threshold <= 0:
            return cls(percent=Decimal("100.00"), unlocked=True, remaining=Decimal("0.00"), threshold=threshold)

        percent = min(subtotal / threshold * 100, Decimal(100))
        unlocked = subtotal >= threshold
        remaining = Decimal(0) if unlocked else threshold - subtotal
        return cls(
            percent=round_money(percent),
            unlocked=unlocked,
            remaining=round_money(remaining),
            threshold=round_money(threshold),
        )


@dataclass(frozen=True)
class CartView:
    """
    Everything the view layer needs to draw the cart, derived from one
    authoritative fetch.
    """
    snapshot: Optional[CartSnapshot] = None
    shipping: Optional[ShippingProgress] = None
    suggestions: tuple[Suggestion, ...] = ()
    message: Optional[str] = None
    error: Optional[str] = None
    header: str = CART_HEADER

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return self.snapshot.lines if self.snapshot else ()

    @property
    def has_cart(self) -> bool:
        return self.snapshot is not None

    @property
    def subtotal(self) -> Optional[Decimal]:
        return self.snapshot.subtotal if self.snapshot else None

    @property
    def checkout_url(self) -> str:
        return self.snapshot.checkout_url if self.snapshot else ""

    @property
    def item_count(self) -> int:
        return self.snapshot.item_count if self.snapshot else 0

    @property
    def is_degraded(self) -> bool:
        return self.error is not None

    def sections(self) -> list[tuple[str, Any]]:
        """Sections in their fixed build order."""
        return [
            ("header", self.header),
            ("shipping", self.shipping),
            ("lines", self.lines),
            ("subtotal", self.subtotal),
            ("suggestions", self.suggestions),
        ]


def normalize_attributes(attributes: Attributes) -> dict[str, str]:
    """Accept a mapping or the storefront's ``[{"key": .., "value": ..}]`` list."""
    if not attributes:
        return {}
    if isinstance(attributes, Mapping):
        return {str(key): str(value) for key, value in attributes.items()}
    return {str(attr["key"]): str(attr.get("value", "")) for attr in attributes}


class CartController(CartMutationPort):
    """
    Owns the current cart view and drives every remote round trip.

    This is the single place where errors turn into user-facing notices;
    whatever happens, the view is rebuilt from a fresh fetch afterwards.

    Args:
        repository: Remote cart operations
        suggestions: Suggestion engine (None disables suggestions)
        free_shipping_threshold: Threshold in minor units
        listener: View layer hook
    """

    def __init__(
        self,
        repository: CartRepository,
        suggestions: Optional[SuggestionEngine],
        free_shipping_threshold: int,
        listener: Optional[CartChangeListener] = None,
    ):
        self.repository = repository
        self.suggestions = suggestions
        self.free_shipping_threshold = free_shipping_threshold
        self.listener = listener
        self._state = WidgetState.UNINITIALIZED
        self._view: Optional[CartView] = None

    @property
    def state(self) -> WidgetState:
        return self._state

    @property
    def view(self) -> Optional[CartView]:
        """The last rendered view (None before the first refresh)."""
        return self._view

    async def refresh(self) -> CartView:
        """Re-read the cart and rebuild the view from scratch."""
        self._state = WidgetState.LOADING
        try:
            snapshot = await self.repository.fetch_authoritative()
        except ConfigurationError:
            self._state = WidgetState.ERROR
            view = CartView(error=ERROR_NOT_CONFIGURED, message=ERROR_NOT_CONFIGURED)
        except SidecartError as e:
            logger.error(f"Failed to update cart: {e!r}")
            self._state = WidgetState.ERROR
            view = CartView(error=ERROR_LOAD_CART, message=ERROR_LOAD_CART)
        else:
            suggestions = await self._suggest(snapshot)
            view = self.build_view(snapshot, suggestions)
            logger.debug(
                f"Cart view rebuilt: cart={sanitize_id_for_logging(snapshot.identifier if snapshot else None)} "
                f"lines={len(view.lines)}"
            )

        self._view = view
        self._state = WidgetState.READY
        if self.listener is not None:
            await self.listener.on_cart_changed(view)
        return view

    def build_view(self, snapshot: Optional[CartSnapshot], suggestions: Iterable[Suggestion] = ()) -> CartView:
        """Pure view computation from an authoritative snapshot."""
        suggestions = tuple(suggestions)
        if snapshot is None:
            return CartView(message=MESSAGE_EMPTY_CART, suggestions=suggestions)
        if snapshot.is_empty:
            # Progress bar is hidden for an empty cart
            return CartView(snapshot=snapshot, message=MESSAGE_NO_PRODUCTS, suggestions=suggestions)
        return CartView(
            snapshot=snapshot,
            shipping=ShippingProgress.compute(snapshot.subtotal, self.free_shipping_threshold),
            suggestions=suggestions,
        )

    async def _suggest(self, snapshot: Optional[CartSnapshot]) -> tuple[Suggestion, ...]:
        if self.suggestions is None:
            return ()
        try:
            return tuple(await self.suggestions.suggest(snapshot.lines if snapshot else ()))
        except SidecartError as e:
            # Suggestions are decoration; the cart still renders without them
            logger.warning(f"Failed to fetch product suggestions: {e!r}")
            return ()

    async def _notify(self, notice: Notice) -> None:
        if self.listener is not None:
            await self.listener.on_notice(notice)

    async def add_to_cart(
        self,
        merchandise_id: str,
        quantity: int = 1,
        attributes: Attributes = None,
    ) -> CartView:
        """
        Add a variant to the cart, refresh, and ask the view to open.

        On failure a notice is shown and the cart is still refreshed so the
        view reflects the real remote state.
        """
        line = CartLineInput(merchandise_id, quantity, normalize_attributes(attributes))
        logger.info(f"Adding to cart: variant={sanitize_id_for_logging(merchandise_id)} quantity={quantity}")

        self._state = WidgetState.MUTATING
        try:
            await self.repository.ensure_cart(line)
        except SidecartError as e:
            logger.error(f"Failed to add item to cart: {e!r}")
            self._state = WidgetState.ERROR
            await self._notify(Notice(ERROR_ADD_TO_CART))
            return await self.refresh()

        view = await self.refresh()
        if self.listener is not None:
            await self.listener.on_open()
        return view

    async def change_line_quantity(self, line_id: str, delta: int) -> Optional[CartView]:
        """
        Change a line's quantity relative to the currently rendered value.

        A result below zero, or a line that is not rendered, is a no-op.
        """
        current = self._current_line(line_id)
        if current is None:
            logger.warning(f"Line {sanitize_id_for_logging(line_id)} is not in the rendered cart")
            return self._view

        new_quantity = current.quantity + delta
        if new_quantity < 0:
            return self._view
        return await self._apply_quantity(line_id, new_quantity)

    async def set_line_quantity(self, line_id: str, quantity: int) -> Optional[CartView]:
        """Set a line's quantity directly (typed input). Negative values are ignored."""
        if quantity < 0 or self._current_line(line_id) is None:
            return self._view
        return await self._apply_quantity(line_id, quantity)

    def _current_line(self, line_id: str) -> Optional[CartLine]:
        if self._view is None or self._view.snapshot is None:
            return None
        return self._view.snapshot.find_line(line_id)

    async def _apply_quantity(self, line_id: str, quantity: int) -> CartView:
        self._state = WidgetState.MUTATING
        try:
            await self.repository.update_line_quantity(line_id, quantity)
        except SidecartError as e:
            logger.error(f"Failed to update quantity: {e!r}")
            self._state = WidgetState.ERROR
            await self._notify(Notice(ERROR_UPDATE_CART))
        # Refresh unconditionally so any drift in the rendered quantities self-corrects
        return await self.refresh()
