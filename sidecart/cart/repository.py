"""
Cart repository: cart operations over the storefront API.

Mutations return nothing but success or failure. Callers re-read the cart
with ``fetch_authoritative`` to learn its state.
"""
import asyncio
from typing import Any, Optional

from sidecart.errors import CartNotFound, InvalidQuantity, RemoteProtocolError
from sidecart.logging import get_logger, sanitize_id_for_logging
from sidecart.services.storefront import StorefrontClient

from . import queries
from .models import CartLineInput, CartSnapshot
from .storage import CartIdentityStore

logger = get_logger(__name__)


def _check_user_errors(payload: Optional[dict[str, Any]], mutation: str) -> dict[str, Any]:
    """Raise RemoteProtocolError when a mutation payload reports userErrors."""
    payload = payload or {}
    user_errors = payload.get("userErrors") or []
    if user_errors:
        messages = "; ".join(str(error.get("message")) for error in user_errors)
        logger.error(f"{mutation} rejected: {messages}")
        raise RemoteProtocolError(f"{mutation} failed: {messages}", errors=user_errors)
    return payload


class CartRepository:
    """
    Remote cart operations bound to one identity store.

    Args:
        client: Storefront executor
        identity: Store holding the current cart identifier
    """

    def __init__(self, client: StorefrontClient, identity: CartIdentityStore):
        self.client = client
        self.identity = identity
        # Serializes the "no cart yet -> create" branch so concurrent first adds
        # end up in the same cart
        self._create_lock = asyncio.Lock()

    async def ensure_cart(self, line: CartLineInput) -> None:
        """
        Add ``line`` to the current cart, creating the cart if there is none.

        Always branches on identifier presence first, so repeated calls with an
        existing cart never create a second one.
        """
        cart_id = await self.identity.get()
        if cart_id is None:
            async with self._create_lock:
                cart_id = await self.identity.get()
                if cart_id is None:
                    await self._create_cart(line)
                    return
        await self._add_lines(cart_id, line)

    async def _create_cart(self, line: CartLineInput) -> str:
        data = await self.client.execute(queries.CART_CREATE, {"lines": [line.to_variables()]})
        payload = _check_user_errors(data.get("cartCreate"), "cartCreate")
        cart_id = (payload.get("cart") or {}).get("id")
        if not cart_id:
            raise RemoteProtocolError("cartCreate response is missing cart.id")
        await self.identity.set(cart_id)
        logger.info(f"Created cart {sanitize_id_for_logging(cart_id)}")
        return cart_id

    async def _add_lines(self, cart_id: str, line: CartLineInput) -> None:
        data = await self.client.execute(
            queries.CART_LINES_ADD, {"cartId": cart_id, "lines": [line.to_variables()]}
        )
        _check_user_errors(data.get("cartLinesAdd"), "cartLinesAdd")

    async def update_line_quantity(self, line_id: str, quantity: int) -> None:
        """
        Set a line's quantity. Zero removes the line instead of updating it.

        Raises:
            InvalidQuantity: quantity is negative
            CartNotFound: there is no current cart
        """
        if not isinstance(quantity, int) or quantity < 0:
            raise InvalidQuantity("quantity must be a non-negative integer")

        cart_id = await self.identity.get()
        if cart_id is None:
            raise CartNotFound("No cart to update")

        if quantity == 0:
            data = await self.client.execute(
                queries.CART_LINES_REMOVE, {"cartId": cart_id, "lineIds": [line_id]}
            )
            _check_user_errors(data.get("cartLinesRemove"), "cartLinesRemove")
        else:
            data = await self.client.execute(
                queries.CART_LINES_UPDATE,
                {"cartId": cart_id, "lines": [{"id": line_id, "quantity": quantity}]},
            )
            _check_user_errors(data.get("cartLinesUpdate"), "cartLinesUpdate")

    async def remove_line(self, line_id: str) -> None:
        await self.update_line_quantity(line_id, 0)

    async def fetch_authoritative(self) -> Optional[CartSnapshot]:
        """
        Read the full current cart.

        Returns:
            The cart snapshot, or None when there is no cart

        Raises:
            CartNotFound: the identifier still failed to resolve after one
                clear-and-retry
        """
        healed = False
        while True:
            cart_id = await self.identity.get()
            if cart_id is None:
                return None

            data = await self.client.execute(queries.CART_QUERY, {"cartId": cart_id})
            cart = data.get("cart")
            if cart:
                return CartSnapshot.from_cart(cart)

            if healed:
                raise CartNotFound(f"Cart {sanitize_id_for_logging(cart_id)} not found")

            logger.info(f"Cart {sanitize_id_for_logging(cart_id)} no longer exists; clearing identifier")
            await self.identity.clear()
            healed = True
