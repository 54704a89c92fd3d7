"""
Error taxonomy and user-facing error messages.

Messages are centralized here to avoid string duplication across the
controller, the buy boxes and the CLI.
"""
from typing import Any, Optional

# User-facing notices
ERROR_ADD_TO_CART = "Failed to add item to cart. Please try again."
ERROR_UPDATE_CART = "Error updating cart."
ERROR_LOAD_CART = "Error loading cart. Please try again."
ERROR_NOT_CONFIGURED = "Cart is not available right now."

# Empty states
MESSAGE_EMPTY_CART = "Your cart is empty."
MESSAGE_NO_PRODUCTS = "No Products Added"


class SidecartError(Exception):
    """Base class for every error raised by the cart engine."""


class ConfigurationError(SidecartError):
    """Endpoint or access token missing; remote calls are disabled."""


class NetworkError(SidecartError):
    """Transport failure that persisted through every retry attempt."""

    def __init__(self, message: str, cause: Optional[BaseException] = None, attempts: int = 1):
        super().__init__(message)
        self.cause = cause
        self.attempts = attempts


class RemoteProtocolError(SidecartError):
    """The storefront answered but rejected the request (GraphQL or user errors)."""

    def __init__(self, message: str, errors: Optional[list[Any]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class CartNotFound(SidecartError):
    """The persisted cart identifier does not resolve to a remote cart."""


class InvalidQuantity(SidecartError, ValueError):
    """A negative quantity was requested for a cart line."""
