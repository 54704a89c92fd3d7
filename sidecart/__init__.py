"""Storefront cart synchronization client."""
from .app import Sidecart, build_sidecart
from .config import RetryPolicy, SidecartSettings
from .controller import CartController, CartView, ShippingProgress, WidgetState
from .ports import CartChangeListener, CartMutationPort, Notice

__all__ = [
    "Sidecart",
    "build_sidecart",
    "RetryPolicy",
    "SidecartSettings",
    "CartController",
    "CartView",
    "ShippingProgress",
    "WidgetState",
    "CartChangeListener",
    "CartMutationPort",
    "Notice",
]

__version__ = "2.1.0"
