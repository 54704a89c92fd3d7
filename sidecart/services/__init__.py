"""Remote services: storefront executor and money helpers."""
from .storefront import StorefrontClient

__all__ = ["StorefrontClient"]
