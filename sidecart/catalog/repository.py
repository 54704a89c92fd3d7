"""Catalog reads over the storefront API."""
from typing import Optional

from sidecart.logging import get_logger
from sidecart.services.storefront import StorefrontClient

from . import queries
from .models import Product, Suggestion, product_gid

logger = get_logger(__name__)

BEST_SELLING = "BEST_SELLING"


class CatalogRepository:
    """Product listing and lookup."""

    def __init__(self, client: StorefrontClient):
        self.client = client

    async def list_products(self, first: int, sort_key: str = BEST_SELLING) -> list[Suggestion]:
        """
        Read one page of products.

        Args:
            first: Page size
            sort_key: Storefront ProductSortKeys value

        Returns:
            Products in server order
        """
        data = await self.client.execute(queries.PRODUCTS_QUERY, {"first": first, "sortKey": sort_key})
        edges = (data.get("products") or {}).get("edges") or []
        return [Suggestion.from_node(edge["node"]) for edge in edges]

    async def fetch_product(self, product_id: str | int) -> Optional[Product]:
        """Look up a product by numeric or global id; None when it does not exist."""
        data = await self.client.execute(queries.PRODUCT_QUERY, {"id": product_gid(product_id)})
        node = data.get("node")
        if not node:
            logger.warning(f"Product {product_id} not found")
            return None
        return Product.from_node(node)
