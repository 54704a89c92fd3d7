"""
Suggestion engine.

Derives the "Recommended Products" list from the cart's contents:
- Cart has categorized lines: sample the best sellers, take a share per cart
  category, backfill from everything else, shuffle and truncate
- Otherwise: a random handful of best sellers

Products already in the cart are never suggested. The random source is
injectable so a seeded ``random.Random`` gives reproducible output.
"""
import math
import random
from typing import Iterable, Optional, Sequence

from sidecart.cart.models import CartLine
from sidecart.logging import get_logger

from .models import Suggestion
from .repository import CatalogRepository

logger = get_logger(__name__)

DEFAULT_TARGET = 8
CATEGORY_SAMPLE_SIZE = 50
FALLBACK_SAMPLE_SIZE = 20


class SuggestionEngine:
    """
    Stateless per call; the only state is the random source.

    Args:
        catalog: Catalog reads
        target: Number of suggestions to return at most
        rng: Random source (seed it in tests)
    """

    def __init__(
        self,
        catalog: CatalogRepository,
        target: int = DEFAULT_TARGET,
        rng: Optional[random.Random] = None,
        sample_size: int = CATEGORY_SAMPLE_SIZE,
        fallback_size: int = FALLBACK_SAMPLE_SIZE,
    ):
        if target < 1:
            raise ValueError("target must be at least 1")
        self.catalog = catalog
        self.target = target
        self.sample_size = sample_size
        self.fallback_size = fallback_size
        self._random = rng or random.Random()

    def _shuffled(self, items: Iterable[Suggestion]) -> list[Suggestion]:
        items = list(items)
        self._random.shuffle(items)
        return items

    async def suggest(self, lines: Sequence[CartLine] = ()) -> list[Suggestion]:
        """
        Build the suggestion list for the given cart lines.

        Args:
            lines: Current cart lines (empty for no cart)

        Returns:
            At most ``target`` suggestions, none of them already in the cart
        """
        categories = list(dict.fromkeys(line.category for line in lines if line.category))
        excluded = {line.product_id for line in lines if line.product_id}

        if categories:
            products = await self.catalog.list_products(self.sample_size)
            picks = self.select_by_category(products, categories, excluded)
        else:
            logger.debug("No cart categories, using general recommendations")
            products = await self.catalog.list_products(self.fallback_size)
            candidates = _unique(p for p in products if p.product_id not in excluded)
            picks = self._shuffled(candidates)[: self.target]

        return self._shuffled(picks)[: self.target]

    def select_by_category(
        self,
        products: Sequence[Suggestion],
        categories: Sequence[str],
        excluded: set[str],
    ) -> list[Suggestion]:
        """
        Allocate ``ceil(target / len(categories))`` slots per cart category,
        then backfill the remaining slots from the other candidates.
        """
        per_category = math.ceil(self.target / len(categories))
        candidates = _unique(p for p in products if p.product_id not in excluded)
        picks: list[Suggestion] = []
        picked_ids: set[str] = set()

        for category in categories:
            matching = [
                p for p in candidates if p.category == category and p.product_id not in picked_ids
            ]
            chosen = self._shuffled(matching)[:per_category]
            logger.debug(f"Found {len(matching)} products for category {category!r}, took {len(chosen)}")
            picks.extend(chosen)
            picked_ids.update(p.product_id for p in chosen)

        if len(picks) < self.target:
            rest = [p for p in candidates if p.product_id not in picked_ids]
            picks.extend(self._shuffled(rest)[: self.target - len(picks)])

        return picks


def _unique(products: Iterable[Suggestion]) -> list[Suggestion]:
    """Drop repeated product ids, keeping the first occurrence."""
    seen: set[str] = set()
    result = []
    for product in products:
        if product.product_id in seen:
            continue
        seen.add(product.product_id)
        result.append(product)
    return result
