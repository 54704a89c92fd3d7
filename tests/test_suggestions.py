"""
Tests for the suggestion engine
"""
import random
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from sidecart.cart.models import CartLine
from sidecart.catalog.models import Suggestion
from sidecart.catalog.repository import CatalogRepository
from sidecart.catalog.suggestions import SuggestionEngine


def _line(product_number: int, category=None) -> CartLine:
    return CartLine(
        line_id=f"gid://shopify/CartLine/{product_number}",
        merchandise_id=f"gid://shopify/ProductVariant/{product_number}",
        quantity=1,
        unit_price=Decimal("20.00"),
        line_total=Decimal("20.00"),
        product_id=f"gid://shopify/Product/{product_number}",
        product_title=f"Product {product_number}",
        category=category,
    )


def _suggestion(number: int, category=None) -> Suggestion:
    return Suggestion(
        product_id=f"gid://shopify/Product/{number}",
        title=f"Product {number}",
        handle=f"product-{number}",
        min_price=Decimal("20.00"),
        category=category,
    )


@pytest.fixture
def catalog(storefront_client):
    return CatalogRepository(storefront_client)


class TestCategoryRecommendations:

    @pytest.mark.asyncio
    async def test_excludes_products_already_in_cart(self, catalog):
        engine = SuggestionEngine(catalog, rng=random.Random(1))

        picks = await engine.suggest([_line(10, "Spirits"), _line(20, "Apparel")])

        ids = {p.product_id for p in picks}
        assert "gid://shopify/Product/10" not in ids
        assert "gid://shopify/Product/20" not in ids
        assert len(picks) == 8

    @pytest.mark.asyncio
    async def test_samples_fifty_best_sellers(self, catalog, fake_storefront):
        engine = SuggestionEngine(catalog, rng=random.Random(1))

        await engine.suggest([_line(10, "Spirits")])

        assert fake_storefront.calls == [("products", {"first": 50, "sortKey": "BEST_SELLING"})]

    def test_each_category_gets_its_share(self):
        engine = SuggestionEngine(AsyncMock(), target=4, rng=random.Random(3))
        products = [_suggestion(n, "A") for n in range(1, 6)] + [_suggestion(n, "B") for n in range(6, 11)]

        picks = engine.select_by_category(products, ["A", "B"], excluded=set())

        # ceil(4 / 2) = 2 per category
        assert [p.category for p in picks] == ["A", "A", "B", "B"]

    def test_backfills_when_categories_run_short(self):
        engine = SuggestionEngine(AsyncMock(), target=5, rng=random.Random(3))
        products = [_suggestion(1, "A"), _suggestion(2, "Other"), _suggestion(3, "Other"),
                    _suggestion(4, None), _suggestion(5, "Other"), _suggestion(6, "Other")]

        picks = engine.select_by_category(products, ["A"], excluded=set())

        assert len(picks) == 5
        assert picks[0].product_id == "gid://shopify/Product/1"
        assert len({p.product_id for p in picks}) == 5

    def test_returns_fewer_when_catalog_is_small(self):
        engine = SuggestionEngine(AsyncMock(), target=8, rng=random.Random(3))
        products = [_suggestion(1, "A"), _suggestion(2, "B")]

        picks = engine.select_by_category(products, ["A"], excluded={"gid://shopify/Product/2"})

        assert [p.product_id for p in picks] == ["gid://shopify/Product/1"]

    def test_duplicate_products_are_suggested_once(self):
        engine = SuggestionEngine(AsyncMock(), target=4, rng=random.Random(3))
        products = [_suggestion(1, "A"), _suggestion(1, "A"), _suggestion(2, "A")]

        picks = engine.select_by_category(products, ["A"], excluded=set())

        assert sorted(p.product_id for p in picks) == ["gid://shopify/Product/1", "gid://shopify/Product/2"]


class TestGeneralRecommendations:

    @pytest.mark.asyncio
    async def test_empty_cart_uses_twenty_best_sellers(self, catalog, fake_storefront):
        engine = SuggestionEngine(catalog, rng=random.Random(1))

        picks = await engine.suggest([])

        assert fake_storefront.calls == [("products", {"first": 20, "sortKey": "BEST_SELLING"})]
        assert len(picks) == 8

    @pytest.mark.asyncio
    async def test_uncategorized_cart_excludes_its_products(self, catalog):
        engine = SuggestionEngine(catalog, target=20, rng=random.Random(1))

        picks = await engine.suggest([_line(30), _line(50)])

        ids = {p.product_id for p in picks}
        assert len(picks) == 11
        assert "gid://shopify/Product/30" not in ids
        assert "gid://shopify/Product/50" not in ids

    @pytest.mark.asyncio
    async def test_same_seed_same_suggestions(self, catalog):
        lines = [_line(10, "Spirits")]

        first = await SuggestionEngine(catalog, rng=random.Random(42)).suggest(lines)
        second = await SuggestionEngine(catalog, rng=random.Random(42)).suggest(lines)

        assert first == second

    def test_target_must_be_positive(self):
        with pytest.raises(ValueError):
            SuggestionEngine(AsyncMock(), target=0)
