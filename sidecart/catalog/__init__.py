"""Catalog package: product listing, product lookup, buy boxes and suggestions."""
from .buy_box import ButtonState, BuyBox
from .models import Product, ProductOption, ProductVariant, Suggestion
from .registry import BuyBoxEntry, PromoConfig, load_registry
from .repository import CatalogRepository
from .suggestions import SuggestionEngine

__all__ = [
    "ButtonState",
    "BuyBox",
    "Product",
    "ProductOption",
    "ProductVariant",
    "Suggestion",
    "BuyBoxEntry",
    "PromoConfig",
    "load_registry",
    "CatalogRepository",
    "SuggestionEngine",
]
