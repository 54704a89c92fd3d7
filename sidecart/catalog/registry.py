"""Host page product registry: which buy boxes to initialize, and where."""
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from sidecart.logging import get_logger

logger = get_logger(__name__)


class PromoConfig(BaseModel):
    """Free add-on offered when the main product is added (e.g. a shirt)."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(validation_alias=AliasChoices("product_id", "productId", "shirtProductId"))
    image: str = Field(default="", validation_alias=AliasChoices("image", "shirtImage"))
    text: str = Field(default="", validation_alias=AliasChoices("text", "shirtPromoText"))
    disclaimer: str = Field(default="", validation_alias=AliasChoices("disclaimer", "shirtPromoDisclaimer"))

    @field_validator("product_id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> str:
        return str(value).strip() if value is not None else ""

    @field_validator("product_id")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("promo product id must be non-empty")
        return value


class BuyBoxEntry(BaseModel):
    """One product widget requested by the host page."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(validation_alias=AliasChoices("product_id", "productId"))
    container_id: str = Field(validation_alias=AliasChoices("container_id", "containerId"))
    promo: Optional[PromoConfig] = Field(default=None, validation_alias=AliasChoices("promo", "promoConfig"))

    @model_validator(mode="before")
    @classmethod
    def _collect_flat_promo(cls, data: Any) -> Any:
        """The host prints promo settings as flat ``shirt_*`` keys next to a flag."""
        if not isinstance(data, dict) or not data.get("has_shirt_promo"):
            return data
        data = dict(data)
        data["promo"] = {
            "product_id": data.get("shirt_product_id"),
            "image": data.get("shirt_image") or "",
            "text": data.get("shirt_promo_text") or "",
            "disclaimer": data.get("shirt_promo_disclaimer") or "",
        }
        return data

    @field_validator("product_id", "container_id", mode="before")
    @classmethod
    def _to_str(cls, value: Any) -> str:
        return str(value).strip() if value is not None else ""

    @field_validator("product_id", "container_id")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value:
            raise ValueError("must be non-empty")
        return value


def load_registry(raw: Any) -> list[BuyBoxEntry]:
    """
    Parse the host product registry, skipping entries that don't validate.

    Args:
        raw: Decoded registry (expected: a list of objects)

    Returns:
        Valid entries in registry order
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning(f"Product registry must be a list, got {type(raw).__name__}")
        return []
    if not raw:
        logger.warning("No product buy box data found to initialize")
        return []

    entries = []
    for index, item in enumerate(raw):
        try:
            entries.append(BuyBoxEntry.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping registry entry {index}: {e.error_count()} validation error(s)")
    return entries
