"""
Client configuration.

The host page hands the client a configuration object
(``storeUrl``, ``storefrontToken``, ``freeShippingThreshold``). The same
values can be supplied through environment variables for the CLI.
Missing credentials never fail construction: the executor refuses to send
requests instead, so the cart degrades rather than crashing the page.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from sidecart.logging import get_logger

logger = get_logger(__name__)

# Free shipping at $150.00 unless the host page says otherwise
DEFAULT_FREE_SHIPPING_THRESHOLD = 15000
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_SUGGESTION_TARGET = 8


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-interval retry: ``max_attempts`` includes the first attempt."""
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay: float = DEFAULT_RETRY_DELAY

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must be non-negative")


class SidecartSettings(BaseModel):
    """Storefront endpoint, credentials and cart tunables."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    endpoint_url: str = Field(default="", alias="storeUrl")
    access_token: str = Field(default="", alias="storefrontToken")
    free_shipping_threshold: int = Field(
        default=DEFAULT_FREE_SHIPPING_THRESHOLD, alias="freeShippingThreshold", ge=0
    )
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, ge=0)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    suggestion_target: int = Field(default=DEFAULT_SUGGESTION_TARGET, ge=1)

    @field_validator("endpoint_url", "access_token", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @property
    def is_configured(self) -> bool:
        """True when both the endpoint and the access token are present."""
        return bool(self.endpoint_url and self.access_token)

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.max_attempts, delay=self.retry_delay)

    @classmethod
    def from_host_config(cls, config: Optional[Mapping[str, Any]]) -> "SidecartSettings":
        """
        Build settings from the host page configuration object.

        Accepts both the host's camelCase keys and the snake_case field names.
        A missing object yields unconfigured settings.
        """
        if not config:
            logger.error("Host configuration is missing; cart functionality will be limited")
            return cls()
        settings = cls.model_validate(dict(config))
        if not settings.is_configured:
            logger.error("Host configuration is incomplete: storeUrl and storefrontToken are required")
        return settings

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "SidecartSettings":
        """
        Build settings from SIDECART_* environment variables.

        A ``.env`` file is loaded first when present; real environment
        variables win over it.
        """
        load_dotenv(env_file)
        values: dict[str, Any] = {
            "endpoint_url": os.environ.get("SIDECART_STORE_URL", ""),
            "access_token": os.environ.get("SIDECART_STOREFRONT_TOKEN", ""),
        }
        optional = {
            "free_shipping_threshold": "SIDECART_FREE_SHIPPING_THRESHOLD",
            "max_attempts": "SIDECART_MAX_ATTEMPTS",
            "retry_delay": "SIDECART_RETRY_DELAY",
            "request_timeout": "SIDECART_REQUEST_TIMEOUT",
        }
        for field_name, env_name in optional.items():
            raw = os.environ.get(env_name)
            if raw:
                values[field_name] = raw
        return cls.model_validate(values)
