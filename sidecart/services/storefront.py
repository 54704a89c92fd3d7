"""
Storefront GraphQL executor.

Single choke point for every remote call made by the cart engine:
- Fixed-interval retry (tenacity) on transport failures and non-2xx status
- Bounded per-request timeout, treated exactly like a network failure
- Cache-busting query parameter on every call (read-your-writes)
- GraphQL ``errors`` surface as RemoteProtocolError and are never retried
"""
import asyncio
import uuid
from typing import Any, Awaitable, Callable, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from sidecart.config import RetryPolicy, SidecartSettings
from sidecart.errors import ConfigurationError, NetworkError, RemoteProtocolError
from sidecart.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)

ACCESS_TOKEN_HEADER = "X-Shopify-Storefront-Access-Token"
CACHE_BUST_PARAM = "nocache"

Sleep = Callable[[float], Awaitable[None]]


def _cache_bust_value() -> str:
    return uuid.uuid4().hex


class StorefrontClient:
    """
    Executes queries and mutations against the storefront API.

    Args:
        settings: Endpoint, token, timeout and retry configuration
        http_client: Optional shared httpx client (tests pass one with a MockTransport)
        sleep: Awaitable used between attempts; injectable so tests don't wait
    """

    def __init__(
        self,
        settings: SidecartSettings,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.settings = settings
        self.retry_policy: RetryPolicy = settings.retry_policy
        self._http_client = http_client
        self._owns_client = http_client is None
        self._sleep = sleep
        self._config_error_reported = False

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of the shared httpx client with timeouts."""
        if self._http_client is None:
            timeout = self.settings.request_timeout
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "StorefrontClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _check_configuration(self) -> None:
        if self.settings.is_configured:
            return
        if not self._config_error_reported:
            logger.error("Missing storeUrl or storefrontToken; storefront calls are disabled")
            self._config_error_reported = True
        raise ConfigurationError("Storefront API credentials missing.")

    async def execute(self, operation: str, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Run a query or mutation and return its ``data`` object.

        Args:
            operation: GraphQL document
            variables: GraphQL variables

        Returns:
            The ``data`` member of the response

        Raises:
            ConfigurationError: endpoint or token missing (no request is sent)
            NetworkError: every attempt failed at the transport level
            RemoteProtocolError: the response carried GraphQL errors
        """
        self._check_configuration()
        payload = {"query": operation, "variables": variables or {}}
        policy = self.retry_policy

        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_fixed(policy.delay),
            retry=retry_if_exception_type(NetworkError),
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    body = await self._post(payload, attempt.retry_state.attempt_number)
        except NetworkError as e:
            logger.error(f"Storefront request failed after {e.attempts} attempts: {e.cause!r}")
            raise

        return self._extract_data(body)

    async def _post(self, payload: dict[str, Any], attempt_number: int) -> dict[str, Any]:
        """Send one attempt. Any transport-level problem becomes a NetworkError."""
        total = self.retry_policy.max_attempts
        client = await self._get_http_client()
        # Merged into the endpoint's own query string, never replacing it
        url = httpx.URL(self.settings.endpoint_url).copy_merge_params(
            {CACHE_BUST_PARAM: _cache_bust_value()}
        )
        try:
            response = await client.post(
                url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    ACCESS_TOKEN_HEADER: self.settings.access_token,
                },
            )
            response.raise_for_status()
            body = response.json()
            if not isinstance(body, dict):
                raise ValueError("Storefront response must be a JSON object")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Storefront request failed (attempt {attempt_number}/{total}): {e!r}")
            raise NetworkError(f"Storefront request failed: {e}", cause=e, attempts=attempt_number) from e
        return body

    @staticmethod
    def _extract_data(body: dict[str, Any]) -> dict[str, Any]:
        errors = body.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message") if isinstance(first, dict) else str(first)
            message = message or "Unknown storefront error"
            logger.error(f"Storefront GraphQL errors: {sanitize_string_for_logging(message, 200)}")
            raise RemoteProtocolError(message, errors=errors if isinstance(errors, list) else [errors])

        data = body.get("data")
        if not isinstance(data, dict):
            raise RemoteProtocolError("Storefront response is missing data")
        return data
