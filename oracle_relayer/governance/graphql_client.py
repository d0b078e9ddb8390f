"""
Base GraphQL client for governance APIs.

Contains shared functionality used by the Snapshot and Tally adapters.
"""
from typing import Any, Dict, Optional

import httpx

from oracle_relayer.config import settings
from oracle_relayer.exceptions import GraphQLAPIError
from oracle_relayer.net.retry_client import GRAPHQL_RETRY_POLICY, RetryPolicy, SleepFunc, fetch_with_retry
from oracle_relayer.utils.logger import logger


class GraphQLClient:
    """
    Base class for governance GraphQL clients.

    Provides HTTP client setup, retrying POSTs, response handling and async
    context manager support. An injected ``http_client`` is never closed by
    this class.
    """

    source_label: str = "GraphQL"

    def __init__(
        self,
        endpoint: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        retry_policy: RetryPolicy = GRAPHQL_RETRY_POLICY,
        sleep: Optional[SleepFunc] = None,
    ):
        """
        Initialize the GraphQL client.

        Args:
            endpoint: GraphQL endpoint URL
            http_client: Shared AsyncClient (default: a new one owned by this client)
            timeout: Request timeout in seconds (default from HTTP_TIMEOUT_SECONDS)
            retry_policy: Retry policy applied to every query
            sleep: Backoff sleep override, mainly for tests
        """
        self.endpoint = endpoint
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        )
        self.retry_policy = retry_policy
        self._sleep = sleep

    def _get_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def _handle_response(self, response: httpx.Response) -> Dict[str, Any]:
        """
        Handle a GraphQL response and raise errors if needed.

        Args:
            response: HTTP response

        Returns:
            The ``data`` member of the GraphQL payload (empty dict if null)

        Raises:
            GraphQLAPIError: On non-2xx status, unparsable body or GraphQL errors
        """
        try:
            payload = response.json()
        except ValueError:
            payload = None

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if not response.is_success or errors:
            message = None
            if errors and isinstance(errors[0], dict):
                message = errors[0].get("message")
            message = message or f"{self.source_label} API error {response.status_code}"
            raise GraphQLAPIError(message, response.status_code, payload if isinstance(payload, dict) else None)

        if not isinstance(payload, dict):
            raise GraphQLAPIError(
                f"{self.source_label} API returned a non-JSON body",
                response.status_code,
            )
        return payload.get("data") or {}

    async def query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run a GraphQL query through the retrying HTTP client.

        Args:
            query: GraphQL document
            variables: Query variables

        Returns:
            The ``data`` member of the response
        """
        kwargs: Dict[str, Any] = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        response = await fetch_with_retry(
            self.client,
            "POST",
            self.endpoint,
            self.retry_policy,
            headers=self._get_headers(),
            json={"query": query, "variables": variables},
            **kwargs,
        )
        try:
            return self._handle_response(response)
        except GraphQLAPIError as e:
            logger.error(f"[{self.source_label}] query failed ({e.status_code}): {e.message}")
            raise

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
