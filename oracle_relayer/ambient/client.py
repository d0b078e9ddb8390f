"""
HTTP client for the Ambient inference API.

Sends one non-streaming chat completion that asks for an inline integrity
receipt, and decodes the receipt's merkle root into 32 bytes for on-chain
storage.
"""
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from oracle_relayer.config import settings
from oracle_relayer.exceptions import (
    AmbientApiError,
    MissingCredentialsError,
    ReceiptEncodingError,
    SchemaViolationError,
)
from oracle_relayer.net.retry_client import DEFAULT_RETRY_POLICY, RetryPolicy, SleepFunc, fetch_with_retry
from oracle_relayer.utils.logger import logger

ROOT_BYTES = 32
EMPTY_RECEIPT_ROOT = bytes(ROOT_BYTES)


class AmbientInvocationResult(BaseModel):
    """
    Result of a single inference call.

    Attributes:
        raw_response_body: Decoded JSON body as returned by the API
        response_text: First choice's message content ("" when absent)
        receipt_present: Whether the response carried a merkle root
        receipt_root_bytes: 32-byte root; all zeros when no receipt is present
            and never a valid commitment in that case
    """
    raw_response_body: Any = None
    response_text: str = ""
    receipt_present: bool = False
    receipt_root_bytes: bytes = Field(default=EMPTY_RECEIPT_ROOT)

    model_config = ConfigDict(frozen=True)

    @field_validator("receipt_root_bytes")
    @classmethod
    def check_root_length(cls, value: bytes) -> bytes:
        if len(value) != ROOT_BYTES:
            raise ValueError(f"receipt_root_bytes must be {ROOT_BYTES} bytes, got {len(value)}")
        return value

    @property
    def receipt_root_hex(self) -> str:
        return self.receipt_root_bytes.hex()


def merkle_root_bytes(merkle_root: str) -> bytes:
    """
    Decode a hex merkle root (optionally ``0x``-prefixed) into exactly 32 bytes.

    Odd-length hex gets one leading zero, then the value is left-padded to 64
    hex characters.

    Raises:
        ReceiptEncodingError: If the hex is longer than 64 characters or not hex
    """
    hex_str = str(merkle_root)
    if hex_str.startswith("0x"):
        hex_str = hex_str[2:]
    if len(hex_str) % 2 == 1:
        hex_str = f"0{hex_str}"
    if len(hex_str) > ROOT_BYTES * 2:
        raise ReceiptEncodingError("merkle_root hex too long")
    try:
        return bytes.fromhex(hex_str.rjust(ROOT_BYTES * 2, "0"))
    except ValueError as e:
        raise ReceiptEncodingError(f"merkle_root is not valid hex: {merkle_root!r}") from e


def _dig(data: Any, *path: Any) -> Any:
    node = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or len(node) <= key:
                return None
            node = node[key]
        else:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
    return node


def extract_response_text(data: Any) -> str:
    """First choice's message content, falling back to a partial stream delta."""
    content = _dig(data, "choices", 0, "message", "content")
    if content is None:
        content = _dig(data, "choices", 0, "delta", "content")
    return content if isinstance(content, str) else ""


def extract_merkle_root(data: Any) -> Optional[str]:
    root = _dig(data, "receipt", "merkle_root")
    if root is None:
        root = _dig(data, "merkle_root")
    return root or None


class AmbientClient:
    """
    HTTP client for Ambient chat completions.

    Usage:
        async with AmbientClient(api_key="...") as client:
            result = await client.invoke(prompt, "ambient-1")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        """
        Initialize the Ambient client.

        Args:
            api_key: Bearer token (default from AMBIENT_API_KEY)
            base_url: Chat completions URL (default from AMBIENT_API_URL)
            http_client: Shared AsyncClient, left open on close
            timeout: Request timeout in seconds (default HTTP_TIMEOUT_SECONDS)
            sleep: Retry backoff sleep override
        """
        self.api_key = api_key if api_key is not None else settings.AMBIENT_API_KEY
        self.url = base_url or settings.AMBIENT_API_URL
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        )
        self._sleep = sleep

    def _get_headers(self, api_key: str) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    @staticmethod
    def build_request_body(prompt: str, model_id: str) -> dict:
        return {
            "model": model_id,
            "stream": False,
            "emit_verified": True,
            "wait_for_verification": False,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def invoke(
        self,
        prompt: str,
        model_id: str,
        api_key: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> AmbientInvocationResult:
        """
        Run one inference request.

        Args:
            prompt: User prompt
            model_id: Model identifier (at most 64 characters)
            api_key: Overrides the client's key for this call
            retry_policy: HTTP retry policy (default: no retries)

        Returns:
            AmbientInvocationResult

        Raises:
            AmbientApiError: On a non-2xx status
            ReceiptEncodingError: If the receipt root cannot be decoded
        """
        settings.validate_model_id(model_id)
        key = api_key or self.api_key
        if not key:
            raise MissingCredentialsError("Missing AMBIENT_API_KEY in env")

        kwargs: dict = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep

        logger.info(f"[Ambient] Invoking model={model_id} prompt_chars={len(prompt)}")
        response = await fetch_with_retry(
            self.client,
            "POST",
            self.url,
            retry_policy or DEFAULT_RETRY_POLICY,
            headers=self._get_headers(key),
            json=self.build_request_body(prompt, model_id),
            **kwargs,
        )

        if not response.is_success:
            logger.error(f"[Ambient] API error {response.status_code}: {response.text[:500]}")
            raise AmbientApiError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise SchemaViolationError("Ambient API returned a non-JSON body") from e
        merkle_root = extract_merkle_root(data)
        receipt_root = merkle_root_bytes(merkle_root) if merkle_root else EMPTY_RECEIPT_ROOT
        return AmbientInvocationResult(
            raw_response_body=data,
            response_text=extract_response_text(data),
            receipt_present=bool(merkle_root),
            receipt_root_bytes=receipt_root,
        )

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


async def call_ambient(
    prompt: str,
    model_id: str,
    api_key: str,
    retry_policy: Optional[RetryPolicy] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> AmbientInvocationResult:
    """One-shot helper: invoke the model with a short-lived client."""
    async with AmbientClient(api_key=api_key, http_client=http_client) as client:
        return await client.invoke(prompt, model_id, retry_policy=retry_policy)
