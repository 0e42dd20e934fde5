"""
Shared HTTP plumbing for processors called over plain REST.

Maps every transport outcome (connection failure, timeout, non-2xx status,
unparseable body) into the unified ``ProviderError`` taxonomy so adapters
never leak httpx exceptions.
"""

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Type

import httpx

from paygate.core.logging import get_logger

from .base import PaymentGateway, ProviderError, ProviderErrorKind

logger = get_logger(__name__)

DEFAULT_TOKEN_TIMEOUT = 10.0
DEFAULT_SESSION_TIMEOUT = 30.0


class HttpPaymentGateway(PaymentGateway):
    """Base for adapters that talk to their processor with httpx."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        token_timeout: float = DEFAULT_TOKEN_TIMEOUT,
        session_timeout: float = DEFAULT_SESSION_TIMEOUT,
        **config
    ):
        """
        Args:
            http_client: Shared client; when omitted each call opens and closes its own
            token_timeout: Seconds allowed for a token exchange
            session_timeout: Seconds allowed for session/order creation
            **config: Additional configuration
        """
        super().__init__(token_timeout=token_timeout, session_timeout=session_timeout, **config)
        self._http_client = http_client
        self.token_timeout = token_timeout
        self.session_timeout = session_timeout

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
        else:
            async with httpx.AsyncClient() as client:
                yield client

    async def _post_json(
        self,
        url: str,
        *,
        operation: str,
        timeout: float,
        error_cls: Type[ProviderError] = ProviderError,
        **kwargs: Any
    ) -> Dict[str, Any]:
        """
        POST to ``url`` and return the decoded JSON object.

        Exactly one request is sent; nothing is retried.

        Raises:
            error_cls: for transport failures, non-2xx responses and
                bodies that are not a JSON object
        """
        provider = self.gateway_type.value
        try:
            async with self._client() as client:
                response = await client.post(url, timeout=timeout, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{provider}.{operation}_timeout", timeout_seconds=timeout)
            raise error_cls(provider, ProviderErrorKind.TIMEOUT, f"{operation} timed out after {timeout}s", raw={"error": str(e)})
        except httpx.HTTPError as e:
            logger.warning(f"{provider}.{operation}_network_error", error=str(e))
            raise error_cls(provider, ProviderErrorKind.NETWORK, f"{operation} failed: {e.__class__.__name__}", raw={"error": str(e)})

        body = self._decode(response)

        if not response.is_success:
            kind = _kind_for_status(response.status_code)
            message = _error_message(body) or f"{operation} failed with HTTP {response.status_code}"
            logger.warning(
                f"{provider}.{operation}_rejected",
                status_code=response.status_code,
                error_kind=kind.value,
            )
            raise error_cls(provider, kind, message, raw=body if body is not None else response.text, status_code=response.status_code)

        if not isinstance(body, dict):
            raise error_cls(
                provider,
                ProviderErrorKind.MALFORMED_RESPONSE,
                f"{operation} returned a non-JSON response",
                raw=response.text,
                status_code=response.status_code,
            )
        return body

    @staticmethod
    def _decode(response: httpx.Response) -> Optional[Any]:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None


def _kind_for_status(status_code: int) -> ProviderErrorKind:
    if status_code in (401, 403):
        return ProviderErrorKind.AUTHENTICATION
    if status_code == 429:
        return ProviderErrorKind.RATE_LIMITED
    return ProviderErrorKind.HTTP_STATUS


def _error_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    for key in ("message", "error_description", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None
