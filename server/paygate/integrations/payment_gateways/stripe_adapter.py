"""
Stripe Payment Gateway Adapter

Creates Stripe Payment Intents whose client secret is handed to Stripe.js
on the client to complete the payment.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from stripe import (
    APIConnectionError,
    AuthenticationError,
    CardError,
    IdempotencyError,
    InvalidRequestError,
    RateLimitError,
    StripeClient,
    StripeError,
)
from stripe import PermissionError as StripePermissionError

from paygate.core.logging import get_logger

from .base import (
    CheckoutFlow,
    PaymentGateway,
    ProviderError,
    ProviderErrorKind,
    ProviderType,
    SessionRequest,
    SessionResult,
)
from .state import SessionAttempt, SessionState

logger = get_logger(__name__)

DEFAULT_SESSION_TIMEOUT = 30.0

# Stripe caps metadata values at 500 characters.
METADATA_VALUE_LIMIT = 500


class StripeAdapter(PaymentGateway):
    """Stripe payment gateway adapter (client-secret flow)."""

    flow = CheckoutFlow.CLIENT_SECRET

    def __init__(
        self,
        api_key: str,
        publishable_key: Optional[str] = None,
        session_timeout: float = DEFAULT_SESSION_TIMEOUT,
        client: Optional[StripeClient] = None,
        **config
    ):
        """
        Initialize Stripe adapter.

        Args:
            api_key: Stripe secret API key
            publishable_key: Stripe publishable key, returned to the client alongside the secret
            session_timeout: Seconds allowed for the Payment Intent call
            client: Preconfigured StripeClient; built from ``api_key`` when omitted
            **config: Additional configuration
        """
        super().__init__(publishable_key=publishable_key, session_timeout=session_timeout, **config)
        # Retries stay with the caller; a retried create could double charge.
        self.client = client or StripeClient(api_key, max_network_retries=0)
        self.publishable_key = publishable_key
        self.session_timeout = session_timeout

    def _get_gateway_type(self) -> ProviderType:
        """Return the gateway type identifier."""
        return ProviderType.STRIPE

    async def create_session(self, request: SessionRequest) -> SessionResult:
        """
        Create a Stripe Payment Intent.

        Args:
            request: Normalized request; the amount is an integer in minor units

        Returns:
            SessionResult carrying the intent id and its client secret

        Raises:
            ProviderError: If Stripe rejects the call, times out or omits the client secret
        """
        attempt = SessionAttempt(self.gateway_type.value, request.reference)
        options: Dict[str, Any] = {}
        if request.idempotency_key:
            options["idempotency_key"] = request.idempotency_key

        try:
            attempt.advance(SessionState.REQUESTED, currency=request.amount.currency)
            try:
                payment_intent = await asyncio.wait_for(
                    self.client.v1.payment_intents.create_async(
                        params=self._build_intent_params(request),
                        options=options,
                    ),
                    timeout=self.session_timeout,
                )
            except asyncio.TimeoutError:
                raise self._error(
                    ProviderErrorKind.TIMEOUT,
                    f"Stripe payment intent creation timed out after {self.session_timeout}s",
                )
            except StripeError as e:
                raise self._map_stripe_error(e)

            intent_id = getattr(payment_intent, "id", None)
            client_secret = getattr(payment_intent, "client_secret", None)
            if not intent_id or not client_secret:
                raise self._error(
                    ProviderErrorKind.MALFORMED_RESPONSE,
                    "Stripe payment intent is missing id or client_secret",
                    raw={"id": intent_id, "status": getattr(payment_intent, "status", None)},
                )

            result = SessionResult(
                provider=self.gateway_type,
                session_id=intent_id,
                reference=request.reference,
                amount=request.amount,
                client_secret=client_secret,
                public_key=self.publishable_key,
                raw=payment_intent.to_dict(),
            )
            attempt.advance(SessionState.SUCCEEDED, session_id=intent_id, status=getattr(payment_intent, "status", None))
            return result
        except Exception as e:
            attempt.fail(error=str(e), error_type=e.__class__.__name__)
            raise

    def _build_intent_params(self, request: SessionRequest) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "amount": request.amount.value,
            "currency": request.amount.currency.lower(),
            "description": request.purpose.description,
            "metadata": self._build_metadata(request),
            "automatic_payment_methods": {"enabled": True},
        }
        if request.payer.email:
            params["receipt_email"] = request.payer.email
        return params

    @staticmethod
    def _build_metadata(request: SessionRequest) -> Dict[str, str]:
        metadata = {str(key): str(value)[:METADATA_VALUE_LIMIT] for key, value in request.metadata.items()}
        metadata.update({
            "reference": request.reference,
            "user_id": request.payer.user_id,
            "description": request.purpose.description[:METADATA_VALUE_LIMIT],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
        if request.purpose.correlation_id:
            metadata["correlation_id"] = request.purpose.correlation_id
        return metadata

    def _map_stripe_error(self, error: StripeError) -> ProviderError:
        """Translate a Stripe SDK exception into the unified taxonomy."""
        if isinstance(error, APIConnectionError):
            kind = ProviderErrorKind.NETWORK
        elif isinstance(error, (AuthenticationError, StripePermissionError)):
            kind = ProviderErrorKind.AUTHENTICATION
        elif isinstance(error, RateLimitError):
            kind = ProviderErrorKind.RATE_LIMITED
        elif isinstance(error, (CardError, InvalidRequestError, IdempotencyError)):
            kind = ProviderErrorKind.REJECTED
        elif error.http_status:
            kind = ProviderErrorKind.HTTP_STATUS
        else:
            kind = ProviderErrorKind.NETWORK

        logger.warning(
            "stripe.payment_intent_failed",
            error_kind=kind.value,
            status_code=error.http_status,
            stripe_code=error.code,
        )
        return self._error(
            kind,
            error.user_message or str(error) or "Stripe request failed",
            raw=error.json_body,
            status_code=error.http_status,
        )
