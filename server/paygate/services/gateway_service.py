"""
Checkout session facade.

The single entry point the application calls to open a checkout session
with any supported processor. Every step before the adapter call is pure,
so a request that fails validation, configuration or normalization never
reaches the network.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Type

import httpx

from paygate.core.config import ProviderCredentials, Settings
from paygate.core.logging import get_logger
from paygate.integrations.payment_gateways.base import (
    GatewayError,
    Payer,
    PaymentGateway,
    PaymentRequest,
    ProviderType,
    SessionRequest,
    SessionResult,
    ValidationError,
)
from paygate.integrations.payment_gateways.paypal_adapter import PayPalAdapter
from paygate.integrations.payment_gateways.paystack_adapter import PaystackAdapter
from paygate.integrations.payment_gateways.stripe_adapter import StripeAdapter
from paygate.services.amount_service import normalize, normalize_currency, parse_amount, resolve_provider
from paygate.services.credential_service import CredentialGuard, ProviderStatus
from paygate.services.reference_service import generate_reference

logger = get_logger(__name__)

ADAPTER_CLASSES: Mapping[ProviderType, Type[PaymentGateway]] = {
    ProviderType.STRIPE: StripeAdapter,
    ProviderType.PAYPAL: PayPalAdapter,
    ProviderType.PAYSTACK: PaystackAdapter,
}


@dataclass(frozen=True)
class GatewayOptions:
    """Non-secret knobs shared by every adapter."""
    token_timeout: float = 10.0
    session_timeout: float = 30.0
    brand_name: str = "FreelanceHub"
    reference_prefix: Optional[str] = None
    http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GatewayOptions":
        return cls(
            token_timeout=settings.token_timeout_seconds,
            session_timeout=settings.session_timeout_seconds,
            brand_name=settings.brand_name,
            reference_prefix=settings.reference_prefix,
        )


class PaymentGatewayService:
    """Validates, normalizes and routes payment requests to processor adapters."""

    def __init__(
        self,
        credentials: ProviderCredentials,
        options: Optional[GatewayOptions] = None,
        adapters: Optional[Mapping[ProviderType, PaymentGateway]] = None,
    ):
        """
        Args:
            credentials: Read-only processor credentials
            options: Timeouts, branding and transport overrides
            adapters: Prebuilt adapters by provider; others are built on first use
        """
        self.credentials = credentials
        self.options = options or GatewayOptions()
        self.guard = CredentialGuard(credentials)
        self._adapters: Dict[ProviderType, PaymentGateway] = dict(adapters or {})

    async def create_session(self, request: PaymentRequest) -> SessionResult:
        """
        Create a checkout session for ``request``.

        At most one session-creation call reaches the processor (PayPal adds
        its token exchange before it). Nothing is retried.

        Raises:
            ValidationError: malformed request or unknown provider
            ConfigurationError: processor credentials missing or inconsistent
            TokenAcquisitionError: PayPal rejected the client credentials
            ProviderError: the processor call failed or returned an unusable response
        """
        payer = self._validate_request(request)
        provider = resolve_provider(request.provider)
        self._validate_payer_for(provider, payer)
        self.guard.check(provider)

        amount = normalize(request.amount, request.currency, provider)
        reference = generate_reference(
            self.options.reference_prefix,
            payer.user_id,
            request.purpose.correlation_id,
        )
        adapter = self._get_adapter(provider)

        log = logger.bind(provider=provider.value, reference=reference)
        log.info(
            "checkout.session_requested",
            currency=amount.currency,
            amount=str(amount.value),
            unit=amount.unit.value,
        )
        try:
            result = await adapter.create_session(
                SessionRequest(
                    amount=amount,
                    reference=reference,
                    payer=payer,
                    purpose=request.purpose,
                    idempotency_key=request.idempotency_key,
                    metadata=dict(request.metadata),
                )
            )
        except GatewayError as e:
            log.warning("checkout.session_failed", **_error_fields(e))
            raise

        log.info("checkout.session_created", session_id=result.session_id, flow=result.flow.value)
        return result

    def provider_status(self) -> Dict[ProviderType, ProviderStatus]:
        return self.guard.status()

    @staticmethod
    def _validate_request(request: PaymentRequest) -> Payer:
        parse_amount(request.amount)
        payer = request.payer
        if payer is None or not (payer.user_id or "").strip():
            raise ValidationError("payer user id is required", field_name="payer")
        normalize_currency(request.currency)
        return payer

    def _validate_payer_for(self, provider: ProviderType, payer: Payer) -> None:
        adapter = self._adapters.get(provider) or ADAPTER_CLASSES[provider]
        if adapter.requires_payer_email:
            email = (payer.email or "").strip()
            if not email or "@" not in email:
                raise ValidationError(
                    f"a valid payer email is required for {provider.value}",
                    field_name="payer.email",
                    provider=provider.value,
                )

    def _get_adapter(self, provider: ProviderType) -> PaymentGateway:
        adapter = self._adapters.get(provider)
        if adapter is None:
            adapter = self._build_adapter(provider)
            self._adapters[provider] = adapter
        return adapter

    def _build_adapter(self, provider: ProviderType) -> PaymentGateway:
        credentials = self.credentials
        options = self.options
        if provider is ProviderType.STRIPE:
            return StripeAdapter(
                api_key=credentials.stripe_secret_key,
                publishable_key=credentials.stripe_publishable_key,
                session_timeout=options.session_timeout,
            )
        if provider is ProviderType.PAYPAL:
            return PayPalAdapter(
                client_id=credentials.paypal_client_id,
                client_secret=credentials.paypal_client_secret,
                app_base_url=credentials.app_base_url,
                sandbox=not credentials.is_live,
                brand_name=options.brand_name,
                http_client=options.http_client,
                token_timeout=options.token_timeout,
                session_timeout=options.session_timeout,
            )
        if provider is ProviderType.PAYSTACK:
            return PaystackAdapter(
                secret_key=credentials.paystack_secret_key,
                public_key=credentials.paystack_public_key,
                app_base_url=credentials.app_base_url,
                http_client=options.http_client,
                token_timeout=options.token_timeout,
                session_timeout=options.session_timeout,
            )
        raise ValidationError(f"unknown payment provider: {provider!r}", field_name="provider")


def _error_fields(error: GatewayError) -> Dict[str, object]:
    fields: Dict[str, object] = {"error_type": error.error_type, "error": error.error_message}
    kind = getattr(error, "kind", None)
    if kind is not None:
        fields["error_kind"] = kind.value
    return fields


def build_gateway_service(settings: Settings) -> PaymentGatewayService:
    """Wire a gateway service from application settings."""
    return PaymentGatewayService(
        credentials=settings.provider_credentials(),
        options=GatewayOptions.from_settings(settings),
    )
