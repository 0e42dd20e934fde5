"""
Payment Gateway Base Classes and Interfaces

Defines the contract shared by every checkout-session adapter: the
provider-agnostic request and result types, the unified error taxonomy,
and the abstract ``PaymentGateway`` capability each processor implements.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union


class ProviderType(str, Enum):
    """Supported payment processors."""
    STRIPE = "stripe"
    PAYPAL = "paypal"
    PAYSTACK = "paystack"


class CheckoutFlow(str, Enum):
    """How the payer completes a session."""
    CLIENT_SECRET = "client_secret"  # completed by a client-side SDK
    REDIRECT = "redirect"  # completed on a processor-hosted page


class AmountUnit(str, Enum):
    """Unit a processor expects amounts in."""
    MINOR = "minor"
    MAJOR = "major"


class ProviderErrorKind(str, Enum):
    """Normalized failure categories for processor calls."""
    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    AUTHENTICATION = "authentication"
    RATE_LIMITED = "rate_limited"
    REJECTED = "rejected"
    MALFORMED_RESPONSE = "malformed_response"


RETRYABLE_KINDS = frozenset({
    ProviderErrorKind.NETWORK,
    ProviderErrorKind.TIMEOUT,
    ProviderErrorKind.RATE_LIMITED,
})


@dataclass(frozen=True)
class Payer:
    """Identity of the person paying."""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class Purpose:
    """What the payment is for."""
    description: str = "Freelance service payment"
    correlation_id: Optional[str] = None  # e.g. project or booking id


@dataclass(frozen=True)
class PaymentRequest:
    """Provider-agnostic payment request built by the caller."""
    amount: Union[Decimal, int, float, str]
    currency: str
    payer: Optional[Payer]
    provider: Union[ProviderType, str]
    purpose: Purpose = field(default_factory=Purpose)
    idempotency_key: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NormalizedAmount:
    """Amount expressed the way a specific processor expects it."""
    value: Union[int, str]
    unit: AmountUnit
    currency: str
    exponent: int


@dataclass(frozen=True)
class SessionRequest:
    """Validated, normalized input handed to an adapter."""
    amount: NormalizedAmount
    reference: str
    payer: Payer
    purpose: Purpose
    idempotency_key: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionResult:
    """Unified result of a checkout session creation."""
    provider: ProviderType
    session_id: str
    reference: str
    amount: NormalizedAmount
    client_secret: Optional[str] = field(default=None, repr=False)
    redirect_url: Optional[str] = None
    access_code: Optional[str] = None
    public_key: Optional[str] = None  # for the client-side SDK
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        if (self.client_secret is None) == (self.redirect_url is None):
            raise ValueError("exactly one of client_secret or redirect_url must be set")

    @property
    def flow(self) -> CheckoutFlow:
        return CheckoutFlow.CLIENT_SECRET if self.client_secret is not None else CheckoutFlow.REDIRECT


class GatewayError(Exception):
    """Base class for every error raised by the gateway core."""

    error_type = "gateway_error"
    retryable = False

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.error_message = message
        self.provider = provider

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.error_type,
            "message": self.error_message,
            "provider": self.provider,
            "retryable": self.retryable,
        }


class ValidationError(GatewayError):
    """The caller's request is malformed; not retryable without changes."""

    error_type = "validation_error"

    def __init__(self, message: str, field_name: Optional[str] = None, provider: Optional[str] = None):
        super().__init__(message, provider=provider)
        self.field_name = field_name

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field_name
        return data


class ConfigurationError(GatewayError):
    """Required processor credentials are missing or inconsistent."""

    error_type = "configuration_error"

    def __init__(
        self,
        provider: str,
        missing_fields: Sequence[str] = (),
        invalid_fields: Sequence[str] = (),
    ):
        self.missing_fields: List[str] = list(missing_fields)
        self.invalid_fields: List[str] = list(invalid_fields)
        parts = []
        if self.missing_fields:
            parts.append(f"missing {', '.join(self.missing_fields)}")
        if self.invalid_fields:
            parts.append(f"invalid {', '.join(self.invalid_fields)}")
        super().__init__(f"{provider} is not configured: {'; '.join(parts)}", provider=provider)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["missing_fields"] = self.missing_fields
        data["invalid_fields"] = self.invalid_fields
        return data


class ProviderError(GatewayError):
    """A processor call failed or returned an unusable response."""

    error_type = "provider_error"

    def __init__(
        self,
        provider: str,
        kind: ProviderErrorKind,
        message: str,
        raw: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, provider=provider)
        self.kind = kind
        self.raw = raw
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        if self.kind in RETRYABLE_KINDS:
            return True
        return self.kind is ProviderErrorKind.HTTP_STATUS and (self.status_code or 0) >= 500

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["kind"] = self.kind.value
        data["status_code"] = self.status_code
        return data


class TokenAcquisitionError(ProviderError):
    """Authenticating with a two-step processor failed before order creation."""

    error_type = "token_acquisition_error"


class PaymentGateway(ABC):
    """Abstract checkout-session capability implemented once per processor."""

    flow: CheckoutFlow
    requires_payer_email: bool = False

    def __init__(self, **config):
        """Initialize the payment gateway with configuration."""
        self.config = config
        self.gateway_type = self._get_gateway_type()

    @abstractmethod
    def _get_gateway_type(self) -> ProviderType:
        """Return the gateway type identifier."""

    @abstractmethod
    async def create_session(self, request: SessionRequest) -> SessionResult:
        """
        Create a checkout session with the processor.

        Args:
            request: Normalized request carrying the processor-ready amount
                and the transaction reference

        Returns:
            SessionResult with either a client secret or a redirect URL

        Raises:
            ProviderError: If the processor call fails or its response is unusable
            TokenAcquisitionError: If a two-step processor rejects authentication
        """

    def _error(
        self,
        kind: ProviderErrorKind,
        message: str,
        raw: Optional[Any] = None,
        status_code: Optional[int] = None,
    ) -> ProviderError:
        return ProviderError(self.gateway_type.value, kind, message, raw=raw, status_code=status_code)
