"""
Payment gateway integration modules

Provides checkout-session adapters for Stripe, PayPal and Paystack
with a consistent interface and error taxonomy.
"""

from .base import (
    AmountUnit,
    CheckoutFlow,
    ConfigurationError,
    GatewayError,
    NormalizedAmount,
    Payer,
    PaymentGateway,
    PaymentRequest,
    ProviderError,
    ProviderErrorKind,
    ProviderType,
    Purpose,
    SessionRequest,
    SessionResult,
    TokenAcquisitionError,
    ValidationError,
)
from .paypal_adapter import PayPalAdapter
from .paystack_adapter import PaystackAdapter
from .stripe_adapter import StripeAdapter

__all__ = [
    "AmountUnit",
    "CheckoutFlow",
    "ConfigurationError",
    "GatewayError",
    "NormalizedAmount",
    "Payer",
    "PaymentGateway",
    "PaymentRequest",
    "PayPalAdapter",
    "PaystackAdapter",
    "ProviderError",
    "ProviderErrorKind",
    "ProviderType",
    "Purpose",
    "SessionRequest",
    "SessionResult",
    "StripeAdapter",
    "TokenAcquisitionError",
    "ValidationError",
]
