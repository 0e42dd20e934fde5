"""
Provider credential checks.

Pure, synchronous inspection of the loaded ``ProviderCredentials``. Runs
before any adapter is built so a misconfigured processor is reported with
the exact settings to fix, without touching the network.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Tuple

from paygate.core.config import PaymentEnvironment, ProviderCredentials
from paygate.integrations.payment_gateways.base import ConfigurationError, ProviderType

REQUIRED_FIELDS: Mapping[ProviderType, Tuple[str, ...]] = {
    ProviderType.STRIPE: ("stripe_secret_key", "stripe_publishable_key"),
    ProviderType.PAYPAL: ("paypal_client_id", "paypal_client_secret", "app_base_url"),
    ProviderType.PAYSTACK: ("paystack_secret_key", "paystack_public_key", "app_base_url"),
}

# Keys that encode their own mode in a prefix (sk_test_..., sk_live_...).
MODE_PREFIXED_KEYS: Mapping[ProviderType, Tuple[str, ...]] = {
    ProviderType.STRIPE: ("stripe_secret_key", "stripe_publishable_key"),
    ProviderType.PAYSTACK: ("paystack_secret_key", "paystack_public_key"),
}

_MODE_MARKERS = {
    PaymentEnvironment.SANDBOX: "_live_",
    PaymentEnvironment.LIVE: "_test_",
}


@dataclass(frozen=True)
class ProviderStatus:
    provider: ProviderType
    configured: bool
    missing_fields: List[str] = field(default_factory=list)
    invalid_fields: List[str] = field(default_factory=list)


class CredentialGuard:
    """Checks that a processor's credentials are present before any call."""

    def __init__(self, credentials: ProviderCredentials):
        self.credentials = credentials

    def missing_fields(self, provider: ProviderType) -> List[str]:
        """Names of required settings that are unset or blank."""
        missing = []
        for name in REQUIRED_FIELDS[ProviderType(provider)]:
            value = getattr(self.credentials, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

    def invalid_fields(self, provider: ProviderType) -> List[str]:
        """Keys whose test/live mode contradicts the configured environment."""
        wrong_marker = _MODE_MARKERS[self.credentials.environment]
        invalid = []
        for name in MODE_PREFIXED_KEYS.get(ProviderType(provider), ()):
            value = getattr(self.credentials, name)
            if value and wrong_marker in value:
                invalid.append(name)
        return invalid

    def check(self, provider: ProviderType) -> None:
        """
        Raise ``ConfigurationError`` naming every missing or invalid field.

        Returns ``None`` when the provider is ready to use.
        """
        provider = ProviderType(provider)
        missing = self.missing_fields(provider)
        invalid = self.invalid_fields(provider)
        if missing or invalid:
            raise ConfigurationError(provider.value, missing_fields=missing, invalid_fields=invalid)

    def status(self) -> Dict[ProviderType, ProviderStatus]:
        report = {}
        for provider in ProviderType:
            missing = self.missing_fields(provider)
            invalid = self.invalid_fields(provider)
            report[provider] = ProviderStatus(
                provider=provider,
                configured=not missing and not invalid,
                missing_fields=missing,
                invalid_fields=invalid,
            )
        return report
