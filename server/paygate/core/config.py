from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaymentEnvironment(str, Enum):
    """Processor environment selecting sandbox or live endpoints."""
    SANDBOX = "sandbox"
    LIVE = "live"


@dataclass(frozen=True)
class ProviderCredentials:
    """
    Read-only processor credentials shared by every gateway call.

    Field names match the settings they are loaded from so that a
    configuration error can name the exact variable an operator must set.
    Secret values are excluded from ``repr``.
    """
    environment: PaymentEnvironment = PaymentEnvironment.SANDBOX
    app_base_url: Optional[str] = None
    stripe_secret_key: Optional[str] = field(default=None, repr=False)
    stripe_publishable_key: Optional[str] = None
    paypal_client_id: Optional[str] = None
    paypal_client_secret: Optional[str] = field(default=None, repr=False)
    paystack_secret_key: Optional[str] = field(default=None, repr=False)
    paystack_public_key: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.environment is PaymentEnvironment.LIVE


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Paygate")
    environment: str = Field(default="development")
    payment_environment: PaymentEnvironment = Field(
        default=PaymentEnvironment.SANDBOX,
        description="Processor environment: 'sandbox' or 'live'",
    )
    app_base_url: Optional[str] = Field(default=None, description="Base URL used for callback and return links")
    brand_name: str = Field(default="FreelanceHub", description="Brand shown on hosted checkout pages")
    reference_prefix: Optional[str] = Field(
        default=None,
        description="Prefix for transaction references; the payer id is used when unset",
    )

    # Stripe (client-secret flow)
    stripe_secret_key: Optional[SecretStr] = Field(default=None)
    stripe_publishable_key: Optional[str] = Field(default=None)

    # PayPal (redirect/approval flow)
    paypal_client_id: Optional[str] = Field(default=None)
    paypal_client_secret: Optional[SecretStr] = Field(default=None)

    # Paystack (hosted-page flow)
    paystack_secret_key: Optional[SecretStr] = Field(default=None)
    paystack_public_key: Optional[str] = Field(default=None)

    token_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for processor token exchange")
    session_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout for session/order creation")

    @model_validator(mode="before")
    @classmethod
    def normalize_payment_environment(cls, data: dict) -> dict:
        """Accept 'production' as an alias for the live environment."""
        if not isinstance(data, dict):
            return data
        data = data.copy()
        value = data.get("payment_environment")
        if isinstance(value, str):
            value = value.strip().lower()
            data["payment_environment"] = "live" if value == "production" else value
        return data

    def provider_credentials(self) -> ProviderCredentials:
        """Build the immutable credential snapshot handed to the gateway service."""
        return ProviderCredentials(
            environment=self.payment_environment,
            app_base_url=self.app_base_url,
            stripe_secret_key=_reveal(self.stripe_secret_key),
            stripe_publishable_key=self.stripe_publishable_key,
            paypal_client_id=self.paypal_client_id,
            paypal_client_secret=_reveal(self.paypal_client_secret),
            paystack_secret_key=_reveal(self.paystack_secret_key),
            paystack_public_key=self.paystack_public_key,
        )


def _reveal(secret: Optional[SecretStr]) -> Optional[str]:
    return secret.get_secret_value() if secret is not None else None


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Credentials are read once per process; callers that need a fresh
    read (tests, reloads) must call ``clear_settings_cache`` first.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the cached settings instance."""
    get_settings.cache_clear()
