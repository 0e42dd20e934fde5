from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field

from paygate.integrations.payment_gateways.base import (
    CheckoutFlow,
    Payer,
    PaymentRequest,
    ProviderType,
    Purpose,
    SessionResult,
)
from paygate.services.amount_service import DEFAULT_CURRENCIES
from paygate.services.credential_service import ProviderStatus


class CheckoutSessionCreate(BaseModel):
    provider: ProviderType
    amount: Decimal = Field(gt=0, description="Amount in major currency units")
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    user_id: str = Field(min_length=1, max_length=128, validation_alias=AliasChoices("user_id", "userId"))
    email: str | None = Field(default=None, max_length=254)
    name: str | None = Field(default=None, max_length=120)
    description: str | None = Field(default=None, max_length=500)
    correlation_id: str | None = Field(
        default=None,
        max_length=120,
        validation_alias=AliasChoices("correlation_id", "project_id", "projectId"),
    )
    idempotency_key: str | None = Field(default=None, min_length=8, max_length=64)
    metadata: dict[str, str] = Field(default_factory=dict)

    def to_payment_request(self) -> PaymentRequest:
        purpose = Purpose(correlation_id=self.correlation_id)
        if self.description:
            purpose = Purpose(description=self.description, correlation_id=self.correlation_id)
        return PaymentRequest(
            amount=self.amount,
            currency=self.currency or DEFAULT_CURRENCIES[self.provider],
            payer=Payer(user_id=self.user_id, email=self.email, name=self.name),
            provider=self.provider,
            purpose=purpose,
            idempotency_key=self.idempotency_key,
            metadata=dict(self.metadata),
        )


class CheckoutSessionRead(BaseModel):
    provider: ProviderType
    flow: CheckoutFlow
    session_id: str
    reference: str
    amount: int | str
    amount_unit: str
    currency: str
    client_secret: str | None = None
    redirect_url: str | None = None
    access_code: str | None = None
    public_key: str | None = None

    @classmethod
    def from_result(cls, result: SessionResult) -> "CheckoutSessionRead":
        return cls(
            provider=result.provider,
            flow=result.flow,
            session_id=result.session_id,
            reference=result.reference,
            amount=result.amount.value,
            amount_unit=result.amount.unit.value,
            currency=result.amount.currency,
            client_secret=result.client_secret,
            redirect_url=result.redirect_url,
            access_code=result.access_code,
            public_key=result.public_key,
        )


class ProviderStatusRead(BaseModel):
    provider: ProviderType
    configured: bool
    missing_fields: list[str]
    invalid_fields: list[str]

    @classmethod
    def from_status(cls, status: ProviderStatus) -> "ProviderStatusRead":
        return cls(
            provider=status.provider,
            configured=status.configured,
            missing_fields=status.missing_fields,
            invalid_fields=status.invalid_fields,
        )
