from paygate.schemas.checkout import CheckoutSessionCreate, CheckoutSessionRead, ProviderStatusRead

__all__ = [
    "CheckoutSessionCreate",
    "CheckoutSessionRead",
    "ProviderStatusRead",
]
