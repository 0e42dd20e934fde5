"""
Amount normalization for payment processors.

Converts a major-unit amount (dollars, naira) into the representation a
processor expects: an integer count of minor units, or a canonical decimal
string in major units. Uses a single ISO 4217 exponent table; processor
quirks are explicit overrides on top of it, never a separate table.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Mapping, Optional, Union

from paygate.integrations.payment_gateways.base import (
    AmountUnit,
    NormalizedAmount,
    ProviderType,
    ValidationError,
)

DEFAULT_EXPONENT = 2

# ISO 4217 minor-unit exponents that differ from the default of 2.
CURRENCY_EXPONENTS: Mapping[str, int] = {
    # zero-decimal
    "BIF": 0, "CLP": 0, "DJF": 0, "GNF": 0, "ISK": 0, "JPY": 0, "KMF": 0,
    "KRW": 0, "PYG": 0, "RWF": 0, "UGX": 0, "UYI": 0, "VND": 0, "VUV": 0,
    "XAF": 0, "XOF": 0, "XPF": 0,
    # three-decimal
    "BHD": 3, "IQD": 3, "JOD": 3, "KWD": 3, "LYD": 3, "OMR": 3, "TND": 3,
    # four-decimal
    "CLF": 4, "UYW": 4,
}

# Documented processor deviations from ISO 4217.
PROVIDER_EXPONENT_OVERRIDES: Mapping[ProviderType, Mapping[str, int]] = {
    # Stripe still expects ISK and UGX as two-decimal amounts.
    ProviderType.STRIPE: {"ISK": 2, "UGX": 2},
    # PayPal rejects decimals for these.
    ProviderType.PAYPAL: {"HUF": 0, "TWD": 0},
    ProviderType.PAYSTACK: {},
}

# Minor-unit amounts a processor only accepts as a multiple of a step.
PROVIDER_MINOR_UNIT_STEPS: Mapping[ProviderType, Mapping[str, int]] = {
    # Stripe needs the last digit of three-decimal amounts to be 0.
    ProviderType.STRIPE: {"BHD": 10, "JOD": 10, "KWD": 10, "OMR": 10, "TND": 10},
    ProviderType.PAYPAL: {},
    ProviderType.PAYSTACK: {},
}

PROVIDER_AMOUNT_UNITS: Mapping[ProviderType, AmountUnit] = {
    ProviderType.STRIPE: AmountUnit.MINOR,
    ProviderType.PAYPAL: AmountUnit.MAJOR,
    ProviderType.PAYSTACK: AmountUnit.MINOR,
}

# None means any well-formed ISO 4217 code is accepted.
PROVIDER_CURRENCIES: Mapping[ProviderType, Optional[frozenset]] = {
    ProviderType.STRIPE: None,
    ProviderType.PAYPAL: frozenset({
        "USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CHF", "SEK",
        "NOK", "DKK", "PLN", "CZK", "HUF", "ILS", "MXN", "BRL",
        "PHP", "TWD", "THB", "SGD", "HKD", "MYR", "NZD",
    }),
    ProviderType.PAYSTACK: frozenset({"NGN", "GHS", "ZAR", "KES", "USD"}),
}

DEFAULT_CURRENCIES: Mapping[ProviderType, str] = {
    ProviderType.STRIPE: "USD",
    ProviderType.PAYPAL: "USD",
    ProviderType.PAYSTACK: "NGN",
}

_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")

AmountInput = Union[Decimal, int, float, str]


def normalize_currency(currency: Optional[str]) -> str:
    code = (currency or "").strip().upper()
    if not code:
        raise ValidationError("currency is required", field_name="currency")
    if not _CURRENCY_PATTERN.match(code):
        raise ValidationError(f"invalid currency code: {currency!r}", field_name="currency")
    return code


def currency_exponent(currency: str, provider: Optional[ProviderType] = None) -> int:
    """Return the number of minor-unit digits for ``currency`` at ``provider``."""
    code = normalize_currency(currency)
    if provider is not None:
        override = PROVIDER_EXPONENT_OVERRIDES.get(provider, {}).get(code)
        if override is not None:
            return override
    return CURRENCY_EXPONENTS.get(code, DEFAULT_EXPONENT)


def parse_amount(amount: AmountInput) -> Decimal:
    """Parse a positive, finite major-unit amount into a Decimal."""
    # bool is an int subclass; True is not an amount
    if isinstance(amount, bool) or amount is None:
        raise ValidationError("amount must be a number", field_name="amount")
    try:
        if isinstance(amount, Decimal):
            value = amount
        elif isinstance(amount, int):
            value = Decimal(amount)
        elif isinstance(amount, float):
            # str() keeps the shortest round-tripping form, e.g. 49.99 not 49.98999...
            value = Decimal(str(amount))
        elif isinstance(amount, str):
            value = Decimal(amount.strip())
        else:
            raise ValidationError("amount must be a number", field_name="amount")
    except InvalidOperation:
        raise ValidationError(f"invalid amount: {amount!r}", field_name="amount")

    if not value.is_finite():
        raise ValidationError("amount must be a finite number", field_name="amount")
    if value <= 0:
        raise ValidationError("amount must be greater than zero", field_name="amount")
    return value


def ensure_supported(currency: str, provider: ProviderType) -> str:
    code = normalize_currency(currency)
    supported = PROVIDER_CURRENCIES.get(provider)
    if supported is not None and code not in supported:
        raise ValidationError(
            f"{provider.value} does not support currency {code}",
            field_name="currency",
            provider=provider.value,
        )
    return code


def resolve_provider(provider) -> ProviderType:
    try:
        return ProviderType(provider)
    except ValueError:
        raise ValidationError(f"unknown payment provider: {provider!r}", field_name="provider")


def normalize(amount: AmountInput, currency: str, provider: ProviderType) -> NormalizedAmount:
    """
    Convert a major-unit amount into the processor's representation.

    Minor-unit processors receive ``round_half_up(amount * 10**exponent)``
    as an int, rounded to the processor's step where it has one. Major-unit
    processors receive a string with exactly ``exponent`` decimal places.

    Raises:
        ValidationError: for non-positive, non-finite or unparseable amounts,
            unsupported currencies, or amounts below the smallest unit
    """
    provider = resolve_provider(provider)
    value = parse_amount(amount)
    code = ensure_supported(currency, provider)
    exponent = currency_exponent(code, provider)
    unit = PROVIDER_AMOUNT_UNITS[provider]

    with localcontext() as ctx:
        ctx.prec = 50
        try:
            if unit is AmountUnit.MINOR:
                step = PROVIDER_MINOR_UNIT_STEPS.get(provider, {}).get(code, 1)
                minor = (value.scaleb(exponent) / step).quantize(Decimal(1), rounding=ROUND_HALF_UP) * step
                normalized: Union[int, str] = int(minor)
                is_zero = minor == 0
            else:
                quantum = Decimal(1).scaleb(-exponent)
                major = value.quantize(quantum, rounding=ROUND_HALF_UP)
                normalized = format(major, "f")
                is_zero = major == 0
        except InvalidOperation:
            raise ValidationError(f"amount {amount!r} is out of range", field_name="amount")

    if is_zero:
        raise ValidationError(
            f"amount {amount!r} is smaller than the smallest {code} unit",
            field_name="amount",
            provider=provider.value,
        )
    return NormalizedAmount(value=normalized, unit=unit, currency=code, exponent=exponent)


def denormalize(value: Union[int, str], currency: str, provider: ProviderType) -> Decimal:
    """Convert a processor amount back into major units."""
    provider = resolve_provider(provider)
    exponent = currency_exponent(currency, provider)
    if PROVIDER_AMOUNT_UNITS[provider] is AmountUnit.MAJOR:
        return Decimal(str(value))
    return Decimal(int(value)).scaleb(-exponent)
