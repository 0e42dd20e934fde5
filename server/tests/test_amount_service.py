"""
Tests for processor amount normalization.
"""

from decimal import Decimal

import pytest

from paygate.integrations.payment_gateways.base import AmountUnit, ProviderType, ValidationError
from paygate.services.amount_service import (
    PROVIDER_EXPONENT_OVERRIDES,
    currency_exponent,
    denormalize,
    normalize,
    normalize_currency,
    parse_amount,
)


class TestMinorUnitProviders:

    def test_stripe_usd_converts_to_cents(self):
        result = normalize(Decimal("49.99"), "USD", ProviderType.STRIPE)

        assert result.value == 4999
        assert isinstance(result.value, int)
        assert result.unit is AmountUnit.MINOR
        assert result.currency == "USD"
        assert result.exponent == 2

    def test_float_input_does_not_drift(self):
        assert normalize(49.99, "USD", ProviderType.STRIPE).value == 4999
        assert normalize(0.29, "USD", ProviderType.STRIPE).value == 29

    def test_paystack_ngn_converts_to_kobo(self):
        result = normalize(5000, "NGN", ProviderType.PAYSTACK)

        assert result.value == 500000
        assert result.unit is AmountUnit.MINOR

    def test_paystack_has_no_ngn_override(self):
        assert "NGN" not in PROVIDER_EXPONENT_OVERRIDES[ProviderType.PAYSTACK]
        assert currency_exponent("NGN", ProviderType.PAYSTACK) == 2

    def test_zero_decimal_currency_is_rounded_to_whole_units(self):
        assert normalize("1000", "JPY", ProviderType.STRIPE).value == 1000
        assert normalize("1000.4", "JPY", ProviderType.STRIPE).value == 1000
        assert normalize("1000.5", "JPY", ProviderType.STRIPE).value == 1001

    def test_three_decimal_currency(self):
        result = normalize("1.2345", "IQD", ProviderType.STRIPE)

        assert result.value == 1235
        assert result.exponent == 3

    @pytest.mark.parametrize("currency", ["BHD", "JOD", "KWD", "OMR", "TND"])
    def test_stripe_three_decimal_amounts_end_in_zero(self, currency):
        assert normalize("1.2345", currency, ProviderType.STRIPE).value == 1230
        assert normalize("1.235", currency, ProviderType.STRIPE).value == 1240
        assert normalize("12.5", currency, ProviderType.STRIPE).value == 12500

    def test_stripe_three_decimal_amount_below_step(self):
        with pytest.raises(ValidationError):
            normalize("0.004", "KWD", ProviderType.STRIPE)

    @pytest.mark.parametrize("currency", ["ISK", "UGX"])
    def test_stripe_two_decimal_overrides(self, currency):
        assert currency_exponent(currency) == 0
        assert currency_exponent(currency, ProviderType.STRIPE) == 2
        assert normalize("100", currency, ProviderType.STRIPE).value == 10000

    @pytest.mark.parametrize(
        "amount, expected",
        [
            ("0.125", 13),
            ("0.005", 1),
            ("1.005", 101),
            ("2.675", 268),
            ("10.004", 1000),
        ],
    )
    def test_rounds_half_up(self, amount, expected):
        assert normalize(amount, "USD", ProviderType.STRIPE).value == expected

    @pytest.mark.parametrize("amount", ["0.01", "1", "19.99", "250.50", "999999.99", "12345678.91"])
    def test_round_trips_through_denormalize(self, amount):
        result = normalize(amount, "USD", ProviderType.STRIPE)

        assert result.value == int(Decimal(amount) * 100)
        assert denormalize(result.value, "USD", ProviderType.STRIPE) == Decimal(amount)


class TestMajorUnitProviders:

    def test_paypal_formats_two_decimals(self):
        result = normalize("49.99", "USD", ProviderType.PAYPAL)

        assert result.value == "49.99"
        assert result.unit is AmountUnit.MAJOR

    def test_paypal_pads_whole_amounts(self):
        assert normalize(10, "USD", ProviderType.PAYPAL).value == "10.00"
        assert normalize("7.5", "EUR", ProviderType.PAYPAL).value == "7.50"

    def test_paypal_zero_decimal_currency(self):
        assert normalize("1000", "JPY", ProviderType.PAYPAL).value == "1000"

    @pytest.mark.parametrize("currency", ["HUF", "TWD"])
    def test_paypal_whole_unit_overrides(self, currency):
        assert currency_exponent(currency) == 2
        assert currency_exponent(currency, ProviderType.PAYPAL) == 0
        assert normalize("1500.50", currency, ProviderType.PAYPAL).value == "1501"

    def test_paypal_never_uses_exponent_notation(self):
        assert normalize(Decimal("1E+3"), "USD", ProviderType.PAYPAL).value == "1000.00"

    def test_denormalize_major(self):
        assert denormalize("49.99", "USD", ProviderType.PAYPAL) == Decimal("49.99")


class TestRejectedInput:

    @pytest.mark.parametrize(
        "amount",
        [0, -5, "0", "-0.01", Decimal("NaN"), float("nan"), float("inf"), Decimal("-Infinity"), "abc", "", None, True],
    )
    def test_invalid_amounts(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            normalize(amount, "USD", ProviderType.STRIPE)

        assert exc_info.value.field_name == "amount"

    def test_amount_below_smallest_unit(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize("0.001", "USD", ProviderType.STRIPE)

        assert "smallest" in str(exc_info.value)

    def test_amount_below_smallest_unit_for_zero_decimal_currency(self):
        with pytest.raises(ValidationError):
            normalize("0.4", "JPY", ProviderType.PAYPAL)

    @pytest.mark.parametrize(
        "currency, provider",
        [
            ("EUR", ProviderType.PAYSTACK),
            ("GBP", ProviderType.PAYSTACK),
            ("NGN", ProviderType.PAYPAL),
            ("KES", ProviderType.PAYPAL),
        ],
    )
    def test_unsupported_currency(self, currency, provider):
        with pytest.raises(ValidationError) as exc_info:
            normalize("10", currency, provider)

        assert exc_info.value.field_name == "currency"
        assert exc_info.value.provider == provider.value

    def test_unknown_provider(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize("10", "USD", "bitpay")

        assert exc_info.value.field_name == "provider"

    @pytest.mark.parametrize("currency", ["", None, "US", "USDT", "U5D", "$$$"])
    def test_malformed_currency(self, currency):
        with pytest.raises(ValidationError):
            normalize_currency(currency)

    def test_currency_is_upper_cased(self):
        assert normalize_currency(" usd ") == "USD"
        assert normalize("5", "ngn", ProviderType.PAYSTACK).currency == "NGN"


class TestParseAmount:

    def test_accepts_supported_types(self):
        assert parse_amount(10) == Decimal("10")
        assert parse_amount("10.50") == Decimal("10.50")
        assert parse_amount(10.5) == Decimal("10.5")
        assert parse_amount(Decimal("0.01")) == Decimal("0.01")

    def test_rejects_other_types(self):
        with pytest.raises(ValidationError):
            parse_amount([10])
