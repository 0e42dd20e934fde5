"""
Integration test modules

Tests for payment processor adapters:
- Stripe
- PayPal
- Paystack
"""
