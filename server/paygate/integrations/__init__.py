"""
Integration modules for Paygate

Contains adapters for external payment processors:
- Stripe (client-secret flow)
- PayPal (redirect/approval flow)
- Paystack (hosted-page flow)
"""
