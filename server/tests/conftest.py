"""
Shared test configuration and fixtures for the Paygate test suite.
"""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from paygate.core.config import PaymentEnvironment, ProviderCredentials
from paygate.integrations.payment_gateways.base import (
    CheckoutFlow,
    GatewayError,
    NormalizedAmount,
    Payer,
    PaymentGateway,
    PaymentRequest,
    ProviderType,
    Purpose,
    SessionRequest,
    SessionResult,
)

APP_BASE_URL = "https://app.example.com"


class RecordingTransport:
    """
    Routes requests by URL path to canned handlers and records every call.

    Unrouted paths fail the test, so an unexpected outbound call is caught.
    """

    def __init__(self, routes: Optional[Dict[str, Callable[[httpx.Request], httpx.Response]]] = None):
        self.routes = dict(routes or {})
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            raise AssertionError(f"unexpected request to {request.url}")
        return handler(request)

    @property
    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def json_body(self, index: int) -> Any:
        return json.loads(self.requests[index].content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def respond(status_code: int = 200, payload: Any = None, text: Optional[str] = None):
    """Build a route handler returning a fixed response."""
    def handler(request: httpx.Request) -> httpx.Response:
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json=payload)
    return handler


def paypal_order(order_id: str = "5O190127TN364715T", relation: str = "approve") -> Dict[str, Any]:
    return {
        "id": order_id,
        "status": "CREATED",
        "links": [
            {"href": f"https://api-m.sandbox.paypal.com/v2/checkout/orders/{order_id}", "rel": "self", "method": "GET"},
            {"href": f"https://www.sandbox.paypal.com/checkoutnow?token={order_id}", "rel": relation, "method": "GET"},
        ],
    }


def paystack_initialized(reference: str = "ref", access_code: str = "0peioxfhpn") -> Dict[str, Any]:
    return {
        "status": True,
        "message": "Authorization URL created",
        "data": {
            "authorization_url": f"https://checkout.paystack.com/{access_code}",
            "access_code": access_code,
            "reference": reference,
        },
    }


class FakeGateway(PaymentGateway):
    """In-memory adapter returning a canned result or raising a canned error."""

    flow = CheckoutFlow.REDIRECT

    def __init__(
        self,
        provider: ProviderType = ProviderType.PAYPAL,
        error: Optional[GatewayError] = None,
        requires_payer_email: bool = False,
    ):
        self._provider = provider
        self.requires_payer_email = requires_payer_email
        super().__init__()
        self.error = error
        self.calls: List[SessionRequest] = []

    def _get_gateway_type(self) -> ProviderType:
        return self._provider

    async def create_session(self, request: SessionRequest) -> SessionResult:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return SessionResult(
            provider=self.gateway_type,
            session_id="session_123",
            reference=request.reference,
            amount=request.amount,
            redirect_url="https://pay.example.com/session_123",
            raw={"id": "session_123"},
        )


@pytest.fixture
def credentials() -> ProviderCredentials:
    return ProviderCredentials(
        environment=PaymentEnvironment.SANDBOX,
        app_base_url=APP_BASE_URL,
        stripe_secret_key="sk_test_51abcdefghijklmnop",
        stripe_publishable_key="pk_test_51abcdefghijklmnop",
        paypal_client_id="paypal-client-id",
        paypal_client_secret="paypal-client-secret",
        paystack_secret_key="sk_test_paystack0123456789",
        paystack_public_key="pk_test_paystack0123456789",
    )


@pytest.fixture
def payer() -> Payer:
    return Payer(user_id="user_42", email="client@example.com", name="Ada Client")


@pytest.fixture
def payment_request(payer) -> Callable[..., PaymentRequest]:
    def build(**overrides: Any) -> PaymentRequest:
        values: Dict[str, Any] = {
            "amount": "49.99",
            "currency": "USD",
            "payer": payer,
            "provider": ProviderType.PAYPAL,
            "purpose": Purpose(description="Logo design milestone", correlation_id="project-7"),
        }
        values.update(overrides)
        return PaymentRequest(**values)
    return build


@pytest.fixture
def session_request(payer) -> Callable[..., SessionRequest]:
    def build(amount: NormalizedAmount, **overrides: Any) -> SessionRequest:
        values: Dict[str, Any] = {
            "amount": amount,
            "reference": "user_42_project-7_abc123",
            "payer": payer,
            "purpose": Purpose(description="Logo design milestone", correlation_id="project-7"),
        }
        values.update(overrides)
        return SessionRequest(**values)
    return build
