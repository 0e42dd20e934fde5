"""
PayPal Payment Gateway Adapter

Creates PayPal checkout orders using the two-step REST protocol: a client
credentials token exchange followed by an order creation call whose
approval link the payer is redirected to.
"""

import base64
from typing import Any, Dict, Optional
from urllib.parse import urljoin

from paygate.core.logging import get_logger

from .base import (
    CheckoutFlow,
    ProviderErrorKind,
    ProviderType,
    SessionRequest,
    SessionResult,
    TokenAcquisitionError,
)
from .http import HttpPaymentGateway
from .state import SessionAttempt, SessionState

logger = get_logger(__name__)

SANDBOX_API_URL = "https://api-m.sandbox.paypal.com"
LIVE_API_URL = "https://api-m.paypal.com"

# "payer-action" replaces "approve" when PayPal returns the newer payment_source shape.
APPROVAL_RELATIONS = ("approve", "payer-action")


class PayPalAdapter(HttpPaymentGateway):
    """PayPal payment gateway adapter (redirect/approval flow)."""

    flow = CheckoutFlow.REDIRECT

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        app_base_url: str,
        sandbox: bool = True,
        brand_name: str = "FreelanceHub",
        locale: str = "en-US",
        **config
    ):
        """
        Initialize PayPal adapter.

        Args:
            client_id: PayPal client ID
            client_secret: PayPal client secret
            app_base_url: Application URL used to build return and cancel links
            sandbox: Whether to use sandbox environment
            brand_name: Brand shown on the PayPal approval page
            locale: Locale of the approval page
            **config: Transport configuration (http_client, timeouts)
        """
        super().__init__(sandbox=sandbox, **config)
        self.client_id = client_id
        self.client_secret = client_secret
        self.app_base_url = app_base_url
        self.sandbox = sandbox
        self.brand_name = brand_name
        self.locale = locale
        self.api_url = SANDBOX_API_URL if sandbox else LIVE_API_URL

    def _get_gateway_type(self) -> ProviderType:
        """Return the gateway type identifier."""
        return ProviderType.PAYPAL

    async def create_session(self, request: SessionRequest) -> SessionResult:
        """
        Create a PayPal order awaiting payer approval.

        The access token is fetched for this call only; a failed token
        exchange raises ``TokenAcquisitionError`` and the order endpoint is
        never contacted.
        """
        attempt = SessionAttempt(self.gateway_type.value, request.reference)
        try:
            access_token = await self._get_access_token()
            attempt.advance(SessionState.TOKEN_ACQUIRED)

            attempt.advance(SessionState.REQUESTED, currency=request.amount.currency)
            order = await self._post_json(
                f"{self.api_url}/v2/checkout/orders",
                operation="create_order",
                timeout=self.session_timeout,
                json=self._build_order_payload(request),
                headers=self._order_headers(access_token, request.idempotency_key),
            )

            order_id = order.get("id")
            if not order_id:
                raise self._error(
                    ProviderErrorKind.MALFORMED_RESPONSE,
                    "PayPal order response is missing an id",
                    raw=order,
                )
            approval_url = self._find_approval_url(order)
            if approval_url is None:
                raise self._error(
                    ProviderErrorKind.MALFORMED_RESPONSE,
                    "PayPal order response has no approval link",
                    raw=order,
                )

            result = SessionResult(
                provider=self.gateway_type,
                session_id=order_id,
                reference=request.reference,
                amount=request.amount,
                redirect_url=approval_url,
                raw=order,
            )
            attempt.advance(SessionState.SUCCEEDED, session_id=order_id)
            return result
        except Exception as e:
            attempt.fail(error=str(e), error_type=e.__class__.__name__)
            raise

    async def _get_access_token(self) -> str:
        """Exchange the client id/secret pair for a short-lived bearer token."""
        data = await self._post_json(
            f"{self.api_url}/v1/oauth2/token",
            operation="token",
            timeout=self.token_timeout,
            error_cls=TokenAcquisitionError,
            headers={
                "Authorization": f"Basic {self._get_basic_auth()}",
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
            },
            data={"grant_type": "client_credentials"},
        )
        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            # raw is not kept: a partial token response may still carry secrets
            raise TokenAcquisitionError(
                self.gateway_type.value,
                ProviderErrorKind.MALFORMED_RESPONSE,
                "PayPal token response is missing access_token",
            )
        return access_token

    def _get_basic_auth(self) -> str:
        """Get base64 encoded basic auth header."""
        credentials = f"{self.client_id}:{self.client_secret}"
        return base64.b64encode(credentials.encode()).decode()

    def _order_headers(self, access_token: str, idempotency_key: Optional[str]) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if idempotency_key:
            headers["PayPal-Request-Id"] = idempotency_key
        return headers

    def _build_order_payload(self, request: SessionRequest) -> Dict[str, Any]:
        return {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": request.purpose.correlation_id or "default",
                    "amount": {
                        "currency_code": request.amount.currency,
                        "value": request.amount.value,
                    },
                    "description": request.purpose.description,
                    "custom_id": request.reference,
                }
            ],
            "application_context": {
                "return_url": self._app_url("/dashboard?payment=success"),
                "cancel_url": self._app_url("/dashboard?payment=cancelled"),
                "brand_name": self.brand_name,
                "locale": self.locale,
                "landing_page": "BILLING",
                "shipping_preference": "NO_SHIPPING",
                "user_action": "PAY_NOW",
            },
        }

    def _app_url(self, path: str) -> str:
        return urljoin(self.app_base_url.rstrip("/") + "/", path.lstrip("/"))

    @staticmethod
    def _find_approval_url(order: Dict[str, Any]) -> Optional[str]:
        links = order.get("links")
        if not isinstance(links, list):
            return None
        for relation in APPROVAL_RELATIONS:
            for link in links:
                if isinstance(link, dict) and link.get("rel") == relation and link.get("href"):
                    return link["href"]
        return None
