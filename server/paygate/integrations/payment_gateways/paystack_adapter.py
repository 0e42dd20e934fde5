"""
Paystack Payment Gateway Adapter

Initializes Paystack transactions whose hosted payment page the payer is
redirected to.
"""

from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urljoin

from paygate.core.logging import get_logger

from .base import (
    CheckoutFlow,
    ProviderErrorKind,
    ProviderType,
    SessionRequest,
    SessionResult,
)
from .http import HttpPaymentGateway
from .state import SessionAttempt, SessionState

logger = get_logger(__name__)

API_URL = "https://api.paystack.co"

DEFAULT_CHANNELS = ("card", "bank", "ussd", "qr", "mobile_money", "bank_transfer")


class PaystackAdapter(HttpPaymentGateway):
    """Paystack payment gateway adapter (hosted-page flow)."""

    flow = CheckoutFlow.REDIRECT
    requires_payer_email = True

    def __init__(
        self,
        secret_key: str,
        app_base_url: str,
        public_key: Optional[str] = None,
        channels: Sequence[str] = DEFAULT_CHANNELS,
        api_url: str = API_URL,
        **config
    ):
        """
        Initialize Paystack adapter.

        Args:
            secret_key: Paystack secret key (test or live mode is encoded in the key)
            app_base_url: Application URL used to build the callback link
            public_key: Paystack public key for the inline popup, returned with the session
            channels: Payment channels offered on the hosted page
            api_url: Paystack API base URL
            **config: Transport configuration (http_client, timeouts)
        """
        super().__init__(**config)
        self.secret_key = secret_key
        self.public_key = public_key
        self.app_base_url = app_base_url
        self.channels = list(channels)
        self.api_url = api_url.rstrip("/")

    def _get_gateway_type(self) -> ProviderType:
        """Return the gateway type identifier."""
        return ProviderType.PAYSTACK

    async def create_session(self, request: SessionRequest) -> SessionResult:
        """
        Initialize a Paystack transaction.

        Paystack reports logical failures in the body's ``status`` flag, so a
        2xx response is only a success when that flag is true.
        """
        attempt = SessionAttempt(self.gateway_type.value, request.reference)
        try:
            attempt.advance(SessionState.REQUESTED, currency=request.amount.currency)
            body = await self._post_json(
                f"{self.api_url}/transaction/initialize",
                operation="initialize",
                timeout=self.session_timeout,
                json=self._build_transaction_payload(request),
                headers={
                    "Authorization": f"Bearer {self.secret_key}",
                    "Content-Type": "application/json",
                },
            )

            if body.get("status") is not True:
                raise self._error(
                    ProviderErrorKind.REJECTED,
                    body.get("message") or "Paystack did not initialize the transaction",
                    raw=body,
                )

            data = body.get("data")
            if not isinstance(data, dict):
                raise self._error(ProviderErrorKind.MALFORMED_RESPONSE, "Paystack response has no data", raw=body)
            authorization_url = data.get("authorization_url")
            access_code = data.get("access_code")
            if not authorization_url or not access_code:
                raise self._error(
                    ProviderErrorKind.MALFORMED_RESPONSE,
                    "Paystack response is missing authorization_url or access_code",
                    raw=body,
                )

            returned_reference = data.get("reference")
            if returned_reference and returned_reference != request.reference:
                logger.warning(
                    "paystack.reference_mismatch",
                    reference=request.reference,
                    returned_reference=returned_reference,
                )

            result = SessionResult(
                provider=self.gateway_type,
                session_id=access_code,
                reference=request.reference,
                amount=request.amount,
                redirect_url=authorization_url,
                access_code=access_code,
                public_key=self.public_key,
                raw=body,
            )
            attempt.advance(SessionState.SUCCEEDED, session_id=access_code)
            return result
        except Exception as e:
            attempt.fail(error=str(e), error_type=e.__class__.__name__)
            raise

    def _build_transaction_payload(self, request: SessionRequest) -> Dict[str, Any]:
        return {
            "amount": request.amount.value,
            "currency": request.amount.currency,
            "email": request.payer.email,
            "reference": request.reference,
            "callback_url": urljoin(self.app_base_url.rstrip("/") + "/", "dashboard?payment=success"),
            "metadata": self._build_metadata(request),
            "channels": self.channels,
        }

    @staticmethod
    def _build_metadata(request: SessionRequest) -> Dict[str, Any]:
        custom_fields: List[Dict[str, Optional[str]]] = [
            {
                "display_name": "User ID",
                "variable_name": "user_id",
                "value": request.payer.user_id,
            },
        ]
        metadata: Dict[str, Any] = dict(request.metadata)
        metadata.update({
            "userId": request.payer.user_id,
            "projectId": request.purpose.correlation_id,
            "description": request.purpose.description,
            "custom_fields": custom_fields,
        })
        return metadata
