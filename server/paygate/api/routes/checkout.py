from fastapi import APIRouter, Depends, HTTPException, status

from paygate.api.dependencies.gateway import get_gateway_service
from paygate.core.logging import get_logger
from paygate.integrations.payment_gateways.base import (
    ConfigurationError,
    GatewayError,
    ProviderError,
    ValidationError,
)
from paygate.schemas.checkout import CheckoutSessionCreate, CheckoutSessionRead, ProviderStatusRead
from paygate.services.gateway_service import PaymentGatewayService

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


def _to_http_error(error: GatewayError) -> HTTPException:
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.to_dict())

    detail = {
        "message": "Payment provider is unavailable, please try again later",
        "error_type": error.error_type,
        "provider": error.provider,
    }
    if isinstance(error, ConfigurationError):
        logger.error(
            "checkout.provider_not_configured",
            provider=error.provider,
            missing_fields=error.missing_fields,
            invalid_fields=error.invalid_fields,
        )
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
    if isinstance(error, ProviderError):
        detail["kind"] = error.kind.value
        detail["retryable"] = error.retryable
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


@router.post("/sessions", response_model=CheckoutSessionRead, status_code=status.HTTP_201_CREATED)
async def create_checkout_session_endpoint(
    payload: CheckoutSessionCreate,
    service: PaymentGatewayService = Depends(get_gateway_service),
) -> CheckoutSessionRead:
    try:
        result = await service.create_session(payload.to_payment_request())
    except GatewayError as e:
        raise _to_http_error(e)
    return CheckoutSessionRead.from_result(result)


@router.get("/providers", response_model=list[ProviderStatusRead])
async def list_providers_endpoint(
    service: PaymentGatewayService = Depends(get_gateway_service),
) -> list[ProviderStatusRead]:
    return [ProviderStatusRead.from_status(item) for item in service.provider_status().values()]
