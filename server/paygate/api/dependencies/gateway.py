from functools import lru_cache

from paygate.core.config import get_settings
from paygate.core.logging import get_logger
from paygate.services.gateway_service import PaymentGatewayService, build_gateway_service

logger = get_logger(__name__)


@lru_cache(maxsize=None)
def get_gateway_service() -> PaymentGatewayService:
    settings = get_settings()
    service = build_gateway_service(settings)
    logger.info("gateway.initialized", payment_environment=settings.payment_environment.value)
    return service
