from fastapi import FastAPI

from paygate.api.routes import checkout
from paygate.core.config import get_settings
from paygate.core.logging import configure_logging, get_logger


configure_logging()
logger = get_logger(__name__)


def create_application() -> FastAPI:
    settings = get_settings()
    application = FastAPI(title=settings.app_name)
    application.include_router(checkout.router)

    @application.on_event("startup")
    async def startup_event() -> None:  # pragma: no cover - side effect
        logger.info(
            "application.startup",
            environment=settings.environment,
            payment_environment=settings.payment_environment.value,
        )

    @application.on_event("shutdown")
    async def shutdown_event() -> None:  # pragma: no cover - side effect
        logger.info("application.shutdown")

    return application


app = create_application()
