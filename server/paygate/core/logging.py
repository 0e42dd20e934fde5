import logging
import sys
from typing import Any, MutableMapping

import structlog

SENSITIVE_KEY_PARTS = ("secret", "token", "key", "authorization", "password")

# Keys that contain a sensitive part but never hold secret material.
SAFE_KEYS = frozenset({"idempotency_key", "publishable_key", "public_key", "missing_fields", "invalid_fields"})


def mask_secret(secret: Any, visible_chars: int = 4) -> str:
    """Mask a secret, keeping only its last few characters."""
    if not secret:
        return "****"
    text = str(secret)
    if len(text) <= visible_chars * 2:
        return "****"
    return "*" * (len(text) - visible_chars) + text[-visible_chars:]


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking values whose key names a credential."""
    for key in list(event_dict.keys()):
        lowered = key.lower()
        if lowered in SAFE_KEYS:
            continue
        if any(part in lowered for part in SENSITIVE_KEY_PARTS):
            event_dict[key] = mask_secret(event_dict[key])
    return event_dict


def configure_logging(level: int = logging.INFO) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )


def get_logger(*args: Any, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(*args, **kwargs)
