from __future__ import annotations

import re
import secrets
import time
from typing import Optional

from paygate.integrations.payment_gateways.base import ValidationError

GENERAL_CORRELATION = "general"
RANDOM_BYTES = 6
MAX_SEGMENT_LENGTH = 40

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9-]+")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(number: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def _segment(value: str) -> str:
    # Underscore is the separator, so it is folded into '-' along with anything
    # a processor might reject in a reference or metadata value.
    cleaned = _UNSAFE_CHARS.sub("-", value.strip()).strip("-")
    return cleaned[:MAX_SEGMENT_LENGTH]


def generate_reference(
    prefix: Optional[str],
    payer_id: str,
    correlation_id: Optional[str] = None,
) -> str:
    """
    Generate a transaction reference.

    Format: ``{prefix}_{correlation_id|"general"}_{suffix}``. The suffix is a
    base-36 nanosecond timestamp followed by random hex, so concurrent calls
    for the same payer never collide. When ``prefix`` is empty the payer id
    is used in its place.

    The reference is a tracking token, not a secret.
    """
    payer_segment = _segment(payer_id or "")
    if not payer_segment:
        raise ValidationError("payer user id is required for a reference", field_name="payer")

    head = _segment(prefix or "") or payer_segment
    correlation = _segment(correlation_id or "") or GENERAL_CORRELATION
    suffix = f"{_base36(time.time_ns())}{secrets.token_hex(RANDOM_BYTES)}"
    return f"{head}_{correlation}_{suffix}"
