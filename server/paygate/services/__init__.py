from paygate.services import (
    amount_service,
    credential_service,
    gateway_service,
    reference_service,
)
