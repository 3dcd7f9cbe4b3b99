from shared.middleware.request_id import RequestIdLogFilter, request_id_middleware
from shared.middleware.error_handler import (
    error_envelope,
    error_envelope_middleware,
    validation_error_handler,
)

__all__ = [
    "RequestIdLogFilter",
    "error_envelope",
    "error_envelope_middleware",
    "request_id_middleware",
    "validation_error_handler",
]
