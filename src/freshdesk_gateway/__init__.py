from freshdesk_gateway.config import FreshdeskConfig
from freshdesk_gateway.errors import (
    ConfigurationError,
    FreshdeskAPIError,
    FreshdeskError,
    RequestValidationError,
    TransportError,
    UnexpectedResponseError,
)

__all__ = [
    "FreshdeskConfig",
    "FreshdeskError",
    "ConfigurationError",
    "RequestValidationError",
    "TransportError",
    "FreshdeskAPIError",
    "UnexpectedResponseError",
]
