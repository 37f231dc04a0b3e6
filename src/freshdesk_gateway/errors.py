from typing import Any, Dict, List, Optional


class FreshdeskError(Exception):
    """Base class for every failure raised by the gateway."""

    error_type = "unexpected_error"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(FreshdeskError):
    error_type = "configuration_error"


class RequestValidationError(FreshdeskError):
    """A pre-flight check failed; no request was sent."""

    error_type = "validation_error"


class TransportError(FreshdeskError):
    error_type = "network_error"


class UnexpectedResponseError(FreshdeskError):
    """The remote answered with a success status but an unusable body."""

    error_type = "invalid_response"


class FreshdeskAPIError(FreshdeskError):
    """The remote answered with a non-2xx status."""

    error_type = "http_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        errors: Optional[Any] = None,
    ):
        details: Dict[str, Any] = {"status": status_code}
        if errors:
            details["errors"] = errors
        super().__init__(message, details=details)
        self.status_code = status_code
        self.errors = errors


def _format_field_errors(errors: Any) -> List[str]:
    """Render either error shape the API is known to return.

    Documented shape: {"email": ["is invalid"]}.
    Shape seen in practice: [{"field": "email", "message": "is invalid", "code": "..."}].
    """
    parts: List[str] = []
    if isinstance(errors, dict):
        for field, messages in errors.items():
            if isinstance(messages, (list, tuple)):
                text = ", ".join(str(m) for m in messages)
            else:
                text = str(messages)
            parts.append(f"{field}: {text}")
    elif isinstance(errors, list):
        for item in errors:
            if isinstance(item, dict):
                field = item.get("field")
                text = item.get("message")
                if field and text:
                    parts.append(f"{field}: {text}")
                elif text or field:
                    parts.append(str(text or field))
            elif item:
                parts.append(str(item))
    return parts


def format_api_error(status_code: int, reason_phrase: str, body: Any) -> str:
    """Build the caller-visible message for a failed remote call.

    Args:
        status_code: HTTP status of the response
        reason_phrase: HTTP reason phrase of the response
        body: The decoded JSON error body, or None when it did not parse

    Returns:
        The remote message and field-level errors joined into one string, or
        the bare status line when the body carries neither.
    """
    status_line = f"{status_code} {reason_phrase}".strip()
    if not isinstance(body, dict):
        return status_line

    message = body.get("message") or body.get("description")
    field_errors = _format_field_errors(body.get("errors"))

    if not message and not field_errors:
        return status_line
    if not message:
        message = status_line
    if field_errors:
        return f"{message} ({'; '.join(field_errors)})"
    return str(message)
