import base64
import logging
from importlib.metadata import PackageNotFoundError, version as pkg_version
from typing import Any, Dict, Mapping, Optional

import httpx

from freshdesk_gateway.config import FreshdeskConfig
from freshdesk_gateway.errors import (
    FreshdeskAPIError,
    TransportError,
    UnexpectedResponseError,
    format_api_error,
)

logger = logging.getLogger(__name__)

try:
    PACKAGE_VERSION = pkg_version("freshdesk-gateway")
except PackageNotFoundError:
    PACKAGE_VERSION = "dev"

USER_AGENT = f"freshdesk-gateway/{PACKAGE_VERSION}"


def auth_header(config: FreshdeskConfig) -> str:
    # Freshdesk basic auth uses api_key:X
    token = base64.b64encode(f"{config.api_key}:X".encode()).decode()
    return f"Basic {token}"


def build_headers(config: FreshdeskConfig, extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Merge caller headers with the ones every request must carry.

    Content-Type and Authorization always win over caller-supplied values.
    """
    headers: Dict[str, str] = {"User-Agent": USER_AGENT}
    for name, value in (extra or {}).items():
        if name.lower() in ("content-type", "authorization"):
            continue
        headers[name] = value
    headers["Content-Type"] = "application/json"
    headers["Authorization"] = auth_header(config)
    return headers


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


async def request_raw(
    config: FreshdeskConfig,
    endpoint: str,
    method: str = "GET",
    *,
    params: Optional[Dict[str, Any]] = None,
    json: Any = None,
    headers: Optional[Mapping[str, str]] = None,
) -> httpx.Response:
    """Perform one authenticated call and return the response object.

    Used where the caller needs headers (pagination) or the status code.
    Raises TransportError when the host cannot be reached and
    FreshdeskAPIError for any non-2xx status. The call is made at most once.
    """
    logger.debug("Freshdesk %s %s", method, endpoint)
    async with httpx.AsyncClient(base_url=config.base_url) as client:
        try:
            response = await client.request(
                method,
                endpoint,
                params=params,
                json=json,
                headers=build_headers(config, headers),
            )
        except httpx.RequestError as e:
            logger.error("Freshdesk %s %s failed: %s", method, endpoint, e)
            raise TransportError(f"Failed to reach Freshdesk: {e}") from e

    if not response.is_success:
        body = _error_body(response)
        message = format_api_error(response.status_code, response.reason_phrase, body)
        logger.warning("Freshdesk %s %s returned %s", method, endpoint, response.status_code)
        raise FreshdeskAPIError(
            message,
            status_code=response.status_code,
            errors=body.get("errors") if isinstance(body, dict) else None,
        )
    return response


def decode_body(response: httpx.Response) -> Any:
    """Decode a success response; an empty body (e.g. 204) becomes {}."""
    if response.status_code == 204 or not response.content.strip():
        return {}
    try:
        return response.json()
    except ValueError as e:
        raise UnexpectedResponseError(
            f"Freshdesk returned a non-JSON body with status {response.status_code}",
            details={"status": response.status_code},
        ) from e


async def request(
    config: FreshdeskConfig,
    endpoint: str,
    method: str = "GET",
    *,
    params: Optional[Dict[str, Any]] = None,
    json: Any = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Any:
    """Perform one authenticated call and return the decoded JSON body."""
    response = await request_raw(config, endpoint, method, params=params, json=json, headers=headers)
    return decode_body(response)
