import pytest

from freshdesk_gateway.config import FreshdeskConfig

DOMAIN = "example.freshdesk.com"


@pytest.fixture
def config() -> FreshdeskConfig:
    return FreshdeskConfig(api_key="test-api-key", domain=DOMAIN)


@pytest.fixture
def route(respx_mock):
    """Register a mocked Freshdesk endpoint, matched on method and path only."""

    def _route(method: str, endpoint: str):
        return respx_mock.route(method=method, host=DOMAIN, path=f"/api/v2{endpoint}")

    return _route
