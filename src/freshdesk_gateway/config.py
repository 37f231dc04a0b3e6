import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from freshdesk_gateway.errors import ConfigurationError

API_KEY_VARS = ("FRESHDESK_API_KEY", "FD_KEY")
DOMAIN_VARS = ("FRESHDESK_DOMAIN", "FD_DOMAIN")


def _first_env(names) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


class FreshdeskConfig(BaseModel):
    """Credential pair plus the derived API base URL.

    Passed explicitly into every gateway operation. Immutable once built.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., repr=False, description="Freshdesk API key")
    domain: str = Field(..., description="Helpdesk domain, e.g. 'yourcompany.freshdesk.com'")

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}/api/v2"

    def validate_or_raise(self) -> None:
        missing = []
        if not self.api_key:
            missing.append("FRESHDESK_API_KEY")
        if not self.domain:
            missing.append("FRESHDESK_DOMAIN")
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")
        if "://" in self.domain:
            raise ConfigurationError("FRESHDESK_DOMAIN should not include scheme; use e.g. 'yourcompany.freshdesk.com'")
        if "." not in self.domain:
            raise ConfigurationError("FRESHDESK_DOMAIN looks invalid (no dot present)")

    @classmethod
    def from_env(cls) -> "FreshdeskConfig":
        """Read the credential from FRESHDESK_* (or the legacy FD_*) variables and validate it."""
        config = cls(
            api_key=_first_env(API_KEY_VARS) or "",
            domain=(_first_env(DOMAIN_VARS) or "").strip().rstrip("/"),
        )
        config.validate_or_raise()
        return config
