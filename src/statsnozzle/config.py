"""Settings read from the environment or a .env file with pydantic-settings."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

REQUIRED = ("api_addr", "cf_username", "cf_password")


class Settings(BaseSettings):
    """Nozzle configuration.

    Variable names match the deployment manifests: API_ADDR, CF_USERNAME,
    CF_PASSWORD, TOKEN_REFRESH_INTERVAL, plus a few optional knobs.
    """

    api_addr: str = Field(default="", description="Platform API address, e.g. https://api.example.com")
    cf_username: str = Field(default="", description="Platform username")
    cf_password: str = Field(default="", description="Platform password")
    token_refresh_interval: int = Field(default=90, ge=1, description="Token refresh interval in minutes")
    report_interval: float = Field(default=5.0, gt=0, description="Seconds between printed reports")
    skip_ssl_validation: bool = Field(default=True, description="Skip TLS certificate checks")
    request_timeout: float = Field(default=10.0, gt=0, description="Timeout in seconds for platform API calls")

    class Config:
        env_prefix = ""
        env_file = ".env"
        extra = "ignore"
        env_ignore_empty = True

    def missing(self) -> list[str]:
        """Return the environment variable names of unset required settings."""
        return [name.upper() for name in REQUIRED if not getattr(self, name)]
