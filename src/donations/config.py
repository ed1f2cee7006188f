"""Paystack gateway settings.

Credentials are read-only for the lifetime of the process: one secret key per
mode, selected by the donation's own ``test_mode`` flag.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.paystack.co"
DEFAULT_DASHBOARD_URL = "https://dashboard.paystack.com/#/transactions/{id}"


class GatewaySettings(BaseSettings):
    """Paystack credentials and outbound call policy."""

    model_config = SettingsConfigDict(
        env_prefix="PAYSTACK_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    test_secret_key: str = ""
    live_secret_key: str = ""

    # Mode used when a caller does not carry its own test_mode flag
    test_mode: bool = True

    gateway: str = Field(default="paystack", pattern="^(paystack|fake)$")
    base_url: str = DEFAULT_BASE_URL
    dashboard_url: str = DEFAULT_DASHBOARD_URL
    timeout: float = Field(default=10.0, gt=0)

    # Accept webhook deliveries that carry no request method at all.
    # Only internal, non-HTTP callers should ever need this.
    allow_methodless_webhooks: bool = False

    def secret_key(self, test_mode: bool | None = None) -> str:
        """Return the secret key for the given mode (or the default mode)."""
        test_mode = self.test_mode if test_mode is None else test_mode
        return self.test_secret_key if test_mode else self.live_secret_key

    def has_valid_api_key(self, test_mode: bool | None = None) -> bool:
        """Check that a secret key is configured for the mode, with the matching prefix."""
        test_mode = self.test_mode if test_mode is None else test_mode
        key = self.secret_key(test_mode)
        prefix = "sk_test_" if test_mode else "sk_live_"
        return bool(key) and key.startswith(prefix)

    def transaction_url(self, transaction_id: str | int) -> str:
        return self.dashboard_url.format(id=transaction_id)


@lru_cache
def get_settings() -> GatewaySettings:
    """Return the process-wide gateway settings."""
    return GatewaySettings()
