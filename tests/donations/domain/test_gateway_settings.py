"""Tests for Paystack gateway settings."""

from donations.config import GatewaySettings


class TestSecretKeys:
    def test_mode_selects_key(self):
        settings = GatewaySettings(test_secret_key="sk_test_a", live_secret_key="sk_live_b")
        assert settings.secret_key(True) == "sk_test_a"
        assert settings.secret_key(False) == "sk_live_b"

    def test_default_mode(self):
        settings = GatewaySettings(test_secret_key="sk_test_a", live_secret_key="sk_live_b", test_mode=False)
        assert settings.secret_key() == "sk_live_b"

    def test_valid_key_needs_matching_prefix(self):
        settings = GatewaySettings(test_secret_key="sk_live_wrong", live_secret_key="sk_live_b")
        assert not settings.has_valid_api_key(True)
        assert settings.has_valid_api_key(False)

    def test_missing_key_is_invalid(self):
        settings = GatewaySettings(test_secret_key="", live_secret_key="")
        assert not settings.has_valid_api_key(True)


class TestTransactionUrl:
    def test_dashboard_url(self):
        settings = GatewaySettings()
        assert settings.transaction_url(4099) == "https://dashboard.paystack.com/#/transactions/4099"
