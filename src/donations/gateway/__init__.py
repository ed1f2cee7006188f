"""Paystack gateway factory.

One API client per mode (test/live), created lazily from the process-wide
settings:
- HttpPaystackApi for real traffic
- FakeGateway for development and testing (PAYSTACK_GATEWAY=fake)
"""

from donations.config import get_settings
from donations.gateway.fake_adapter import FakeGateway
from donations.gateway.paystack_adapter import HttpPaystackApi
from donations.gateway.port import PaystackApi

_gateways: dict[bool, PaystackApi] = {}


def get_gateway(test_mode: bool | None = None) -> PaystackApi:
    """Return the gateway for the given mode (the configured default when None)."""
    settings = get_settings()
    test_mode = settings.test_mode if test_mode is None else test_mode
    if test_mode not in _gateways:
        if settings.gateway == "fake":
            _gateways[test_mode] = FakeGateway()
        else:
            _gateways[test_mode] = HttpPaystackApi(
                secret_key=settings.secret_key(test_mode),
                base_url=settings.base_url,
                timeout=settings.timeout,
            )
    return _gateways[test_mode]


def set_gateway(gateway: PaystackApi, test_mode: bool | None = None) -> None:
    """Override the gateway for one mode, or for both when no mode is given."""
    if test_mode is None:
        _gateways[True] = gateway
        _gateways[False] = gateway
    else:
        _gateways[test_mode] = gateway


def reset_gateway() -> None:
    """Drop cached gateways so the next call rebuilds them from settings."""
    for gateway in _gateways.values():
        if isinstance(gateway, HttpPaystackApi):
            gateway.close()
    _gateways.clear()
