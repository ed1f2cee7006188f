import json

import pytest
from protean.integrations.pytest import DomainFixture

TEST_SECRET_KEY = "sk_test_givestream0001"
LIVE_SECRET_KEY = "sk_live_givestream0001"


@pytest.fixture(scope="session")
def donations_bed():
    from donations.domain import donations

    bed = DomainFixture(donations)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(donations_bed):
    with donations_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def paystack_settings(monkeypatch):
    from donations.config import get_settings

    monkeypatch.setenv("PAYSTACK_TEST_SECRET_KEY", TEST_SECRET_KEY)
    monkeypatch.setenv("PAYSTACK_LIVE_SECRET_KEY", LIVE_SECRET_KEY)
    monkeypatch.setenv("PAYSTACK_GATEWAY", "fake")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def gateway(paystack_settings):
    """A fresh FakeGateway for both modes, for every test."""
    from donations.gateway import reset_gateway, set_gateway
    from donations.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture()
def record_donation():
    """Create a pending donation (and its plan when a period is given)."""
    from donations.donation.creation import RecordDonation
    from protean import current_domain

    def _record(reference="ref_123", amount=5000.0, test_mode=True, period=None, **extra):
        command = RecordDonation(
            amount=amount,
            currency="NGN",
            gateway_transaction_reference=reference,
            test_mode=test_mode,
            period=period,
            donor_email=extra.get("donor_email", "donor@example.com"),
        )
        return current_domain.process(command, asynchronous=False)

    return _record


@pytest.fixture()
def signed_delivery():
    """Build a raw Paystack delivery body and its signature."""
    from donations.webhook.interpreter import compute_signature

    def _build(event, data, test_mode=True, secret=None):
        payload_data = dict(data)
        payload_data.setdefault("domain", "test" if test_mode else "live")
        body = json.dumps({"event": event, "data": payload_data}).encode()
        key = secret or (TEST_SECRET_KEY if test_mode else LIVE_SECRET_KEY)
        return body, compute_signature(body, key)

    return _build
