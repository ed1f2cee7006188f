"""Shared BDD fixtures and step definitions for donation reconciliation."""

import pytest
from donations import hooks
from donations.donation.donation import Donation
from donations.hooks import HookRegistry
from donations.integration import PaystackIntegration
from donations.recurring.recurring_donation import RecurringDonation
from donations.webhook.receiver import WebhookRequest
from protean import current_domain
from pytest_bdd import given, parsers, then, when


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def registry():
    """Hook registry with the Paystack integration attached."""
    registry = HookRegistry()
    PaystackIntegration(registry).setup()
    return registry


@pytest.fixture()
def context():
    """Container for ids and responses captured across steps."""
    return {"donation_id": None, "recurring_donation_id": None, "webhook": None}


@pytest.fixture()
def deliver(registry, context):
    """Send a raw delivery through the webhook hook and keep the response."""

    def _deliver(body, signature):
        [response] = registry.fire(hooks.PROCESS_WEBHOOK, WebhookRequest(body=body, signature=signature))
        context["webhook"] = response
        return response

    return _deliver


@pytest.fixture()
def load_donation(context):
    return lambda: current_domain.repository_for(Donation).get(context["donation_id"])


@pytest.fixture()
def load_plan(context):
    return lambda: current_domain.repository_for(RecurringDonation).get(context["recurring_donation_id"])


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a pending donation with reference "{reference}"'))
def pending_donation(record_donation, context, reference):
    result = record_donation(reference=reference)
    context["donation_id"] = result["donation_id"]


@given(parsers.cfparse('a pending monthly donation with reference "{reference}"'))
def pending_monthly_donation(record_donation, context, reference):
    result = record_donation(reference=reference, period="month")
    context["donation_id"] = result["donation_id"]
    context["recurring_donation_id"] = result["recurring_donation_id"]


@given("Paystack is unreachable")
def paystack_unreachable(gateway):
    gateway.configure(should_succeed=True, unavailable=True)


@given(parsers.cfparse('Paystack rejects requests with "{message}"'))
def paystack_rejects(gateway, message):
    gateway.configure(should_succeed=False, failure_message=message)


# ---------------------------------------------------------------------------
# Webhook steps (usable as setup or as the action under test)
# ---------------------------------------------------------------------------
@given(parsers.cfparse('Paystack delivers "{event}" for reference "{reference}" with authorization "{authorization}"'))
@when(parsers.cfparse('Paystack delivers "{event}" for reference "{reference}" with authorization "{authorization}"'))
def paystack_delivers_charge(deliver, signed_delivery, event, reference, authorization):
    body, signature = signed_delivery(
        event,
        {"id": 4099, "reference": reference, "authorization": {"authorization_code": authorization}},
    )
    deliver(body, signature)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the webhook response status is {status:d}"))
def webhook_status(context, status):
    assert context["webhook"].status_code == status


@then(parsers.cfparse('the webhook response is "{message}"'))
def webhook_message(context, message):
    assert context["webhook"].body == message


@then(parsers.cfparse('the donation status is "{status}"'))
def donation_status(load_donation, status):
    assert load_donation().status == status


@then("the donation is marked processed")
def donation_processed(load_donation):
    assert load_donation().processed is True


@then("the donation is not marked processed")
def donation_not_processed(load_donation):
    assert load_donation().processed is False


@then("Paystack was not called")
def paystack_not_called(gateway):
    assert gateway.calls == []


@then(parsers.cfparse('the recurring donation status is "{status}"'))
def recurring_status(load_plan, status):
    assert load_plan().status == status
