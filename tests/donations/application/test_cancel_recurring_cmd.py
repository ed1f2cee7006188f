"""Application tests for operator-initiated subscription cancellation."""

from donations.recurring.cancellation import (
    CancelRecurringDonation,
    fetch_email_token,
    is_subscription_cancellable,
)
from donations.recurring.recurring_donation import RecurringDonation, RecurringDonationStatus
from protean import current_domain


def _subscribed_plan(email_token=None):
    plan = RecurringDonation.create(amount=2500.0, currency="NGN", period="month", test_mode=True)
    plan.activate("AUTH_9")
    plan.record_subscription("SUB_1", "AUTH_9")
    if email_token:
        plan.cache_email_token(email_token)
    current_domain.repository_for(RecurringDonation).add(plan)
    return str(plan.id)


def _cancel(plan_id):
    return current_domain.process(CancelRecurringDonation(recurring_donation_id=plan_id), asynchronous=False)


def _plan(plan_id):
    return current_domain.repository_for(RecurringDonation).get(plan_id)


class TestCancellation:
    def test_cancel_with_cached_token(self, gateway):
        plan_id = _subscribed_plan(email_token="tok_1")

        assert _cancel(plan_id) is True

        plan = _plan(plan_id)
        assert plan.cancelled is True
        assert plan.status == RecurringDonationStatus.CANCELLED.value
        assert gateway.calls[-1]["body"] == {"code": "SUB_1", "token": "tok_1"}

    def test_token_fetched_and_cached(self, gateway):
        plan_id = _subscribed_plan()
        gateway.add_subscription("SUB_1", email_token="tok_fetched")

        assert _cancel(plan_id) is True

        assert _plan(plan_id).email_token == "tok_fetched"
        assert [call["path"] for call in gateway.calls] == ["subscription/SUB_1", "subscription/disable"]

    def test_missing_token_aborts(self, gateway):
        plan_id = _subscribed_plan()

        assert _cancel(plan_id) is False

        plan = _plan(plan_id)
        assert plan.cancelled is False
        assert all(call["path"] != "subscription/disable" for call in gateway.calls)

    def test_rejected_cancellation_is_logged(self, gateway):
        plan_id = _subscribed_plan(email_token="tok_1")
        gateway.configure(should_succeed=False, failure_message="Subscription not found")

        assert _cancel(plan_id) is False

        plan = _plan(plan_id)
        assert plan.cancelled is False
        assert plan.log_entries[-1].message == (
            "Paystack subscription cancellation failed with message: Subscription not found"
        )

    def test_already_cancelled_makes_no_call(self, gateway):
        plan_id = _subscribed_plan(email_token="tok_1")
        _cancel(plan_id)
        gateway.calls.clear()

        assert _cancel(plan_id) is False
        assert gateway.calls == []


class TestFetchEmailToken:
    def test_cached_token_needs_no_call(self, gateway):
        plan = _plan(_subscribed_plan(email_token="tok_1"))
        assert fetch_email_token(plan) == "tok_1"
        assert gateway.calls == []

    def test_unavailable_subscription_returns_none(self, gateway):
        plan = _plan(_subscribed_plan())
        assert fetch_email_token(plan) is None
        assert plan.email_token is None


class TestCancellable:
    def test_subscribed_plan_is_cancellable(self):
        plan = _plan(_subscribed_plan())
        assert is_subscription_cancellable(True, plan) is True

    def test_false_input_is_passed_through(self):
        plan = _plan(_subscribed_plan())
        assert is_subscription_cancellable(False, plan) is False

    def test_plan_without_subscription_is_not_cancellable(self):
        plan = RecurringDonation.create(amount=1.0, currency="NGN", period="month", test_mode=True)
        assert is_subscription_cancellable(True, plan) is False
