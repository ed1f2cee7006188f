"""Domain tests for the RecurringDonation aggregate."""

import pytest
from donations.recurring.events import (
    RecurringDonationActivated,
    RecurringDonationCancelled,
    RecurringDonationFailed,
)
from donations.recurring.recurring_donation import (
    INITIAL_PAYMENT_FAILED,
    RecurringDonation,
    RecurringDonationStatus,
    supported_periods,
)
from protean.exceptions import ValidationError


def _create_plan(**overrides):
    defaults = {
        "amount": 2500.0,
        "currency": "NGN",
        "period": "month",
        "test_mode": True,
    }
    defaults.update(overrides)
    return RecurringDonation.create(**defaults)


class TestActivation:
    def test_activate_stores_token(self):
        plan = _create_plan()
        plan.activate("AUTH_9")
        assert plan.status == RecurringDonationStatus.ACTIVE.value
        assert plan.gateway_authorization_token == "AUTH_9"
        assert plan.has_been_activated

    def test_activate_raises_event(self):
        plan = _create_plan()
        plan._events.clear()
        plan.activate("AUTH_9")
        assert isinstance(plan._events[0], RecurringDonationActivated)

    def test_activation_requires_a_token(self):
        plan = _create_plan()
        with pytest.raises(ValidationError):
            plan.activate(None)

    def test_token_is_set_once(self):
        plan = _create_plan()
        plan.activate("AUTH_9")
        with pytest.raises(ValidationError):
            plan.store_authorization_token("AUTH_other")

    def test_same_token_again_is_accepted(self):
        plan = _create_plan()
        plan.activate("AUTH_9")
        plan.activate("AUTH_9")
        assert plan.gateway_authorization_token == "AUTH_9"


class TestInitialPaymentFailure:
    def test_pending_plan_fails(self):
        plan = _create_plan()
        assert plan.fail_initial_payment() is True
        assert plan.status == RecurringDonationStatus.FAILED.value
        assert plan.failure_reason == INITIAL_PAYMENT_FAILED

    def test_failure_raises_event(self):
        plan = _create_plan()
        plan._events.clear()
        plan.fail_initial_payment()
        assert isinstance(plan._events[0], RecurringDonationFailed)

    def test_activated_plan_never_fails(self):
        plan = _create_plan()
        plan.activate("AUTH_9")
        assert plan.fail_initial_payment() is False
        assert plan.status == RecurringDonationStatus.ACTIVE.value


class TestSubscription:
    def test_record_subscription(self):
        plan = _create_plan()
        plan.activate("AUTH_9")
        plan.record_subscription("SUB_abc", "AUTH_9")
        assert plan.gateway_subscription_id == "SUB_abc"

    def test_subscription_code_is_set_once(self):
        plan = _create_plan()
        plan.record_subscription("SUB_abc", "AUTH_9")
        with pytest.raises(ValidationError):
            plan.record_subscription("SUB_xyz", "AUTH_9")

    def test_empty_subscription_code_rejected(self):
        plan = _create_plan()
        with pytest.raises(ValidationError):
            plan.store_subscription_id("")


class TestRenewal:
    def test_renewal_requires_authorization_token(self):
        plan = _create_plan()
        with pytest.raises(ValidationError):
            plan.record_renewal("don-1")

    def test_renewal_writes_log(self):
        plan = _create_plan()
        plan.activate("AUTH_9")
        plan.record_renewal("don-1")
        assert plan.log_entries[-1].message == "Renewal processed. Donation #don-1"


class TestCancellation:
    def test_cancel_active_plan(self):
        plan = _create_plan()
        plan.activate("AUTH_9")
        assert plan.cancel(source="webhook") is True
        assert plan.cancelled is True
        assert plan.status == RecurringDonationStatus.CANCELLED.value

    def test_cancel_raises_event_with_source(self):
        plan = _create_plan()
        plan._events.clear()
        plan.cancel(source="operator")
        event = plan._events[0]
        assert isinstance(event, RecurringDonationCancelled)
        assert event.source == "operator"

    def test_cancel_twice_is_a_no_op(self):
        plan = _create_plan()
        plan.cancel(source="webhook")
        assert plan.cancel(source="webhook") is False

    def test_cancelling_a_failed_plan_keeps_failed_status(self):
        plan = _create_plan()
        plan.fail_initial_payment()
        plan.cancel(source="operator")
        assert plan.cancelled is True
        assert plan.status == RecurringDonationStatus.FAILED.value


class TestEmailToken:
    def test_cache_email_token(self):
        plan = _create_plan()
        plan.cache_email_token("tok_1")
        assert plan.email_token == "tok_1"

    def test_empty_email_token_rejected(self):
        plan = _create_plan()
        with pytest.raises(ValidationError):
            plan.cache_email_token("")


class TestSupportedPeriods:
    def test_quarterly_is_removed(self):
        periods = {"week": "Weekly", "month": "Monthly", "quarter": "Quarterly", "year": "Yearly"}
        assert supported_periods(periods) == {"week": "Weekly", "month": "Monthly", "year": "Yearly"}
