"""Integration tests for recurring donation endpoints."""

from donations.recurring.recurring_donation import RecurringDonation
from protean import current_domain


def _subscribed_plan(email_token="tok_1"):
    plan = RecurringDonation.create(amount=2500.0, currency="NGN", period="month", test_mode=True)
    plan.activate("AUTH_9")
    plan.record_subscription("SUB_1", "AUTH_9")
    plan.cache_email_token(email_token)
    current_domain.repository_for(RecurringDonation).add(plan)
    return str(plan.id)


class TestGetRecurringAPI:
    def test_returns_plan_with_cancellability(self, client):
        plan_id = _subscribed_plan()
        response = client.get(f"/recurring-donations/{plan_id}")
        assert response.status_code == 200
        assert response.json()["gateway_subscription_id"] == "SUB_1"
        assert response.json()["can_cancel"] is True

    def test_unknown_plan_is_404(self, client):
        assert client.get("/recurring-donations/missing").status_code == 404


class TestCancelAPI:
    def test_cancel_plan(self, client, gateway):
        plan_id = _subscribed_plan()

        response = client.post(f"/recurring-donations/{plan_id}/cancel")

        assert response.json() == {"cancelled": True}
        plan = client.get(f"/recurring-donations/{plan_id}").json()
        assert plan["cancelled"] is True
        assert plan["can_cancel"] is False

    def test_rejected_cancellation(self, client, gateway):
        plan_id = _subscribed_plan()
        gateway.configure(should_succeed=False, failure_message="Subscription not found")

        response = client.post(f"/recurring-donations/{plan_id}/cancel")

        assert response.json() == {"cancelled": False}


class TestPeriodsAPI:
    def test_quarterly_not_offered(self, client):
        response = client.get("/recurring-donations/periods")
        assert response.json() == {"periods": {"week": "Weekly", "month": "Monthly", "year": "Yearly"}}
