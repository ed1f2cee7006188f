"""Repository for the RecurringDonation aggregate."""

from donations.domain import donations
from donations.recurring.recurring_donation import RecurringDonation


@donations.repository(part_of=RecurringDonation)
class RecurringDonationRepository:
    def find_by_subscription_code(self, subscription_code: str) -> RecurringDonation | None:
        if not subscription_code:
            return None
        results = self._dao.query.filter(gateway_subscription_id=subscription_code).all().items
        return results[0] if results else None

    def find_by_authorization_token(self, authorization_token: str) -> RecurringDonation | None:
        """Find the plan whose first charge left this authorization code behind."""
        if not authorization_token:
            return None
        results = self._dao.query.filter(gateway_authorization_token=authorization_token).all().items
        return results[0] if results else None
