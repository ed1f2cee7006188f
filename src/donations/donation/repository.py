"""Repository for the Donation aggregate."""

from donations.domain import donations
from donations.donation.donation import Donation


@donations.repository(part_of=Donation)
class DonationRepository:
    def find_by_reference(self, reference: str) -> Donation | None:
        """Find the donation that carries a Paystack transaction reference."""
        if not reference:
            return None
        results = self._dao.query.filter(gateway_transaction_reference=reference).all().items
        return results[0] if results else None

    def find_for_recurring(self, recurring_donation_id: str) -> list[Donation]:
        return self._dao.query.filter(recurring_donation_id=recurring_donation_id).all().items
