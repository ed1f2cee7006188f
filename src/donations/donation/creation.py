"""Donation creation: command and handler.

Records a pending donation against the transaction reference Paystack issued
at checkout, together with its pending recurring plan when a period is given.
A reference identifies exactly one donation, so a second donation with the
same reference is rejected.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, String
from protean.utils.globals import current_domain

from donations.domain import donations
from donations.donation.donation import Donation
from donations.recurring.recurring_donation import RecurringDonation


@donations.command(part_of="Donation")
class RecordDonation:
    amount = Float(required=True)
    currency = String(max_length=3, default="NGN")
    gateway_transaction_reference = String(required=True, max_length=255)
    test_mode = Boolean(default=False)
    donor_email = String(max_length=254)
    period = String(max_length=20)  # month, week, year; empty for one-time donations


@donations.command_handler(part_of=Donation)
class RecordDonationHandler:
    @handle(RecordDonation)
    def record_donation(self, command):
        donations_repo = current_domain.repository_for(Donation)
        if donations_repo.find_by_reference(command.gateway_transaction_reference) is not None:
            raise ValidationError(
                {"gateway_transaction_reference": ["A donation with this reference already exists"]}
            )

        recurring_donation_id = None
        if command.period:
            recurring = RecurringDonation.create(
                amount=command.amount,
                currency=command.currency or "NGN",
                period=command.period,
                test_mode=bool(command.test_mode),
                donor_email=command.donor_email,
            )
            current_domain.repository_for(RecurringDonation).add(recurring)
            recurring_donation_id = str(recurring.id)

        donation = Donation.create(
            amount=command.amount,
            currency=command.currency or "NGN",
            gateway_transaction_reference=command.gateway_transaction_reference,
            test_mode=bool(command.test_mode),
            recurring_donation_id=recurring_donation_id,
            donor_email=command.donor_email,
        )
        donations_repo.add(donation)
        return {"donation_id": str(donation.id), "recurring_donation_id": recurring_donation_id}
