"""Donation outcome: command and handler.

Applies Paystack's verdict on a one-time charge. Both reconciliation channels
(the webhook and the donor's return to the receipt page) end up here, so the
terminal transition is written exactly one way:

- success: complete the donation, record the dashboard URL, activate its
  recurring plan and keep the authorization code needed for renewals
- failure: fail the donation with Paystack's message; a first-charge failure
  fails the whole recurring plan

The processed marker is flipped last, after every downstream change.
Callers hold the record guard around this command.
"""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from donations.config import get_settings
from donations.domain import donations
from donations.donation.donation import Donation
from donations.recurring.recurring_donation import RecurringDonation, RecurringDonationStatus

logger = structlog.get_logger(__name__)

_ACTIVATABLE = (RecurringDonationStatus.PENDING.value, RecurringDonationStatus.ACTIVE.value)


@donations.command(part_of="Donation")
class ApplyDonationOutcome:
    donation_id = Identifier(required=True)
    succeeded = Boolean(required=True)
    gateway_transaction_id = String(max_length=255)
    authorization_code = String(max_length=255)
    message = String(max_length=1000)
    source = String(required=True, max_length=20)  # webhook, return


@donations.command_handler(part_of=Donation)
class DonationOutcomeHandler:
    @handle(ApplyDonationOutcome)
    def apply_outcome(self, command):
        repo = current_domain.repository_for(Donation)
        donation = repo.get(command.donation_id)

        recurring_repo = current_domain.repository_for(RecurringDonation)
        recurring = None
        if donation.recurring_donation_id:
            recurring = recurring_repo.get(donation.recurring_donation_id)

        if command.succeeded:
            transaction_url = None
            if command.gateway_transaction_id:
                transaction_url = get_settings().transaction_url(command.gateway_transaction_id)
            donation.complete(
                gateway_transaction_id=command.gateway_transaction_id,
                transaction_url=transaction_url,
            )
            if recurring is not None and recurring.status in _ACTIVATABLE:
                recurring.activate(command.authorization_code)
        else:
            donation.fail(command.message or "Unknown failure")
            if recurring is not None:
                recurring.fail_initial_payment()

        if recurring is not None:
            recurring_repo.add(recurring)

        donation.mark_processed()
        repo.add(donation)

        logger.info(
            "donation_outcome_applied",
            donation_id=str(donation.id),
            status=donation.status,
            source=command.source,
        )
        return donation.status
