"""Donation refund, operator-initiated through the Paystack refund API.

Guarded by the donation's ``refunded`` marker: a donation already refunded
returns False without calling Paystack. Any failure (unreachable API, a
falsy Paystack status) is written to the donation's audit trail and returns
False with the marker untouched; the operator retries by hand.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from donations.config import get_settings
from donations.domain import donations
from donations.donation.donation import Donation, DonationStatus
from donations.gateway import get_gateway

logger = structlog.get_logger(__name__)

DEFAULT_MERCHANT_NOTE = "Refunded from GiveStream dashboard"


def is_donation_refundable(donation: Donation) -> bool:
    return (
        get_settings().has_valid_api_key(donation.test_mode)
        and bool(donation.gateway_transaction_reference)
        and not donation.refunded
        and donation.status == DonationStatus.COMPLETED.value
    )


@donations.command(part_of="Donation")
class RefundDonation:
    donation_id = Identifier(required=True)
    merchant_note = String(max_length=500, default=DEFAULT_MERCHANT_NOTE)


@donations.command_handler(part_of=Donation)
class RefundDonationHandler:
    @handle(RefundDonation)
    def refund_donation(self, command):
        repo = current_domain.repository_for(Donation)
        donation = repo.get(command.donation_id)

        if donation.refunded:
            return False

        if not is_donation_refundable(donation):
            logger.info("donation_not_refundable", donation_id=str(donation.id), status=donation.status)
            return False

        response = get_gateway(donation.test_mode).refund(
            transaction=donation.gateway_transaction_reference,
            merchant_note=command.merchant_note or DEFAULT_MERCHANT_NOTE,
        )

        if not response.succeeded:
            donation.add_log_entry(f"Paystack refund failed with message: {response.message or 'Unknown error'}")
            repo.add(donation)
            logger.warning("donation_refund_failed", donation_id=str(donation.id), message=response.message)
            return False

        donation.mark_refunded("Refunded automatically from dashboard")
        repo.add(donation)
        logger.info("donation_refunded", donation_id=str(donation.id))
        return True
