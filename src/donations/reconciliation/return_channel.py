"""Return-channel reconciliation.

Runs when the donor's browser comes back to the receipt page with
``?reference=...``. Pulls the transaction's status straight from Paystack
(``transaction/verify``) so the donation settles even if the webhook never
arrives, and shares the webhook's lock and processed-check so only one of the
two channels ever mutates the record.

Never raises. Every miss is a logged no-op that leaves the donation open for
the next page load or webhook redelivery: no reference, an unknown donation,
a mismatched reference, an unusable Paystack reply, or a charge Paystack has
not settled yet.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from donations.donation.donation import Donation, DonationStatus
from donations.donation.outcome import ApplyDonationOutcome
from donations.gateway import get_gateway
from donations.gateway.port import GatewayUnavailable
from donations.reconciliation.guard import RecordGuard, donation_key, get_guard

logger = structlog.get_logger(__name__)


class ReturnChannelReconciler:
    def __init__(self, guard: RecordGuard | None = None, gateway_factory=get_gateway) -> None:
        self.guard = guard or get_guard()
        self.gateway_factory = gateway_factory

    def reconcile(self, reference: str | None, donation_id: str) -> None:
        if not reference:
            return

        repo = current_domain.repository_for(Donation)
        try:
            donation = repo.get(donation_id)
        except ObjectNotFoundError:
            logger.info("return_channel_unknown_donation", donation_id=donation_id)
            return

        if donation.processed:
            return

        # A donor editing the URL must not be able to settle other donations
        if not donation.matches_reference(reference):
            logger.warning("return_channel_reference_mismatch", donation_id=donation_id)
            return

        with self.guard.hold(donation_key(str(donation.id))):
            donation = repo.get(donation_id)
            if donation.processed:
                return

            gateway = self.gateway_factory(donation.test_mode)
            try:
                transaction = gateway.verify(reference)
            except GatewayUnavailable as exc:
                logger.warning("return_channel_verification_unavailable", donation_id=donation_id, error=str(exc))
                return

            if not transaction.is_settled:
                logger.info(
                    "return_channel_transaction_unsettled",
                    donation_id=donation_id,
                    paystack_status=transaction.status,
                )
                return

            try:
                current_domain.process(
                    ApplyDonationOutcome(
                        donation_id=str(donation.id),
                        succeeded=transaction.is_successful,
                        gateway_transaction_id=transaction.id,
                        authorization_code=transaction.authorization_code,
                        message=None if transaction.is_successful else transaction.failure_message,
                        source="return",
                    ),
                    asynchronous=False,
                )
            except ValidationError as exc:
                logger.error("return_channel_transition_rejected", donation_id=donation_id, errors=exc.messages)


def receipt_notice(donation: Donation) -> str | None:
    """The notice shown to the donor on the receipt page."""
    if donation.status in (DonationStatus.COMPLETED.value, DonationStatus.REFUNDED.value):
        return "Thank you! Your donation has been received."
    if donation.status == DonationStatus.FAILED.value:
        return f"Donation failed in gateway with error: {donation.failure_reason or 'Unknown failure'}"
    return None
