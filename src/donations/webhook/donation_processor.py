"""Donation webhook processor: charge.success / charge.failed."""

import structlog
from protean.utils.globals import current_domain

from donations.donation.donation import Donation, DonationStatus
from donations.donation.outcome import ApplyDonationOutcome
from donations.reconciliation.guard import donation_key
from donations.webhook.classification import EventKind, InterpretedEvent
from donations.webhook.processor import ProcessResult, WebhookProcessor

logger = structlog.get_logger(__name__)


class DonationProcessor(WebhookProcessor):
    not_found_message = "Donation not found"

    def locate(self, event: InterpretedEvent) -> Donation | None:
        donation = current_domain.repository_for(Donation).find_by_reference(event.correlation_key)
        if donation is None or not donation.matches_reference(event.reference):
            return None
        # A delivery signed with one mode's key never touches a record of the other mode
        if bool(donation.test_mode) != event.test_mode:
            logger.warning("webhook_mode_mismatch", donation_id=str(donation.id), event_test_mode=event.test_mode)
            return None
        return donation

    def guard_key(self, record: Donation) -> str:
        return donation_key(str(record.id))

    def reload(self, record: Donation) -> Donation:
        return current_domain.repository_for(Donation).get(record.id)

    def is_applied(self, record: Donation, event: InterpretedEvent) -> bool:
        return bool(record.processed)

    def process(self, event: InterpretedEvent, record: Donation) -> ProcessResult:
        succeeded = event.kind is EventKind.SUCCESS
        status = current_domain.process(
            ApplyDonationOutcome(
                donation_id=str(record.id),
                succeeded=succeeded,
                gateway_transaction_id=event.transaction_id,
                authorization_code=event.authorization_code,
                message=None if succeeded else event.gateway_message,
                source="webhook",
            ),
            asynchronous=False,
        )
        if status == DonationStatus.COMPLETED.value:
            return ProcessResult(completed=True, message="Donation Webhook: Donation completed")
        return ProcessResult(completed=False, message="Donation Webhook: Donation failed")
