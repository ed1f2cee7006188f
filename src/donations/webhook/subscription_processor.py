"""Subscription webhook processor: first payment, renewal and disable.

Every branch funnels through the same command handler, which persists the
subscription metadata and writes the audit log the same way each time.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from donations.domain import donations
from donations.donation.donation import Donation
from donations.reconciliation.guard import recurring_key
from donations.recurring.recurring_donation import RecurringDonation
from donations.webhook.classification import EventKind, InterpretedEvent
from donations.webhook.processor import ProcessResult, WebhookProcessor

logger = structlog.get_logger(__name__)


@donations.command(part_of="RecurringDonation")
class RecordFirstPayment:
    recurring_donation_id = Identifier(required=True)
    subscription_code = String(required=True, max_length=255)
    authorization_code = String(max_length=255)
    email_token = String(max_length=255)


@donations.command(part_of="RecurringDonation")
class RecordRenewal:
    recurring_donation_id = Identifier(required=True)
    gateway_transaction_reference = String(required=True, max_length=255)


@donations.command(part_of="RecurringDonation")
class RecordSubscriptionDisabled:
    recurring_donation_id = Identifier(required=True)


@donations.command_handler(part_of=RecurringDonation)
class SubscriptionWebhookHandler:
    @handle(RecordFirstPayment)
    def record_first_payment(self, command):
        repo = current_domain.repository_for(RecurringDonation)
        recurring = repo.get(command.recurring_donation_id)
        recurring.record_subscription(command.subscription_code, command.authorization_code)
        if command.email_token and not recurring.email_token:
            recurring.cache_email_token(command.email_token)
        self._persist(recurring, "Subscription Webhook: First payment processed")

    @handle(RecordRenewal)
    def record_renewal(self, command):
        repo = current_domain.repository_for(RecurringDonation)
        recurring = repo.get(command.recurring_donation_id)
        donation = Donation.create_renewal(
            recurring_donation_id=str(recurring.id),
            amount=recurring.amount,
            currency=recurring.currency,
            gateway_transaction_reference=command.gateway_transaction_reference,
            test_mode=recurring.test_mode,
            donor_email=recurring.donor_email,
        )
        recurring.record_renewal(str(donation.id))
        current_domain.repository_for(Donation).add(donation)
        self._persist(recurring, "Subscription Webhook: Renewal processed")
        return str(donation.id)

    @handle(RecordSubscriptionDisabled)
    def record_disabled(self, command):
        repo = current_domain.repository_for(RecurringDonation)
        recurring = repo.get(command.recurring_donation_id)
        recurring.cancel(source="webhook")
        self._persist(recurring, "Subscription Webhook: Subscription disabled in Paystack")

    def _persist(self, recurring: RecurringDonation, message: str) -> None:
        recurring.add_log_entry(message)
        current_domain.repository_for(RecurringDonation).add(recurring)
        logger.info("subscription_webhook_applied", recurring_donation_id=str(recurring.id), message=message)


class SubscriptionProcessor(WebhookProcessor):
    not_found_message = "Recurring donation not found"

    def locate(self, event: InterpretedEvent) -> RecurringDonation | None:
        repo = current_domain.repository_for(RecurringDonation)
        recurring = repo.find_by_subscription_code(event.subscription_code)
        if recurring is None and event.kind is EventKind.FIRST_PAYMENT:
            recurring = repo.find_by_authorization_token(event.authorization_code)
        if recurring is not None and bool(recurring.test_mode) != event.test_mode:
            logger.warning(
                "webhook_mode_mismatch",
                recurring_donation_id=str(recurring.id),
                event_test_mode=event.test_mode,
            )
            return None
        return recurring

    def guard_key(self, record: RecurringDonation) -> str:
        return recurring_key(str(record.id))

    def reload(self, record: RecurringDonation) -> RecurringDonation:
        return current_domain.repository_for(RecurringDonation).get(record.id)

    def is_applied(self, record: RecurringDonation, event: InterpretedEvent) -> bool:
        if event.kind is EventKind.FIRST_PAYMENT:
            return bool(record.gateway_subscription_id) and record.gateway_subscription_id == event.subscription_code
        if event.kind is EventKind.RENEWAL:
            existing = current_domain.repository_for(Donation).find_by_reference(event.renewal_reference)
            return existing is not None
        if event.kind is EventKind.DISABLE:
            return bool(record.cancelled)
        return False

    def process(self, event: InterpretedEvent, record: RecurringDonation) -> ProcessResult:
        recurring_donation_id = str(record.id)

        if event.kind is EventKind.FIRST_PAYMENT:
            command = RecordFirstPayment(
                recurring_donation_id=recurring_donation_id,
                subscription_code=event.subscription_code,
                authorization_code=event.authorization_code,
                email_token=event.email_token,
            )
            message = "Subscription Webhook: First payment processed"
        elif event.kind is EventKind.RENEWAL:
            command = RecordRenewal(
                recurring_donation_id=recurring_donation_id,
                gateway_transaction_reference=event.renewal_reference,
            )
            message = "Subscription Webhook: Renewal processed"
        elif event.kind is EventKind.DISABLE:
            command = RecordSubscriptionDisabled(recurring_donation_id=recurring_donation_id)
            message = "Subscription Webhook: Subscription cancelled"
        else:
            raise ValueError(f"Unsupported subscription event: {event.event_type}")

        current_domain.process(command, asynchronous=False)
        return ProcessResult(completed=True, message=message)
