"""Donation aggregate (CQRS): a single donation attempt.

The donation is created pending, with the transaction reference Paystack
assigned at checkout. Completion is reported asynchronously through either
the webhook or the donor's return to the receipt page, so the aggregate
carries a ``processed`` marker that flips false -> true exactly once.

State Machine:
    PENDING → COMPLETED → REFUNDED
    PENDING → FAILED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, String

from donations.domain import donations
from donations.donation.events import (
    DonationCompleted,
    DonationCreated,
    DonationFailed,
    DonationRefunded,
    RenewalDonationCreated,
)


class DonationStatus(Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    REFUNDED = "Refunded"


_VALID_TRANSITIONS = {
    DonationStatus.PENDING: {DonationStatus.COMPLETED, DonationStatus.FAILED},
    DonationStatus.COMPLETED: {DonationStatus.REFUNDED},
    DonationStatus.FAILED: set(),  # Terminal
    DonationStatus.REFUNDED: set(),  # Terminal
}


@donations.entity(part_of="Donation")
class DonationLogEntry:
    """One line of the donation's audit trail."""

    message = String(required=True, max_length=2000)
    logged_at = DateTime(required=True)


@donations.aggregate
class Donation:
    amount = Float(required=True)
    currency = String(max_length=3, default="NGN")
    donor_email = String(max_length=254)
    status = String(
        choices=DonationStatus,
        default=DonationStatus.PENDING.value,
    )

    # Correlation with Paystack
    gateway_transaction_reference = String(required=True, max_length=255)
    gateway_transaction_id = String(max_length=255)
    gateway_transaction_url = String(max_length=500)
    failure_reason = String(max_length=1000)

    # Guards
    processed = Boolean(default=False)
    refunded = Boolean(default=False)
    test_mode = Boolean(default=False)

    recurring_donation_id = Identifier()
    is_renewal = Boolean(default=False)

    log_entries = HasMany(DonationLogEntry)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        amount: float,
        currency: str,
        gateway_transaction_reference: str,
        test_mode: bool,
        recurring_donation_id: str | None = None,
        donor_email: str | None = None,
    ):
        """Record a pending donation awaiting confirmation from Paystack."""
        now = datetime.now(UTC)
        donation = cls(
            amount=amount,
            currency=currency,
            donor_email=donor_email,
            gateway_transaction_reference=gateway_transaction_reference,
            test_mode=test_mode,
            recurring_donation_id=recurring_donation_id,
            created_at=now,
            updated_at=now,
        )
        donation.raise_(
            DonationCreated(
                donation_id=str(donation.id),
                amount=amount,
                currency=currency,
                gateway_transaction_reference=gateway_transaction_reference,
                test_mode=test_mode,
                recurring_donation_id=recurring_donation_id,
                created_at=now,
            )
        )
        return donation

    @classmethod
    def create_renewal(
        cls,
        recurring_donation_id: str,
        amount: float,
        currency: str,
        gateway_transaction_reference: str,
        test_mode: bool,
        donor_email: str | None = None,
    ):
        """Record a renewal charge.

        Paystack only notifies after it has charged the stored authorization,
        so renewals are born completed and already processed.
        """
        now = datetime.now(UTC)
        donation = cls(
            amount=amount,
            currency=currency,
            donor_email=donor_email,
            status=DonationStatus.COMPLETED.value,
            gateway_transaction_reference=gateway_transaction_reference,
            test_mode=test_mode,
            recurring_donation_id=recurring_donation_id,
            is_renewal=True,
            processed=True,
            created_at=now,
            updated_at=now,
        )
        donation.add_log_entry("Renewal donation created from Paystack subscription charge")
        donation.raise_(
            RenewalDonationCreated(
                donation_id=str(donation.id),
                recurring_donation_id=recurring_donation_id,
                amount=amount,
                currency=currency,
                gateway_transaction_reference=gateway_transaction_reference,
                created_at=now,
            )
        )
        return donation

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: DonationStatus) -> None:
        current = DonationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def matches_reference(self, reference: str | None) -> bool:
        """A reference that differs from the stored one is a non-match, never an error."""
        return bool(reference) and reference == self.gateway_transaction_reference

    def add_log_entry(self, message: str) -> None:
        now = datetime.now(UTC)
        self.add_log_entries(DonationLogEntry(message=message, logged_at=now))
        self.updated_at = now

    # -------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------
    def complete(self, gateway_transaction_id: str | None, transaction_url: str | None) -> None:
        """Mark the charge as confirmed by Paystack."""
        self._assert_can_transition(DonationStatus.COMPLETED)
        now = datetime.now(UTC)
        self.status = DonationStatus.COMPLETED.value
        self.gateway_transaction_id = gateway_transaction_id
        self.gateway_transaction_url = transaction_url
        self.updated_at = now
        self.raise_(
            DonationCompleted(
                donation_id=str(self.id),
                gateway_transaction_reference=self.gateway_transaction_reference,
                gateway_transaction_id=gateway_transaction_id,
                recurring_donation_id=self.recurring_donation_id,
                completed_at=now,
            )
        )

    def fail(self, reason: str) -> None:
        """Mark the charge as failed, keeping Paystack's message in the audit trail."""
        self._assert_can_transition(DonationStatus.FAILED)
        now = datetime.now(UTC)
        self.status = DonationStatus.FAILED.value
        self.failure_reason = reason
        self.add_log_entry(reason)
        self.raise_(
            DonationFailed(
                donation_id=str(self.id),
                gateway_transaction_reference=self.gateway_transaction_reference,
                reason=reason,
                recurring_donation_id=self.recurring_donation_id,
                failed_at=now,
            )
        )

    def mark_processed(self) -> None:
        """Flip the processed marker. Must be the last step of a reconciliation."""
        if self.processed:
            raise ValidationError({"processed": ["Donation has already been processed"]})
        self.processed = True
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------
    def mark_refunded(self, message: str) -> None:
        """Record a refund that Paystack accepted."""
        if self.refunded:
            raise ValidationError({"refunded": ["Donation has already been refunded"]})
        self._assert_can_transition(DonationStatus.REFUNDED)
        now = datetime.now(UTC)
        self.refunded = True
        self.status = DonationStatus.REFUNDED.value
        self.add_log_entry(message)
        self.raise_(
            DonationRefunded(
                donation_id=str(self.id),
                gateway_transaction_reference=self.gateway_transaction_reference,
                amount=self.amount,
                refunded_at=now,
            )
        )
