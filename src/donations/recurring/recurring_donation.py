"""RecurringDonation aggregate (CQRS): a recurring donation plan on Paystack.

The plan starts pending. The first successful charge activates it and leaves
behind a reusable authorization code; Paystack then creates a subscription
(``subscription.create``) and charges that authorization on every renewal.

State Machine:
    PENDING → ACTIVE → CANCELLED
    PENDING → FAILED (first charge failed)
    PENDING → CANCELLED

``gateway_authorization_token`` and ``gateway_subscription_id`` are set at
most once. Writing the same value again is a no-op; a different value is an
invariant violation.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, String

from donations.domain import donations
from donations.recurring.events import (
    RecurringDonationActivated,
    RecurringDonationCancelled,
    RecurringDonationCreated,
    RecurringDonationFailed,
    RecurringDonationRenewed,
    SubscriptionRecorded,
)

INITIAL_PAYMENT_FAILED = "Initial donation failed."


class RecurringDonationStatus(Enum):
    PENDING = "Pending"
    ACTIVE = "Active"
    FAILED = "Failed"
    CANCELLED = "Cancelled"


_VALID_TRANSITIONS = {
    RecurringDonationStatus.PENDING: {
        RecurringDonationStatus.ACTIVE,
        RecurringDonationStatus.FAILED,
        RecurringDonationStatus.CANCELLED,
    },
    RecurringDonationStatus.ACTIVE: {RecurringDonationStatus.CANCELLED},
    RecurringDonationStatus.FAILED: set(),  # Terminal
    RecurringDonationStatus.CANCELLED: set(),  # Terminal
}


@donations.entity(part_of="RecurringDonation")
class RecurringDonationLogEntry:
    message = String(required=True, max_length=2000)
    logged_at = DateTime(required=True)


@donations.aggregate
class RecurringDonation:
    amount = Float(required=True)
    currency = String(max_length=3, default="NGN")
    period = String(max_length=20, default="month")
    donor_email = String(max_length=254)
    status = String(
        choices=RecurringDonationStatus,
        default=RecurringDonationStatus.PENDING.value,
    )
    test_mode = Boolean(default=False)

    # Paystack correlation
    gateway_subscription_id = String(max_length=255)
    gateway_authorization_token = String(max_length=255)
    email_token = String(max_length=255)

    cancelled = Boolean(default=False)
    failure_reason = String(max_length=1000)

    log_entries = HasMany(RecurringDonationLogEntry)
    activated_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        amount: float,
        currency: str,
        period: str,
        test_mode: bool,
        donor_email: str | None = None,
    ):
        now = datetime.now(UTC)
        recurring = cls(
            amount=amount,
            currency=currency,
            period=period,
            test_mode=test_mode,
            donor_email=donor_email,
            created_at=now,
            updated_at=now,
        )
        recurring.raise_(
            RecurringDonationCreated(
                recurring_donation_id=str(recurring.id),
                amount=amount,
                currency=currency,
                period=period,
                created_at=now,
            )
        )
        return recurring

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: RecurringDonationStatus) -> None:
        current = RecurringDonationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def add_log_entry(self, message: str) -> None:
        now = datetime.now(UTC)
        self.add_log_entries(RecurringDonationLogEntry(message=message, logged_at=now))
        self.updated_at = now

    @property
    def has_been_activated(self) -> bool:
        return self.activated_at is not None

    def store_authorization_token(self, token: str | None) -> None:
        if not token:
            raise ValidationError({"gateway_authorization_token": ["Authorization token cannot be empty"]})
        if self.gateway_authorization_token and self.gateway_authorization_token != token:
            raise ValidationError({"gateway_authorization_token": ["Authorization token is already set"]})
        self.gateway_authorization_token = token

    def store_subscription_id(self, subscription_id: str | None) -> None:
        if not subscription_id:
            raise ValidationError({"gateway_subscription_id": ["Subscription code cannot be empty"]})
        if self.gateway_subscription_id and self.gateway_subscription_id != subscription_id:
            raise ValidationError({"gateway_subscription_id": ["Subscription code is already set"]})
        self.gateway_subscription_id = subscription_id

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def activate(self, authorization_token: str | None) -> None:
        """Activate the plan after its first successful charge."""
        self.store_authorization_token(authorization_token)
        if RecurringDonationStatus(self.status) == RecurringDonationStatus.ACTIVE:
            return

        self._assert_can_transition(RecurringDonationStatus.ACTIVE)
        now = datetime.now(UTC)
        self.status = RecurringDonationStatus.ACTIVE.value
        self.activated_at = now
        self.updated_at = now
        self.raise_(
            RecurringDonationActivated(
                recurring_donation_id=str(self.id),
                activated_at=now,
            )
        )

    def fail_initial_payment(self, reason: str = INITIAL_PAYMENT_FAILED) -> bool:
        """Fail the plan when its first charge fails. Returns False once the plan was ever active or has left Pending."""
        if self.has_been_activated or RecurringDonationStatus(self.status) != RecurringDonationStatus.PENDING:
            return False

        self._assert_can_transition(RecurringDonationStatus.FAILED)
        now = datetime.now(UTC)
        self.status = RecurringDonationStatus.FAILED.value
        self.failure_reason = reason
        self.add_log_entry(reason)
        self.raise_(
            RecurringDonationFailed(
                recurring_donation_id=str(self.id),
                reason=reason,
                failed_at=now,
            )
        )
        return True

    def record_subscription(self, subscription_id: str, authorization_token: str | None) -> None:
        """Persist the Paystack subscription created after the first payment."""
        self.store_subscription_id(subscription_id)
        if authorization_token:
            self.store_authorization_token(authorization_token)

        now = datetime.now(UTC)
        self.add_log_entry(f"Paystack subscription {subscription_id} created")
        self.raise_(
            SubscriptionRecorded(
                recurring_donation_id=str(self.id),
                gateway_subscription_id=subscription_id,
                recorded_at=now,
            )
        )

    def record_renewal(self, donation_id: str) -> None:
        """Link a renewal donation. Renewals charge the stored authorization token."""
        if not self.gateway_authorization_token:
            raise ValidationError(
                {"gateway_authorization_token": ["Cannot renew a plan without an authorization token"]}
            )

        now = datetime.now(UTC)
        self.add_log_entry(f"Renewal processed. Donation #{donation_id}")
        self.raise_(
            RecurringDonationRenewed(
                recurring_donation_id=str(self.id),
                donation_id=donation_id,
                renewed_at=now,
            )
        )

    def cancel(self, source: str) -> bool:
        """Cancel the plan. Returns False when it was already cancelled."""
        if self.cancelled:
            return False

        now = datetime.now(UTC)
        self.cancelled = True
        if RecurringDonationStatus.CANCELLED in _VALID_TRANSITIONS[RecurringDonationStatus(self.status)]:
            self.status = RecurringDonationStatus.CANCELLED.value
        self.updated_at = now
        self.raise_(
            RecurringDonationCancelled(
                recurring_donation_id=str(self.id),
                source=source,
                cancelled_at=now,
            )
        )
        return True

    def cache_email_token(self, token: str) -> None:
        if not token:
            raise ValidationError({"email_token": ["Email token cannot be empty"]})
        self.email_token = token
        self.updated_at = datetime.now(UTC)


def supported_periods(periods: dict[str, str]) -> dict[str, str]:
    """Drop recurring periods Paystack plans cannot express (quarterly)."""
    return {period: label for period, label in periods.items() if period != "quarter"}
