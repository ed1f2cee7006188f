"""Domain events for the RecurringDonation aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from donations.domain import donations


@donations.event(part_of="RecurringDonation")
class RecurringDonationCreated:
    recurring_donation_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    period = String(required=True)
    created_at = DateTime(required=True)


@donations.event(part_of="RecurringDonation")
class RecurringDonationActivated:
    """The first charge succeeded; the plan is now active."""

    recurring_donation_id = Identifier(required=True)
    activated_at = DateTime(required=True)


@donations.event(part_of="RecurringDonation")
class RecurringDonationFailed:
    """The first charge failed, which fails the whole plan."""

    recurring_donation_id = Identifier(required=True)
    reason = String(required=True)
    failed_at = DateTime(required=True)


@donations.event(part_of="RecurringDonation")
class SubscriptionRecorded:
    """Paystack created the subscription backing the plan."""

    recurring_donation_id = Identifier(required=True)
    gateway_subscription_id = String(required=True)
    recorded_at = DateTime(required=True)


@donations.event(part_of="RecurringDonation")
class RecurringDonationRenewed:
    recurring_donation_id = Identifier(required=True)
    donation_id = Identifier(required=True)
    renewed_at = DateTime(required=True)


@donations.event(part_of="RecurringDonation")
class RecurringDonationCancelled:
    recurring_donation_id = Identifier(required=True)
    source = String(required=True)  # webhook, operator
    cancelled_at = DateTime(required=True)
