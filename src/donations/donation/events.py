"""Domain events for the Donation aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String

from donations.domain import donations


@donations.event(part_of="Donation")
class DonationCreated:
    """A pending donation was recorded against a Paystack transaction reference."""

    donation_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    gateway_transaction_reference = String(required=True)
    test_mode = Boolean(required=True)
    recurring_donation_id = Identifier()
    created_at = DateTime(required=True)


@donations.event(part_of="Donation")
class DonationCompleted:
    """Paystack confirmed the charge."""

    donation_id = Identifier(required=True)
    gateway_transaction_reference = String(required=True)
    gateway_transaction_id = String()
    recurring_donation_id = Identifier()
    completed_at = DateTime(required=True)


@donations.event(part_of="Donation")
class DonationFailed:
    """Paystack reported the charge as failed."""

    donation_id = Identifier(required=True)
    gateway_transaction_reference = String(required=True)
    reason = String(required=True)
    recurring_donation_id = Identifier()
    failed_at = DateTime(required=True)


@donations.event(part_of="Donation")
class DonationRefunded:
    """An operator refunded the donation through Paystack."""

    donation_id = Identifier(required=True)
    gateway_transaction_reference = String(required=True)
    amount = Float(required=True)
    refunded_at = DateTime(required=True)


@donations.event(part_of="Donation")
class RenewalDonationCreated:
    """A recurring plan was charged again; the renewal is complete on creation."""

    donation_id = Identifier(required=True)
    recurring_donation_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    gateway_transaction_reference = String(required=True)
    created_at = DateTime(required=True)
