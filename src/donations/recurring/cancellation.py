"""Recurring donation cancellation, operator-initiated.

Disabling a Paystack subscription needs the subscription code and the
subscription's email token. The token is fetched lazily from Paystack the
first time it is needed and cached on the plan.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from donations.config import get_settings
from donations.domain import donations
from donations.gateway import get_gateway
from donations.recurring.recurring_donation import RecurringDonation

logger = structlog.get_logger(__name__)


def is_subscription_cancellable(can_cancel: bool, recurring: RecurringDonation) -> bool:
    if not can_cancel:
        return can_cancel

    return (
        get_settings().has_valid_api_key(recurring.test_mode)
        and bool(recurring.gateway_subscription_id)
        and not recurring.cancelled
    )


def fetch_email_token(recurring: RecurringDonation) -> str | None:
    """Return the plan's email token, fetching and caching it when missing.

    None means Paystack could not supply one; nothing is cached in that case.
    """
    if recurring.email_token:
        return recurring.email_token

    response = get_gateway(recurring.test_mode).fetch_subscription(recurring.gateway_subscription_id)
    token = response.data.get("email_token") if response.succeeded else None
    if not token:
        logger.warning(
            "email_token_unavailable",
            recurring_donation_id=str(recurring.id),
            message=response.message,
        )
        return None

    recurring.cache_email_token(token)
    return token


@donations.command(part_of="RecurringDonation")
class CancelRecurringDonation:
    recurring_donation_id = Identifier(required=True)


@donations.command_handler(part_of=RecurringDonation)
class CancelRecurringDonationHandler:
    @handle(CancelRecurringDonation)
    def cancel_recurring_donation(self, command):
        repo = current_domain.repository_for(RecurringDonation)
        recurring = repo.get(command.recurring_donation_id)

        if recurring.cancelled or not recurring.gateway_subscription_id:
            return False

        token = fetch_email_token(recurring)
        if not token:
            recurring.add_log_entry("Paystack subscription cancellation failed: email token unavailable")
            repo.add(recurring)
            return False

        response = get_gateway(recurring.test_mode).disable_subscription(recurring.gateway_subscription_id, token)
        if not response.succeeded:
            recurring.add_log_entry(
                f"Paystack subscription cancellation failed with message: {response.message or 'Unknown error'}"
            )
            repo.add(recurring)
            logger.warning(
                "subscription_cancellation_failed",
                recurring_donation_id=str(recurring.id),
                message=response.message,
            )
            return False

        recurring.cancel(source="operator")
        recurring.add_log_entry("Subscription cancelled in Paystack")
        repo.add(recurring)
        logger.info("subscription_cancelled", recurring_donation_id=str(recurring.id))
        return True
