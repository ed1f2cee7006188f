"""Donations bounded context: Paystack donation and recurring plan reconciliation.

Holds one-time donations and recurring donation plans, and reconciles their
state with Paystack through two racing channels: the signed webhook and the
donor's browser return to the receipt page.
"""

from protean.domain import Domain

from donations.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

donations = Domain(name="donations")
