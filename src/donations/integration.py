"""Paystack integration: wires the reconciliation core into the hook registry.

``setup()`` is called once by the composition root. It registers:

- the webhook receiver (``process_webhook.paystack``)
- the refund action (``process_refund.paystack``)
- the cancellability filter and cancellation action
- the receipt-page reconciler (``donation_receipt_viewed``)
- the recurring-period filter (``recurring_periods``)

Operator actions take the same per-record guard as the webhook and return
channel, so a refund never interleaves with a reconciliation of the same
donation.
"""

import structlog
from protean.utils.globals import current_domain

from donations import hooks
from donations.config import GatewaySettings, get_settings
from donations.donation.refund import RefundDonation
from donations.hooks import HookRegistry
from donations.reconciliation.guard import RecordGuard, donation_key, get_guard, recurring_key
from donations.reconciliation.return_channel import ReturnChannelReconciler
from donations.recurring.cancellation import CancelRecurringDonation, is_subscription_cancellable
from donations.recurring.recurring_donation import RecurringDonation, supported_periods
from donations.webhook.dispatcher import ReconciliationDispatcher
from donations.webhook.receiver import WebhookReceiver, WebhookRequest, WebhookResponse

logger = structlog.get_logger(__name__)


class PaystackIntegration:
    def __init__(
        self,
        registry: HookRegistry,
        settings: GatewaySettings | None = None,
        guard: RecordGuard | None = None,
    ) -> None:
        self.registry = registry
        self._settings = settings
        self.guard = guard or get_guard()
        self.receiver = WebhookReceiver(settings, ReconciliationDispatcher(guard=self.guard))
        self.reconciler = ReturnChannelReconciler(guard=self.guard)
        self._is_setup = False

    @property
    def settings(self) -> GatewaySettings:
        return self._settings or get_settings()

    @property
    def is_setup(self) -> bool:
        return self._is_setup

    def setup(self) -> bool:
        """Register the integration's callbacks. Returns False if already done."""
        if self._is_setup:
            return False

        self.registry.add(hooks.PROCESS_WEBHOOK, self.process_webhook)
        self.registry.add(hooks.PROCESS_REFUND, self.process_refund)
        self.registry.add(hooks.CAN_CANCEL, self.can_cancel)
        self.registry.add(hooks.PROCESS_CANCELLATION, self.process_cancellation)
        self.registry.add(hooks.RECEIPT_VIEWED, self.reconcile_receipt)
        self.registry.add(hooks.RECURRING_PERIODS, supported_periods)

        self._is_setup = True
        logger.info("paystack_integration_ready", test_mode=self.settings.test_mode)
        return True

    def process_webhook(self, request: WebhookRequest) -> WebhookResponse:
        # A delivery must not re-trigger its own handling from inside a callback
        with self.registry.suspended(hooks.PROCESS_WEBHOOK, self.process_webhook):
            return self.receiver.receive(request)

    def process_refund(self, donation_id: str) -> bool:
        with self.guard.hold(donation_key(donation_id)):
            return current_domain.process(RefundDonation(donation_id=donation_id), asynchronous=False)

    def can_cancel(self, can_cancel: bool, recurring: RecurringDonation) -> bool:
        return is_subscription_cancellable(can_cancel, recurring)

    def process_cancellation(self, recurring_donation_id: str) -> bool:
        with self.guard.hold(recurring_key(recurring_donation_id)):
            return current_domain.process(
                CancelRecurringDonation(recurring_donation_id=recurring_donation_id),
                asynchronous=False,
            )

    def reconcile_receipt(self, donation_id: str, reference: str | None) -> None:
        self.reconciler.reconcile(reference, donation_id)
