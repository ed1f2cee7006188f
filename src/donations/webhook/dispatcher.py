"""Reconciliation dispatcher.

Routes an interpreted event to its processor and owns the idempotency guard:
the target record is located, then re-read under its lock, and the
transition is applied only if it is not already reflected on the record.
The return channel shares the same lock keys and the same applied-check, so
whichever channel arrives first performs the mutation and the other is a
no-op.

Status mapping:
    ignored event / applied / already applied → 200
    record not found                          → 404 (Paystack retries)
    transition rejected by the record         → 500 (Paystack retries)
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from donations.reconciliation.guard import RecordGuard, get_guard
from donations.webhook.classification import EventSubject, InterpretedEvent
from donations.webhook.donation_processor import DonationProcessor
from donations.webhook.processor import WebhookProcessor
from donations.webhook.subscription_processor import SubscriptionProcessor

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    processed: bool
    status_code: int
    message: str


class ReconciliationDispatcher:
    def __init__(
        self,
        guard: RecordGuard | None = None,
        donation_processor: WebhookProcessor | None = None,
        subscription_processor: WebhookProcessor | None = None,
    ) -> None:
        self.guard = guard or get_guard()
        self.donation_processor = donation_processor or DonationProcessor()
        self.subscription_processor = subscription_processor or SubscriptionProcessor()

    def processor_for(self, event: InterpretedEvent) -> WebhookProcessor:
        if event.subject is EventSubject.SUBSCRIPTION:
            return self.subscription_processor
        return self.donation_processor

    def dispatch(self, event: InterpretedEvent) -> DispatchResult:
        if event.is_ignored:
            logger.info("webhook_event_ignored", event_type=event.event_type)
            return DispatchResult(
                processed=True,
                status_code=200,
                message=f"Webhook received; no action taken for {event.event_type}",
            )

        processor = self.processor_for(event)
        record = processor.locate(event)
        if record is None:
            logger.warning(
                "webhook_record_not_found",
                event_type=event.event_type,
                correlation_key=event.correlation_key,
            )
            return DispatchResult(processed=False, status_code=404, message=processor.not_found_message)

        with self.guard.hold(processor.guard_key(record)):
            try:
                record = processor.reload(record)
                if processor.is_applied(record, event):
                    logger.info(
                        "webhook_already_processed",
                        event_type=event.event_type,
                        record_id=str(record.id),
                    )
                    return DispatchResult(processed=True, status_code=200, message="Webhook already processed")

                result = processor.process(event, record)
            except ObjectNotFoundError:
                logger.warning("webhook_record_vanished", event_type=event.event_type, record_id=str(record.id))
                return DispatchResult(processed=False, status_code=404, message=processor.not_found_message)
            except ValidationError as exc:
                logger.error(
                    "webhook_transition_rejected",
                    event_type=event.event_type,
                    record_id=str(record.id),
                    errors=exc.messages,
                )
                return DispatchResult(processed=False, status_code=500, message="Webhook could not be processed")

        logger.info(
            "webhook_processed",
            event_type=event.event_type,
            record_id=str(record.id),
            completed=result.completed,
        )
        return DispatchResult(processed=True, status_code=200, message=result.message)
