"""Receiver for incoming Paystack webhooks.

Performs the transport-level check (the delivery must be a POST), obtains an
Interpreter to authenticate and classify the payload, and hands valid events
to the dispatcher. Holds no state across deliveries.
"""

from dataclasses import dataclass

import structlog

from donations.config import GatewaySettings, get_settings
from donations.utils.logging import bind_webhook_context, clear_context
from donations.webhook.classification import InvalidEvent
from donations.webhook.dispatcher import ReconciliationDispatcher
from donations.webhook.interpreter import INVALID_REQUEST, Interpreter

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class WebhookRequest:
    body: bytes
    signature: str | None = None
    method: str | None = "POST"


@dataclass(frozen=True)
class WebhookResponse:
    status_code: int
    body: str


class WebhookReceiver:
    def __init__(
        self,
        settings: GatewaySettings | None = None,
        dispatcher: ReconciliationDispatcher | None = None,
    ) -> None:
        self._settings = settings
        self.dispatcher = dispatcher or ReconciliationDispatcher()

    @property
    def settings(self) -> GatewaySettings:
        return self._settings or get_settings()

    def has_valid_request_method(self, request: WebhookRequest) -> bool:
        """Only POST deliveries are accepted.

        A delivery without any method information is rejected unless
        ``allow_methodless_webhooks`` is switched on for an internal caller.
        """
        if request.method is None:
            return self.settings.allow_methodless_webhooks
        return request.method.upper() == "POST"

    def get_interpreter(self) -> Interpreter:
        return Interpreter(self.settings)

    def receive(self, request: WebhookRequest) -> WebhookResponse:
        if not self.has_valid_request_method(request):
            logger.warning("webhook_invalid_request_method", method=request.method)
            return WebhookResponse(status_code=500, body=INVALID_REQUEST)

        interpreter = self.get_interpreter()
        event = interpreter.interpret(request.body, request.signature)
        if isinstance(event, InvalidEvent):
            return WebhookResponse(status_code=interpreter.status, body=interpreter.response)

        bind_webhook_context(paystack_event=event.event_type, correlation_key=event.correlation_key)
        try:
            result = self.dispatcher.dispatch(event)
        finally:
            clear_context()

        return WebhookResponse(status_code=result.status_code, body=result.message)
