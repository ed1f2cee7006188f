"""Paystack webhook interpreter.

Authenticates a delivery and classifies it. The checks run in this order:

1. the body must be a JSON object (400 "Invalid request")
2. the ``x-paystack-signature`` must be the HMAC-SHA512 of the raw body keyed
   by the secret key of the event's mode (401 "Invalid signature")
3. the payload must carry an ``event`` string and a ``data`` object
   (400 "Invalid request")

Whatever the outcome, ``status`` and ``response`` hold what the receiver
should answer.
"""

import hashlib
import hmac
import json

import structlog

from donations.config import GatewaySettings, get_settings
from donations.webhook.classification import EventKind, InterpretedEvent, InvalidEvent, classify

logger = structlog.get_logger(__name__)

INVALID_REQUEST = "Invalid request"
INVALID_SIGNATURE = "Invalid signature"


def compute_signature(raw_payload: bytes, secret_key: str) -> str:
    return hmac.new(secret_key.encode(), raw_payload, hashlib.sha512).hexdigest()


class Interpreter:
    def __init__(self, settings: GatewaySettings | None = None) -> None:
        self.settings = settings or get_settings()
        self.status: int = 200
        self.response: str = "Webhook received"

    def _invalid(self, status: int, response: str) -> InvalidEvent:
        self.status = status
        self.response = response
        return InvalidEvent(status=status, response=response)

    def interpret(self, raw_payload: bytes, signature: str | None) -> InterpretedEvent | InvalidEvent:
        try:
            payload = json.loads(raw_payload)
        except (ValueError, TypeError):
            logger.warning("webhook_malformed_payload", payload_length=len(raw_payload or b""))
            return self._invalid(400, INVALID_REQUEST)

        if not isinstance(payload, dict):
            logger.warning("webhook_malformed_payload", payload_type=type(payload).__name__)
            return self._invalid(400, INVALID_REQUEST)

        data = payload.get("data")
        test_mode = isinstance(data, dict) and data.get("domain") == "test"

        if not self.is_authentic(raw_payload, signature, test_mode):
            return self._invalid(401, INVALID_SIGNATURE)

        event_type = payload.get("event")
        if not isinstance(event_type, str) or not event_type or not isinstance(data, dict):
            logger.warning("webhook_unrecognised_shape", event_type=event_type)
            return self._invalid(400, INVALID_REQUEST)

        subject, kind = classify(event_type, data)
        event = InterpretedEvent(
            event_type=event_type,
            subject=subject,
            kind=kind,
            test_mode=test_mode,
            data=data,
        )

        if kind is not EventKind.IGNORED and not event.is_complete:
            logger.warning("webhook_incomplete_payload", event_type=event_type, kind=kind.value)
            return self._invalid(400, INVALID_REQUEST)

        self.status = 200
        self.response = "Webhook received"
        return event

    def is_authentic(self, raw_payload: bytes, signature: str | None, test_mode: bool) -> bool:
        if not signature:
            logger.warning("webhook_missing_signature")
            return False

        secret_key = self.settings.secret_key(test_mode)
        if not secret_key:
            logger.error("paystack_secret_key_not_configured", test_mode=test_mode)
            return False

        expected = compute_signature(raw_payload, secret_key)
        if not hmac.compare_digest(expected.encode(), signature.strip().lower().encode()):
            logger.warning("webhook_invalid_signature", provided_signature=signature[:8] + "...")
            return False
        return True
