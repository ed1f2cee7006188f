"""Paystack event vocabulary.

Every raw Paystack event string maps to one (subject, kind) pair through
EVENT_TYPES. Anything not in the table is acknowledged and ignored so that
Paystack stops retrying events nobody will ever act on.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventSubject(Enum):
    DONATION = "donation"
    SUBSCRIPTION = "subscription"


class EventKind(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    FIRST_PAYMENT = "first_payment"
    RENEWAL = "renewal"
    DISABLE = "disable"
    IGNORED = "ignored"


EVENT_TYPES: dict[str, tuple[EventSubject, EventKind]] = {
    "charge.success": (EventSubject.DONATION, EventKind.SUCCESS),
    "charge.failed": (EventSubject.DONATION, EventKind.FAILURE),
    "subscription.create": (EventSubject.SUBSCRIPTION, EventKind.FIRST_PAYMENT),
    "invoice.update": (EventSubject.SUBSCRIPTION, EventKind.RENEWAL),
    "subscription.disable": (EventSubject.SUBSCRIPTION, EventKind.DISABLE),
    "subscription.not_renew": (EventSubject.SUBSCRIPTION, EventKind.DISABLE),
}

IGNORED = (EventSubject.DONATION, EventKind.IGNORED)


def classify(event_type: str, data: dict[str, Any]) -> tuple[EventSubject, EventKind]:
    subject, kind = EVENT_TYPES.get(event_type, IGNORED)
    # Unpaid invoices carry nothing to reconcile yet
    if kind is EventKind.RENEWAL and not data.get("paid"):
        return IGNORED
    return subject, kind


def _nested(data: dict[str, Any], *path: str) -> Any:
    value: Any = data
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


@dataclass(frozen=True)
class InterpretedEvent:
    """An authenticated, classified Paystack event. Lives for one delivery."""

    event_type: str
    subject: EventSubject
    kind: EventKind
    test_mode: bool
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_ignored(self) -> bool:
        return self.kind is EventKind.IGNORED

    @property
    def correlation_key(self) -> str | None:
        """The reference or code that ties the event to a local record."""
        if self.kind in (EventKind.SUCCESS, EventKind.FAILURE):
            key = self.data.get("reference")
        elif self.kind is EventKind.FIRST_PAYMENT:
            key = self.authorization_code
        elif self.kind in (EventKind.RENEWAL, EventKind.DISABLE):
            key = self.subscription_code
        else:
            key = None
        return str(key) if key else None

    @property
    def is_complete(self) -> bool:
        """True when the payload carries every field its kind needs."""
        if not self.correlation_key:
            return False
        if self.kind is EventKind.FIRST_PAYMENT:
            return bool(self.subscription_code)
        if self.kind is EventKind.RENEWAL:
            return bool(self.renewal_reference)
        return True

    @property
    def reference(self) -> str | None:
        return self.data.get("reference")

    @property
    def transaction_id(self) -> str | None:
        transaction_id = self.data.get("id")
        return str(transaction_id) if transaction_id is not None else None

    @property
    def authorization_code(self) -> str | None:
        return _nested(self.data, "authorization", "authorization_code")

    @property
    def subscription_code(self) -> str | None:
        return self.data.get("subscription_code") or _nested(self.data, "subscription", "subscription_code")

    @property
    def email_token(self) -> str | None:
        return self.data.get("email_token") or _nested(self.data, "subscription", "email_token")

    @property
    def renewal_reference(self) -> str | None:
        return _nested(self.data, "transaction", "reference") or self.data.get("invoice_code")

    @property
    def gateway_message(self) -> str:
        return self.data.get("gateway_response") or self.data.get("message") or "Unknown failure"


@dataclass(frozen=True)
class InvalidEvent:
    """A delivery that failed authentication or shape checks."""

    status: int
    response: str
