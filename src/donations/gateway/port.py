"""Paystack API port (abstract interface).

Defines the outbound capabilities the reconciliation core relies on. The HTTP
adapter talks to the real REST API; FakeGateway stands in for development and
tests without changing any domain or application code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class GatewayUnavailable(Exception):
    """The gateway could not be reached or returned an unusable reply."""


# Transaction statuses that will not change on a later verify
SETTLED_STATUSES = frozenset({"success", "failed", "reversed"})


@dataclass(frozen=True)
class ApiResponse:
    """Outcome of a single call to the Paystack API.

    ``ok`` is false for transport failures, non-2xx replies and malformed
    bodies. ``status`` mirrors Paystack's own boolean ``status`` field.
    ``http_status`` is None when no reply was received at all.
    """

    ok: bool
    status: bool = False
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    http_status: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.ok and self.status


@dataclass(frozen=True)
class Transaction:
    """A verified transaction, as returned by ``transaction/verify``."""

    reference: str
    status: str
    id: str | None = None
    authorization_code: str | None = None
    gateway_response: str | None = None
    message: str = ""

    @property
    def is_successful(self) -> bool:
        return self.status == "success"

    @property
    def is_settled(self) -> bool:
        """False while Paystack may still complete the charge (pending, ongoing, abandoned)."""
        return self.status in SETTLED_STATUSES

    @property
    def failure_message(self) -> str:
        return self.gateway_response or self.message or "Unknown failure"

    @classmethod
    def from_response(cls, reference: str, response: ApiResponse) -> "Transaction":
        data = response.data or {}
        authorization = data.get("authorization") or {}
        transaction_id = data.get("id")
        return cls(
            reference=reference,
            status=str(data["status"]),
            id=str(transaction_id) if transaction_id is not None else None,
            authorization_code=authorization.get("authorization_code"),
            gateway_response=data.get("gateway_response"),
            message=response.message,
        )


class PaystackApi(ABC):
    """Abstract Paystack API interface."""

    @abstractmethod
    def get(self, path: str) -> ApiResponse:
        """GET a path relative to the API base URL."""
        ...

    @abstractmethod
    def post(self, path: str, body: dict[str, Any]) -> ApiResponse:
        """POST a JSON body to a path relative to the API base URL."""
        ...

    def verify(self, reference: str) -> Transaction:
        """Pull the authoritative status of a transaction.

        Raises GatewayUnavailable unless Paystack answered with a 2xx success
        carrying the transaction status. Timeouts, rate limiting, rejected keys
        and unknown references all leave the local record untouched for a
        later retry.
        """
        response = self.get(f"transaction/verify/{reference}")
        if not response.succeeded or not (response.data or {}).get("status"):
            raise GatewayUnavailable(response.message or "Transaction verification failed")
        return Transaction.from_response(reference, response)

    def refund(self, transaction: str, merchant_note: str) -> ApiResponse:
        return self.post("refund", {"transaction": transaction, "merchant_note": merchant_note})

    def fetch_subscription(self, subscription_code: str) -> ApiResponse:
        return self.get(f"subscription/{subscription_code}")

    def disable_subscription(self, subscription_code: str, email_token: str) -> ApiResponse:
        return self.post("subscription/disable", {"code": subscription_code, "token": email_token})
