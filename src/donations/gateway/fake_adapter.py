"""Configurable fake Paystack gateway for development and testing.

Simulates the Paystack API without any external calls. Transactions and
subscriptions are seeded by the caller; every call is recorded in ``calls``
so tests can assert that no outbound request was made.
"""

from typing import Any
from uuid import uuid4

from donations.gateway.port import ApiResponse, PaystackApi


class FakeGateway(PaystackApi):
    """In-memory stand-in for the Paystack API."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_message: str = "Transaction has been fully reversed"
        self.unavailable: bool = False
        self.transactions: dict[str, dict[str, Any]] = {}
        self.subscriptions: dict[str, dict[str, Any]] = {}
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_message: str = "Transaction has been fully reversed",
        unavailable: bool = False,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_message = failure_message
        self.unavailable = unavailable

    def add_transaction(
        self,
        reference: str,
        status: str = "success",
        authorization_code: str = "AUTH_fake",
        gateway_response: str = "Approved",
    ) -> dict[str, Any]:
        transaction = {
            "id": int(uuid4().int % 10**9),
            "reference": reference,
            "status": status,
            "gateway_response": gateway_response,
            "authorization": {"authorization_code": authorization_code},
        }
        self.transactions[reference] = transaction
        return transaction

    def add_subscription(self, subscription_code: str, email_token: str) -> None:
        self.subscriptions[subscription_code] = {
            "subscription_code": subscription_code,
            "email_token": email_token,
        }

    def get(self, path: str) -> ApiResponse:
        self.calls.append({"method": "GET", "path": path})
        if self.unavailable:
            return ApiResponse(ok=False, message="Connection timed out")

        if path.startswith("transaction/verify/"):
            reference = path.removeprefix("transaction/verify/")
            transaction = self.transactions.get(reference)
            if transaction is None:
                return ApiResponse(
                    ok=False,
                    message="Transaction reference not found",
                    data={"status": "failed", "reference": reference},
                    http_status=400,
                )
            return ApiResponse(
                ok=True,
                status=True,
                message="Verification successful",
                data=dict(transaction),
                http_status=200,
            )

        if path.startswith("subscription/"):
            code = path.removeprefix("subscription/")
            subscription = self.subscriptions.get(code)
            if subscription is None:
                return ApiResponse(ok=False, message="Subscription not found", http_status=404)
            return ApiResponse(
                ok=True,
                status=True,
                message="Subscription retrieved",
                data=dict(subscription),
                http_status=200,
            )

        return ApiResponse(ok=False, message=f"Unsupported path: {path}", http_status=404)

    def post(self, path: str, body: dict[str, Any]) -> ApiResponse:
        self.calls.append({"method": "POST", "path": path, "body": body})
        if self.unavailable:
            return ApiResponse(ok=False, message="Connection timed out")

        if not self.should_succeed:
            return ApiResponse(ok=False, message=self.failure_message, http_status=400)

        if path == "refund":
            return ApiResponse(
                ok=True,
                status=True,
                message="Refund has been queued for processing",
                data={"transaction": {"reference": body.get("transaction")}, "status": "pending"},
                http_status=200,
            )
        if path == "subscription/disable":
            return ApiResponse(ok=True, status=True, message="Subscription disabled successfully", http_status=200)

        return ApiResponse(ok=False, message=f"Unsupported path: {path}", http_status=404)
