"""Pydantic request/response schemas for the Donations API.

These are external contracts, kept separate from the internal Protean
commands and aggregates.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class RecordDonationRequest(BaseModel):
    amount: float = Field(gt=0)
    currency: str = Field(default="NGN", min_length=3, max_length=3)
    gateway_transaction_reference: str = Field(min_length=1, max_length=255)
    test_mode: bool = False
    donor_email: str | None = None
    period: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "amount": 5000.0,
                    "currency": "NGN",
                    "gateway_transaction_reference": "ref_123",
                    "test_mode": True,
                    "donor_email": "donor@example.com",
                    "period": "month",
                }
            ]
        }
    }


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_message: str = "Transaction has been fully reversed"
    unavailable: bool = False


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class MessageResponse(BaseModel):
    message: str


class DonationCreatedResponse(BaseModel):
    donation_id: str
    recurring_donation_id: str | None = None


class DonationResponse(BaseModel):
    donation_id: str
    amount: float
    currency: str
    status: str
    gateway_transaction_reference: str
    gateway_transaction_id: str | None = None
    gateway_transaction_url: str | None = None
    failure_reason: str | None = None
    processed: bool
    refunded: bool
    test_mode: bool
    recurring_donation_id: str | None = None
    is_renewal: bool
    log: list[str] = []


class ReceiptResponse(BaseModel):
    donation_id: str
    status: str
    processed: bool
    notice: str | None = None


class RefundResponse(BaseModel):
    refunded: bool


class RecurringDonationResponse(BaseModel):
    recurring_donation_id: str
    amount: float
    currency: str
    period: str
    status: str
    gateway_subscription_id: str | None = None
    cancelled: bool
    can_cancel: bool
    test_mode: bool
    log: list[str] = []


class CancelResponse(BaseModel):
    cancelled: bool


class PeriodsResponse(BaseModel):
    periods: dict[str, str]


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_message: str
    unavailable: bool
