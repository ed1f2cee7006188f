"""FastAPI routes for the Donations domain: webhooks, donations and recurring plans.

Paystack-specific behaviour is reached only through the hook registry on
``app.state.hooks``; the routes themselves know nothing about the gateway.
"""

import os

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from donations import hooks
from donations.api.schemas import (
    CancelResponse,
    ConfigureGatewayRequest,
    DonationCreatedResponse,
    DonationResponse,
    GatewayConfigResponse,
    PeriodsResponse,
    ReceiptResponse,
    RecordDonationRequest,
    RecurringDonationResponse,
    RefundResponse,
)
from donations.donation.creation import RecordDonation
from donations.donation.donation import Donation
from donations.gateway import get_gateway
from donations.gateway.fake_adapter import FakeGateway
from donations.reconciliation.return_channel import receipt_notice
from donations.recurring.recurring_donation import RecurringDonation
from donations.webhook.interpreter import INVALID_REQUEST
from donations.webhook.receiver import WebhookRequest

DEFAULT_PERIODS = {"week": "Weekly", "month": "Monthly", "quarter": "Quarterly", "year": "Yearly"}


def _registry(request: Request) -> hooks.HookRegistry:
    return request.app.state.hooks


def _log_messages(entries) -> list[str]:
    return [entry.message for entry in sorted(entries, key=lambda e: e.logged_at)]


def _load(aggregate_cls, identifier: str):
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"{aggregate_cls.__name__} {identifier} not found")


# ---------------------------------------------------------------------------
# Webhook Router
# ---------------------------------------------------------------------------
webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@webhook_router.post("/paystack")
async def paystack_webhook(request: Request) -> JSONResponse:
    """Receive a Paystack event notification.

    The raw body is passed through untouched; the signature is computed over
    the exact bytes Paystack sent.
    """
    delivery = WebhookRequest(
        body=await request.body(),
        signature=request.headers.get("x-paystack-signature"),
        method=request.method,
    )
    responses = _registry(request).fire(hooks.PROCESS_WEBHOOK, delivery)
    if not responses:
        return JSONResponse(status_code=500, content={"message": INVALID_REQUEST})

    response = responses[0]
    return JSONResponse(status_code=response.status_code, content={"message": response.body})


# ---------------------------------------------------------------------------
# Donation Router
# ---------------------------------------------------------------------------
donation_router = APIRouter(prefix="/donations", tags=["donations"])


@donation_router.post("", status_code=201, response_model=DonationCreatedResponse)
async def record_donation(body: RecordDonationRequest) -> DonationCreatedResponse:
    command = RecordDonation(
        amount=body.amount,
        currency=body.currency,
        gateway_transaction_reference=body.gateway_transaction_reference,
        test_mode=body.test_mode,
        donor_email=body.donor_email,
        period=body.period,
    )
    try:
        result = current_domain.process(command, asynchronous=False)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.messages)
    return DonationCreatedResponse(**result)


@donation_router.get("/{donation_id}", response_model=DonationResponse)
async def get_donation(donation_id: str) -> DonationResponse:
    donation = _load(Donation, donation_id)
    return DonationResponse(
        donation_id=str(donation.id),
        amount=donation.amount,
        currency=donation.currency,
        status=donation.status,
        gateway_transaction_reference=donation.gateway_transaction_reference,
        gateway_transaction_id=donation.gateway_transaction_id,
        gateway_transaction_url=donation.gateway_transaction_url,
        failure_reason=donation.failure_reason,
        processed=donation.processed,
        refunded=donation.refunded,
        test_mode=donation.test_mode,
        recurring_donation_id=donation.recurring_donation_id,
        is_renewal=donation.is_renewal,
        log=_log_messages(donation.log_entries),
    )


@donation_router.get("/{donation_id}/receipt", response_model=ReceiptResponse)
async def view_receipt(donation_id: str, request: Request, reference: str | None = None) -> ReceiptResponse:
    """Donor lands here after checkout; reconciles before rendering."""
    _load(Donation, donation_id)
    _registry(request).fire(hooks.RECEIPT_VIEWED, donation_id, reference)

    donation = _load(Donation, donation_id)
    return ReceiptResponse(
        donation_id=str(donation.id),
        status=donation.status,
        processed=donation.processed,
        notice=receipt_notice(donation),
    )


@donation_router.post("/{donation_id}/refund", response_model=RefundResponse)
async def refund_donation(donation_id: str, request: Request) -> RefundResponse:
    _load(Donation, donation_id)
    results = _registry(request).fire(hooks.PROCESS_REFUND, donation_id)
    return RefundResponse(refunded=any(results))


# ---------------------------------------------------------------------------
# Recurring Donation Router
# ---------------------------------------------------------------------------
recurring_router = APIRouter(prefix="/recurring-donations", tags=["recurring-donations"])


@recurring_router.get("/periods", response_model=PeriodsResponse)
async def list_periods(request: Request) -> PeriodsResponse:
    periods = _registry(request).filter(hooks.RECURRING_PERIODS, dict(DEFAULT_PERIODS))
    return PeriodsResponse(periods=periods)


@recurring_router.get("/{recurring_donation_id}", response_model=RecurringDonationResponse)
async def get_recurring_donation(recurring_donation_id: str, request: Request) -> RecurringDonationResponse:
    recurring = _load(RecurringDonation, recurring_donation_id)
    return RecurringDonationResponse(
        recurring_donation_id=str(recurring.id),
        amount=recurring.amount,
        currency=recurring.currency,
        period=recurring.period,
        status=recurring.status,
        gateway_subscription_id=recurring.gateway_subscription_id,
        cancelled=recurring.cancelled,
        can_cancel=bool(_registry(request).filter(hooks.CAN_CANCEL, not recurring.cancelled, recurring)),
        test_mode=recurring.test_mode,
        log=_log_messages(recurring.log_entries),
    )


@recurring_router.post("/{recurring_donation_id}/cancel", response_model=CancelResponse)
async def cancel_recurring_donation(recurring_donation_id: str, request: Request) -> CancelResponse:
    _load(RecurringDonation, recurring_donation_id)
    results = _registry(request).fire(hooks.PROCESS_CANCELLATION, recurring_donation_id)
    return CancelResponse(cancelled=any(results))


# ---------------------------------------------------------------------------
# Gateway Router (non-production)
# ---------------------------------------------------------------------------
gateway_router = APIRouter(prefix="/gateway", tags=["gateway"])


@gateway_router.post("/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_message=body.failure_message,
        unavailable=body.unavailable,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_message=gateway.failure_message,
        unavailable=gateway.unavailable,
    )
