"""Donations API package."""

from donations.api.routes import donation_router, gateway_router, recurring_router, webhook_router

__all__ = ["donation_router", "gateway_router", "recurring_router", "webhook_router"]
