import pytest
from donations.api import donation_router, gateway_router, recurring_router, webhook_router
from donations.domain import donations
from donations.hooks import HookRegistry
from donations.integration import PaystackIntegration
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient


@pytest.fixture()
def client():
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with donations.domain_context():
            return await call_next(request)

    app.state.hooks = HookRegistry()
    PaystackIntegration(app.state.hooks).setup()
    app.include_router(webhook_router)
    app.include_router(donation_router)
    app.include_router(recurring_router)
    app.include_router(gateway_router)
    return TestClient(app)
