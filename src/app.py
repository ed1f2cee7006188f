"""GiveStream FastAPI application.

Web server for Paystack donation reconciliation. Requests under the
donations routes are wrapped in the donations domain context; Paystack
behaviour is attached through the hook registry at startup.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → in-memory providers, sync processing
#   - "production" → postgresql, async event processing
from donations.domain import donations  # noqa: E402
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

donations.init()

_DOMAIN_PREFIXES = ("/webhooks", "/donations", "/recurring-donations", "/gateway")


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    if path.startswith(_DOMAIN_PREFIXES):
        return donations
    return None


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="GiveStream API",
    description="Donations with Paystack payment reconciliation",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the donations domain context for domain routes."""
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match: pass through (health check, docs)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------
from donations.hooks import HookRegistry  # noqa: E402
from donations.integration import PaystackIntegration  # noqa: E402

app.state.hooks = HookRegistry()
app.state.paystack = PaystackIntegration(app.state.hooks)
app.state.paystack.setup()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from donations.api import donation_router, gateway_router, recurring_router, webhook_router  # noqa: E402

app.include_router(webhook_router)
app.include_router(donation_router)
app.include_router(recurring_router)
app.include_router(gateway_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"donations": {"name": donations.name}},
            "paystack": {"ready": app.state.paystack.is_setup},
        }
    )
