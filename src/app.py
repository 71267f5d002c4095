"""Freightline FastAPI application.

Web server that processes logistics commands synchronously via HTTP. The
logistics domain is initialized once in the application lifespan and every
request runs inside its domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from logistics.api import routers
from logistics.api.errors import register_error_handlers
from logistics.domain import logistics
from logistics.signals import reset_bus
from logistics.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Domain lifecycle
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (handlers fire in the request)
#   - "production" → event_processing = "async" (handlers fire via the Engine)
@asynccontextmanager
async def lifespan(_app: FastAPI):
    configure_logging()
    logistics.init()
    logger.info("Logistics domain initialized", domain=logistics.name)
    yield
    reset_bus()
    logger.info("Logistics domain shut down", domain=logistics.name)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Freightline API",
    description="Logistics operations — quotes, shipments, pickups and purchases",
    lifespan=lifespan,
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
    """Push the logistics domain context for each request."""
    with logistics.domain_context():
        response = await call_next(request)
    return response


register_error_handlers(app)

for router in routers:
    app.include_router(router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": logistics.name}})
