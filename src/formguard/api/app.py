"""Formguard API: FastAPI application.

Single contact-form endpoint with spam filtering and email delivery.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from formguard.api.deps import close_policy, init_policy, sweep_periodically
from formguard.api.routers import contact
from formguard.config import load_settings
from formguard.exceptions import ConfigurationError, DeliveryError, RejectionError

from formguard import __version__ as _VERSION

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    policy = init_policy()
    sweeper = asyncio.create_task(
        sweep_periodically(policy.store, policy.settings.sweep_interval_seconds)
    )
    yield
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper
    close_policy()


app = FastAPI(
    title="Formguard API",
    description="Contact form submissions with spam filtering and email delivery.",
    version=_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=load_settings().cors_allow_origins,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    allow_credentials=False,
)


# --- Exception handlers ---

@app.exception_handler(RejectionError)
async def _rejection(request: Request, exc: RejectionError):
    return JSONResponse(
        status_code=exc.verdict.status_code,
        content={"error": exc.verdict.user_message},
    )


@app.exception_handler(ConfigurationError)
async def _configuration_error(request: Request, exc: ConfigurationError):
    logger.error("Configuration error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Email service is not configured. Please contact the administrator."},
    )


@app.exception_handler(DeliveryError)
async def _delivery_error(request: Request, exc: DeliveryError):
    return JSONResponse(status_code=500, content={"error": f"Failed to send email: {exc}"})


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": f"Internal server error: {str(exc) or 'Unknown error'}"},
    )


# --- Routers ---

app.include_router(contact.router)


# --- Health ---

@app.get("/health")
async def health():
    return {"status": "ok", "version": _VERSION}
