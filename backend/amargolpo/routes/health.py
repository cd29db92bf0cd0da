"""
AmarGolpo Backend — Liveness and Health Check Routes
======================================================

What:  GET /        plain-text "server is running" banner
       GET /health  document store probe for monitors and load balancers

Health Check Behavior:
    /health reconnects lazily if the store handle is missing, then pings the
    admin database. Failures are answered with HTTP 500 and {ok: false, error}
    instead of being raised, so the endpoint itself never fails.
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from amargolpo import __version__
from amargolpo.database import DocumentStore, get_store
from amargolpo.exceptions import StoreConnectionError
from amargolpo.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/",
    response_class=PlainTextResponse,
    summary="Liveness banner",
)
async def root() -> str:
    return "AmarGolpo server is running ✅"


@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    responses={
        200: {"description": "Server and document store are up", "model": HealthResponse},
        500: {"description": "Document store unreachable", "model": HealthResponse},
    },
    summary="Service health check",
    description="Pings the document store and reports whether the API can serve requests.",
)
async def health_check(store: DocumentStore = Depends(get_store)):
    uptime = round(time.time() - _start_time, 2)

    try:
        await store.connect()
        await store.ping()
    except StoreConnectionError as e:
        reason = str(e.context.get("reason", e.message))
        logger.warning("Health check failed: %s", reason)
        body = HealthResponse(
            ok=False,
            message="DB not connected",
            version=__version__,
            uptime_seconds=uptime,
            error=reason,
        )
        return JSONResponse(status_code=500, content=body.model_dump())

    return HealthResponse(
        ok=True,
        message="Server & DB connected",
        version=__version__,
        uptime_seconds=uptime,
    )
