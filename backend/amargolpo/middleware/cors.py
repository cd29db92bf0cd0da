"""
AmarGolpo Backend — CORS Policy
=================================

What:  Applies one of two CORS modes selected by settings.cors_mode.

    allow-all   Any origin may call the API (CORSMiddleware with "*").
    allow-list  Only settings.cors_origins may call the API. A request whose
                Origin header is not on the list is refused with 403 by
                OriginGuardMiddleware before it reaches a route. Requests
                without an Origin header (curl, Postman, server-to-server)
                are let through.

Starlette's CORSMiddleware on its own only omits the CORS headers for a
foreign origin; the route still executes. The guard makes the allow-list an
actual gate, so writes from unknown sites never reach the store.
"""

import logging
from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from amargolpo.config import Settings
from amargolpo.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


class OriginGuardMiddleware(BaseHTTPMiddleware):

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str]):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        origin = request.headers.get("origin")
        if origin is None or origin in self.allowed_origins:
            return await call_next(request)

        rid = request_id_var.get("")
        logger.warning("[%s] CORS blocked for origin: %s", rid, origin)
        return JSONResponse(
            status_code=403,
            content={
                "error": "cors_rejected",
                "message": f"CORS blocked for origin: {origin}",
                "request_id": rid,
            },
        )


def configure_cors(app: FastAPI, settings: Settings) -> None:
    """
    Register the CORS middleware for the configured mode.

    Must be called before the request ID and logging middleware are added so
    that those wrap the guard (rejections are logged with a request ID).
    """
    if settings.cors_mode == "allow-all":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=ALLOWED_METHODS,
            allow_headers=["*"],
            expose_headers=["X-Request-ID"],
        )
        logger.info("CORS: allowing all origins")
        return

    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=ALLOWED_METHODS,
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(OriginGuardMiddleware, allowed_origins=origins)
    logger.info("CORS: allow-list %s", origins)
