# Middleware package init
"""
AmarGolpo Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Origin Guard] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs and error bodies
    2. Logging: method, path, status and duration, including rejected origins
    3. Origin Guard: allow-list mode only, answers disallowed origins with 403
    4. CORS: Starlette's CORSMiddleware (preflight + response headers)
"""
