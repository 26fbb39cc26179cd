# Middleware package init
"""
GoEveryWork Marketplace — Middleware Package
==============================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line and every application log
    record emitted while handling the request share the same correlation ID.
"""
