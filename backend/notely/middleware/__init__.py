# Middleware package init
"""
Notely Backend — Middleware Package
====================================

What:  Cross-cutting concerns applied around the route handlers.

Contents:
    - request_id.py:  correlation id per request (ASGI middleware)
    - logging.py:     access log line per request (ASGI middleware)
    - auth.py:        API-key authentication (FastAPI dependency, applied
                      only to protected routes)

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route (+ auth dependency)
"""
