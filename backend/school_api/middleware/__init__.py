# Middleware package init
"""
School API Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Locale] → [Logging] → [GZip] → [CORS] → Route

    1. Request ID first: every later log line can carry the correlation ID
    2. Locale: picks the culture before any message is resolved
    3. Logging: records method, path, status and duration

    Responses pass back through the chain in reverse, so the X-Request-ID
    and Content-Language headers are added on the way out.
"""
