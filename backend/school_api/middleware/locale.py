"""
School API Backend — Locale Middleware
========================================

What:  Chooses the culture used for every message and entity name in a response.
How:   `?culture=` query parameter first, then `Accept-Language`, then the
       configured default; only supported cultures are accepted. The result
       is stored in `locale_var` for the rest of the request and returned in
       the `Content-Language` header.

Examples:
    GET /api/students/1?culture=ar-EG             → ar-EG
    Accept-Language: fr-CA,fr;q=0.9,en;q=0.5      → fr-FR
    Accept-Language: ja                           → en-US (default)
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from school_api.localization import locale_var, negotiate_locale


class LocaleMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        culture = negotiate_locale(
            query_culture=request.query_params.get("culture"),
            accept_language=request.headers.get("Accept-Language"),
        )
        token = locale_var.set(culture)
        request.state.culture = culture
        try:
            response = await call_next(request)
        finally:
            locale_var.reset(token)
        response.headers["Content-Language"] = culture
        return response
