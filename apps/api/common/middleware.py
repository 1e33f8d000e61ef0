# apps/api/common/middleware.py
# Unhandled view exceptions become a 500 JSON body.
# Responses built in process_exception skip CorsMiddleware, so CORS headers are added here.
from __future__ import annotations

import logging

from django.conf import settings
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def _add_cors_headers_to_response(request, response):
    """
    Attach CORS headers to a response produced by process_exception,
    so the browser can still read the 500 body.
    """
    origin = (request.META.get("HTTP_ORIGIN") or "").strip()
    allowed = getattr(settings, "CORS_ALLOWED_ORIGINS", []) or []
    if getattr(settings, "CORS_ALLOW_ALL_ORIGINS", False) and origin:
        response["Access-Control-Allow-Origin"] = origin
    elif origin and origin in allowed:
        response["Access-Control-Allow-Origin"] = origin
    elif allowed:
        response["Access-Control-Allow-Origin"] = allowed[0]
    if getattr(settings, "CORS_ALLOW_CREDENTIALS", False):
        response["Access-Control-Allow-Credentials"] = "true"
    return response


class UnhandledExceptionMiddleware:
    """Turn an unhandled exception into a 500 JSON response with CORS headers."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        logger.exception("Unhandled exception: %s", exception)
        body = {"detail": "Internal server error."}
        if settings.DEBUG:
            body["error"] = str(exception)
        resp = JsonResponse(body, status=500)
        return _add_cors_headers_to_response(request, resp)
