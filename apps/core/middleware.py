# apps/core/middleware.py

"""
Request middleware for the MediaDeck API.

``RequestLoggingMiddleware`` writes one line per ``/api/`` request.
``LocalCORSMiddleware`` is for development only: it lets a studio served
from another localhost port call the API with its session cookie.
"""

import logging
import time
from typing import Callable
from urllib.parse import urlsplit

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

# Requests slower than this are logged at WARNING even when they succeed
SLOW_REQUEST_MS = 2000

LOCAL_HOSTNAMES = {'localhost', '127.0.0.1'}


def _client_ip(request: HttpRequest) -> str:
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


class RequestLoggingMiddleware:
    """Log method, path, status, duration, client IP and caller for API calls."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if not request.path.startswith('/api/'):
            return self.get_response(request)

        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000

        user = getattr(request, 'user', None)
        caller = f"user={user.pk}" if user is not None and user.is_authenticated else "anonymous"

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400 or elapsed_ms > SLOW_REQUEST_MS:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            f"{request.method} {request.path} -> {response.status_code} "
            f"in {elapsed_ms:.1f}ms ({_client_ip(request)}, {caller})",
        )
        return response


class LocalCORSMiddleware:
    """
    Allow credentialed cross-origin calls from localhost origins.

    Preflight ``OPTIONS`` requests are answered directly; other responses
    get the allow headers added. Non-local origins are left untouched.
    """

    allow_headers = 'Content-Type, X-CSRFToken'
    allow_methods = 'GET, POST, DELETE, OPTIONS'

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        origin = request.META.get('HTTP_ORIGIN')
        if not origin or urlsplit(origin).hostname not in LOCAL_HOSTNAMES:
            return self.get_response(request)

        if request.method == 'OPTIONS' and 'HTTP_ACCESS_CONTROL_REQUEST_METHOD' in request.META:
            logger.debug(f"CORS preflight from {origin} for {request.path}")
            response = HttpResponse(status=200)
        else:
            response = self.get_response(request)

        response['Access-Control-Allow-Origin'] = origin
        response['Access-Control-Allow-Credentials'] = 'true'
        response['Access-Control-Allow-Headers'] = self.allow_headers
        response['Access-Control-Allow-Methods'] = self.allow_methods
        response['Vary'] = 'Origin'
        return response
