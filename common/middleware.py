"""
Middleware: request logging.
"""
import time
import logging
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(MiddlewareMixin):
    """Logs every request with its status, duration and the caller."""

    def process_request(self, request):
        request._start_time = time.monotonic()
        logger.debug("REQ START %s %s", request.method, request.get_full_path())

    def process_response(self, request, response):
        duration = (time.monotonic() - getattr(request, "_start_time", time.monotonic())) * 1000.0
        user = getattr(request, "user", None)
        user_id = user.pk if user is not None and user.is_authenticated else "-"
        level = logging.WARNING if response.status_code >= 500 else logging.DEBUG
        logger.log(
            level,
            "REQ END %s %s %s %.2fms user=%s",
            request.method, request.get_full_path(), response.status_code, duration, user_id,
        )
        return response
