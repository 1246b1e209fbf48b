import logging
import time

from django.utils.deprecation import MiddlewareMixin
from django.http import JsonResponse

logger = logging.getLogger(__name__)


class RequestLogMiddleware(MiddlewareMixin):
    """
    Logs API request timings and acts as the last line of defence for
    non-DRF views that raise.
    """

    def process_request(self, request):
        request._started_at = time.monotonic()

    def process_response(self, request, response):
        started = getattr(request, "_started_at", None)
        if started is not None and request.path.startswith('/api/'):
            elapsed_ms = (time.monotonic() - started) * 1000
            user = getattr(request, "user", None)
            logger.info(
                f"{request.method} {request.path} {response.status_code} {elapsed_ms:.1f}ms",
                extra={"user_id": user.pk if user is not None and user.is_authenticated else None},
            )
        return response

    def process_exception(self, request, exception):
        logger.exception(f"Unhandled Middleware Exception: {exception}")
        if request.path.startswith('/api/'):
            return JsonResponse(
                {"error": "Internal System Error"},
                status=500
            )
        return None
