import logging
import time

from django.conf import settings


def performance_logger_name(path):
    """Logger for the longest configured API prefix matching `path`, or None."""
    prefixes = getattr(settings, "PERFORMANCE_API_PREFIXES", {})
    matches = [prefix for prefix in prefixes if path.startswith(prefix)]
    if not matches:
        return None
    return f"{prefixes[max(matches, key=len)]}_performance"


class PerformanceMonitoringMiddleware:
    """
    Times request board API calls and logs each one under
    "{short_name}_performance". Calls slower than SLOW_REQUEST_THRESHOLD_SEC
    are logged as warnings.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.threshold = getattr(settings, "SLOW_REQUEST_THRESHOLD_SEC", 2)

    def __call__(self, request):
        logger_name = performance_logger_name(request.path)
        if logger_name is None:
            return self.get_response(request)

        start = time.monotonic()
        response = self.get_response(request)
        duration = time.monotonic() - start

        user = getattr(request, "user", None)
        player = user.pk if user is not None and user.is_authenticated else "anonymous"
        line = (
            f"{request.method} {request.path} took {duration:.3f}s "
            f"- Status {response.status_code} - player {player}"
        )
        logger = logging.getLogger(logger_name)
        if duration > self.threshold:
            logger.warning(f"Slow API request: {line}")
        else:
            logger.info(line)

        response["X-Response-Time"] = f"{duration:.3f}s"
        return response
