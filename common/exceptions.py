import logging

from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Attach status code, a machine-friendly error field and the ``success``/``message``
    pair the web client reads to every handled error response.
    """
    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "unknown view")
        return None
    if isinstance(response.data, dict):
        response.data.setdefault("status_code", response.status_code)
        response.data.setdefault("success", False)
        # attach error code if available
        if "detail" in response.data:
            response.data["error"] = str(response.data["detail"])
            response.data.setdefault("message", str(response.data["detail"]))
    return response
