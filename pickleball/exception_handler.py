import logging

from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _first_message(detail):
    """Pick a single human-readable message out of a DRF error payload."""
    if isinstance(detail, dict):
        if "detail" in detail:
            return _first_message(detail["detail"])
        for value in detail.values():
            return _first_message(value)
        return "Invalid request"
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid request"
    return str(detail)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    # Unhandled errors fall through to Django's 500 handling
    if response is None:
        return None

    data = response.data
    body = {
        "status": "failed",
        "message": _first_message(data),
    }
    if isinstance(data, dict):
        code = data.get("error_code") or getattr(exc, "default_code", None)
        if code:
            body["error_code"] = code
        errors = {k: v for k, v in data.items() if k not in ("detail", "error_code")}
        if errors:
            body["errors"] = errors
    elif isinstance(data, list):
        body["errors"] = data

    if response.status_code >= 500:
        logger.error("API error on %s: %s", context.get("view"), body["message"])

    response.data = body
    return response
