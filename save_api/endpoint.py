"""Glue between Lambda events and the per-route handle(request, runtime) functions."""

import logging

from save_api.runtime import get_runtime
from save_api.web import Request, cors_headers, error_response, preflight_response

logger = logging.getLogger(__name__)


def respond(handle, methods, request, runtime):
    """Run one handler, adding CORS headers and turning stray exceptions into a 500."""
    origin = runtime.settings.cors_allow_origin
    if request.method == "OPTIONS" and origin:
        return preflight_response(origin, methods)

    try:
        response = handle(request, runtime)
    except Exception:
        logger.exception(f"Unhandled error in {request.method} {request.path}")
        response = error_response(500, "Internal server error")

    if origin:
        response.headers.update(cors_headers(origin, methods))
    return response


def lambda_entry(handle, methods):
    """Wrap handle(request, runtime) as an AWS Lambda handler."""

    def lambda_handler(event, context):
        request = Request.from_event(event)
        return respond(handle, methods, request, get_runtime()).to_lambda()

    return lambda_handler
