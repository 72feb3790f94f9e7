"""
Single-function deployment: one Lambda (function URL or HTTP API catch-all
route) serving every endpoint, routed on the request path.
"""

from save_api import login, logout, save, verify
from save_api.endpoint import respond
from save_api.runtime import get_runtime
from save_api.web import Request, error_response

ROUTES = {
    "/api/login": login,
    "/api/verify": verify,
    "/api/logout": logout,
    "/api/save": save,
}


def route(request, runtime):
    module = ROUTES.get(request.path.rstrip("/") or "/")
    if module is None:
        return error_response(404, "Not found")
    return respond(module.handle, module.METHODS, request, runtime)


def lambda_handler(event, context):
    return route(Request.from_event(event), get_runtime()).to_lambda()
