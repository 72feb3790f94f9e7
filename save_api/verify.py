"""GET|POST /api/verify: report whether the caller holds a valid session token."""

from save_api.auth import authenticate
from save_api.endpoint import lambda_entry
from save_api.web import json_response, method_not_allowed

METHODS = ("GET", "POST")


def handle(request, runtime):
    if request.method not in METHODS:
        return method_not_allowed()

    identity = authenticate(request, runtime.tokens)
    if identity is None:
        return json_response(401, {"authenticated": False, "error": "Not authenticated"})

    return json_response(200, {"authenticated": True, "username": identity.username})


lambda_handler = lambda_entry(handle, METHODS)
