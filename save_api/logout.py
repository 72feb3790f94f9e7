"""GET|POST /api/logout: expire the auth_token cookie."""

from save_api.auth import COOKIE_NAME
from save_api.endpoint import lambda_entry
from save_api.web import json_response, method_not_allowed

METHODS = ("GET", "POST")

EXPIRED_COOKIE = (
    f"{COOKIE_NAME}=; HttpOnly; Path=/; Expires=Thu, 01 Jan 1970 00:00:01 GMT; SameSite=Strict"
)


def handle(request, runtime):
    if request.method not in METHODS:
        return method_not_allowed()

    return json_response(
        200,
        {"success": True, "message": "Logged out successfully"},
        headers={"Set-Cookie": EXPIRED_COOKIE},
    )


lambda_handler = lambda_entry(handle, METHODS)
