"""
POST /api/login

Body: {"username": "...", "password": "..."}

Checks the pair against LOGIN_USERNAME / LOGIN_PASSWORD and, on success,
returns a 7-day token both in the body and as an HttpOnly auth_token cookie.
"""

import hmac
import logging

from save_api.auth import COOKIE_NAME
from save_api.endpoint import lambda_entry
from save_api.errors import BadRequest
from save_api.web import error_response, json_response, method_not_allowed

logger = logging.getLogger(__name__)

METHODS = ("POST",)


def _matches(given, expected):
    if not isinstance(given, str):
        return False
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def session_cookie(token, max_age, secure):
    cookie = f"{COOKIE_NAME}={token}; HttpOnly; Path=/; Max-Age={max_age}; SameSite=Strict"
    if secure:
        cookie += "; Secure"
    return cookie


def handle(request, runtime):
    if request.method not in METHODS:
        return method_not_allowed()

    settings = runtime.settings
    if not settings.credentials_configured:
        logger.error("Login credentials not configured (LOGIN_USERNAME / LOGIN_PASSWORD)")
        return error_response(500, "Server configuration error")

    try:
        body = request.json()
    except BadRequest as e:
        return error_response(400, e.message)

    username = body.get("username")
    password = body.get("password")

    # evaluate both so a wrong username costs the same as a wrong password
    username_ok = _matches(username, settings.login_username)
    password_ok = _matches(password, settings.login_password)
    if not (username_ok and password_ok):
        logger.info("Rejected login attempt")
        return error_response(401, "Invalid username or password")

    token = runtime.tokens.issue(username)
    max_age = int(runtime.tokens.lifetime.total_seconds())
    logger.info(f"Issued session token for {username}")

    return json_response(
        200,
        {"success": True, "message": "Login successful", "token": token},
        headers={"Set-Cookie": session_cookie(token, max_age, settings.production)},
    )


lambda_handler = lambda_entry(handle, METHODS)
