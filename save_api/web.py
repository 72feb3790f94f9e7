"""
Platform-neutral request/response objects.

Handlers only see Request and Response; the Lambda event format (API Gateway
REST, HTTP API and function URLs) is translated at the edges here.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from save_api.errors import BadRequest

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass
class Request:
    method: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    path: str = "/"

    def __post_init__(self):
        self.method = (self.method or "").upper()
        self.headers = {k.lower(): v for k, v in (self.headers or {}).items()}

    def header(self, name, default=None):
        return self.headers.get(name.lower(), default)

    def json(self):
        """Parse the body as a JSON object. An empty body parses as {}."""
        if self.body is None or self.body == "":
            return {}
        try:
            parsed = json.loads(self.body)
        except (json.JSONDecodeError, TypeError):
            raise BadRequest("Invalid JSON body")
        if not isinstance(parsed, dict):
            raise BadRequest("Request body must be a JSON object")
        return parsed

    @classmethod
    def from_event(cls, event):
        """Build a Request from an API Gateway (v1 or v2) or function URL event."""
        http = event.get("requestContext", {}).get("http", {})
        method = http.get("method") or event.get("httpMethod") or ""
        path = http.get("path") or event.get("rawPath") or event.get("path") or "/"

        headers = dict(event.get("headers") or {})
        # HTTP API payload v2 moves cookies out of the headers
        cookies = event.get("cookies")
        if cookies:
            headers["cookie"] = "; ".join(cookies)

        body = event.get("body")
        if body is not None and event.get("isBase64Encoded"):
            try:
                body = base64.b64decode(body).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError):
                body = None
        return cls(method=method, headers=headers, body=body, path=path)


@dataclass
class Response:
    status: int
    payload: Optional[Any] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def json(self):
        return self.payload

    def to_lambda(self):
        return {
            "statusCode": self.status,
            "headers": {**JSON_HEADERS, **self.headers},
            "body": "" if self.payload is None else json.dumps(self.payload),
        }


def json_response(status, payload, headers=None):
    return Response(status=status, payload=payload, headers=dict(headers or {}))


def error_response(status, error, **extra):
    return json_response(status, {"error": error, **extra})


def method_not_allowed():
    return error_response(405, "Method not allowed")


def cors_headers(origin, methods):
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Allow-Methods": ", ".join(list(methods) + ["OPTIONS"]),
        "Access-Control-Allow-Credentials": "true",
    }


def preflight_response(origin, methods):
    return Response(status=200, payload=None, headers=cors_headers(origin, methods))
