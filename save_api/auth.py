from save_api.tokens import TokenCodec

COOKIE_NAME = "auth_token"
BEARER_PREFIX = "Bearer "


def _cookie_token(cookie_header):
    for part in cookie_header.split(";"):
        part = part.strip()
        if part.startswith(COOKIE_NAME + "="):
            return part[len(COOKIE_NAME) + 1:]
    return None


def extract_token(headers):
    """
    Find the session token in the request headers.

    The auth_token cookie wins over an Authorization: Bearer header. An empty
    cookie (what logout leaves behind) counts as no cookie.
    """
    cookie_token = _cookie_token(headers.get("cookie") or "")
    if cookie_token:
        return cookie_token

    auth_header = headers.get("authorization") or ""
    if auth_header.startswith(BEARER_PREFIX):
        return auth_header[len(BEARER_PREFIX):].strip() or None
    return None


def authenticate(request, codec: TokenCodec):
    """Return the caller's Identity, or None when there is no valid token."""
    token = extract_token(request.headers)
    if not token:
        return None
    return codec.verify(token)
