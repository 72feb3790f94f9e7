import time
from dataclasses import dataclass
from datetime import timedelta

import jwt

ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(days=7)


@dataclass(frozen=True)
class Identity:
    username: str


class TokenCodec:
    """Signs and verifies session tokens carrying a username."""

    def __init__(self, secret, lifetime=TOKEN_LIFETIME, clock=time.time):
        self.secret = secret
        self.lifetime = lifetime
        self.clock = clock

    def issue(self, username):
        issued_at = int(self.clock())
        payload = {
            "username": username,
            "iat": issued_at,
            "exp": issued_at + int(self.lifetime.total_seconds()),
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def verify(self, token):
        """Return the Identity inside a valid token, or None for anything else."""
        try:
            # expiry is checked below against our own clock
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError:
            return None

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or self.clock() >= exp:
            return None

        username = payload.get("username")
        if not isinstance(username, str) or not username:
            return None
        return Identity(username=username)
