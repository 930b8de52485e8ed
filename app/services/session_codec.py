"""Signed, self-contained session tokens.

A token is ``<payload>.<sig>`` where ``payload`` is the base64url (unpadded)
JSON of a :class:`SessionUser` and ``sig`` is the hex HMAC-SHA256 of the
payload under the server secret. Nothing is stored server-side; expiry is the
only way a token stops being valid.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from datetime import timedelta

from pydantic import BaseModel, ValidationError

from app.utils import now

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(days=30)
INSECURE_DEV_SECRET = "dev-insecure-session-secret-change-me"


class SessionError(Exception):
    """Base class for every reason a token is not a session."""


class EmptyIdentity(SessionError):
    pass


class MalformedToken(SessionError):
    pass


class BadSignature(SessionError):
    pass


class TokenExpired(SessionError):
    pass


class SessionUser(BaseModel):
    discord_id: str
    username: str = ""
    avatar_url: str = ""
    # Unix seconds; 0 means "not set"
    exp: int = 0


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


class SessionCodec:
    def __init__(self, secret: str) -> None:
        secret = secret.strip()
        self.insecure = not secret
        self._key = (secret or INSECURE_DEV_SECRET).encode("utf-8")

    def _sign(self, payload: str) -> bytes:
        return hmac.new(self._key, payload.encode("ascii"), hashlib.sha256).digest()

    def encode(self, user: SessionUser) -> str:
        if not user.discord_id:
            raise EmptyIdentity("empty discord id")
        if not user.exp:
            user = user.model_copy(
                update={"exp": int((now() + SESSION_TTL).timestamp())}
            )
        payload = _b64encode(user.model_dump_json().encode("utf-8"))
        return f"{payload}.{self._sign(payload).hex()}"

    def decode(self, token: str) -> SessionUser:
        parts = token.split(".")
        if len(parts) != 2:
            raise MalformedToken("expected exactly two segments")
        payload, sig_hex = parts

        try:
            sig = binascii.unhexlify(sig_hex)
            expected = self._sign(payload)
        except (binascii.Error, ValueError) as exc:
            raise MalformedToken("bad signature encoding") from exc
        if not hmac.compare_digest(sig, expected):
            raise BadSignature("signature mismatch")

        try:
            user = SessionUser.model_validate_json(_b64decode(payload))
        except (binascii.Error, ValueError, ValidationError) as exc:
            raise MalformedToken("bad payload") from exc

        if user.exp and now().timestamp() > user.exp:
            raise TokenExpired("session expired")
        if not user.discord_id:
            raise EmptyIdentity("empty discord id")
        return user

    def load(self, token: str | None) -> SessionUser | None:
        """Decode a cookie value, treating every failure as "no session"."""
        if not token:
            return None
        try:
            return self.decode(token)
        except SessionError as exc:
            logger.debug("Rejected session token: %s", exc)
            return None
