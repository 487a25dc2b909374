"""
JWT-style token creation and verification.

Tokens are URL-safe base64-encoded JSON payloads signed with HMAC-SHA256::

    base64url({"id": ..., "iat": ..., "exp": ...}) + "." + hex(hmac)

The secret comes from ``config.jwt_secret`` (env var: ``JWT_SECRET``) and is
passed in by the application factory.  Verification is stateless.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import logging
import time
from base64 import b64decode, urlsafe_b64encode
from typing import Callable

from utils.errors import InternalServerError, InvalidTokenError

logger = logging.getLogger(__name__)


class TokenIssuer:
    def __init__(
        self,
        secret: str,
        expires_in_seconds: int = 86400,
        *,
        clock: Callable[[], float] = time.time,
    ):
        self._secret = secret.encode() if secret else b""
        self.expires_in_seconds = expires_in_seconds
        self._clock = clock

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def ensure_configured(self) -> bytes:
        if not self._secret:
            logger.error("JWT_SECRET is not configured; cannot sign or verify tokens")
            raise InternalServerError(
                "An internal server error occurred",
                details={"reason": "signing key misconfigured"},
            )
        return self._secret

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self.ensure_configured(), raw, hashlib.sha256).hexdigest()

    def issue(self, user_id: str) -> str:
        """Create a signed token containing ``user_id`` and expiry."""
        now = int(self._clock())
        payload = {
            "id": str(user_id),
            "iat": now,
            "exp": now + self.expires_in_seconds,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        sig = self._sign(raw)
        return urlsafe_b64encode(raw).decode().rstrip("=") + "." + sig

    def verify(self, token: str) -> str:
        """
        Verify token and return the user id.

        Raises ``InvalidTokenError`` for a malformed, tampered or expired
        token; the three cases are indistinguishable to the caller.
        """
        secret = self.ensure_configured()
        parts = token.split(".")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidTokenError("malformed")

        encoded, sig = parts
        try:
            raw = b64decode(encoded + "=" * (-len(encoded) % 4), altchars=b"-_", validate=True)
        except (binascii.Error, ValueError):
            raise InvalidTokenError("malformed")
        # Only the canonical encoding of the payload is accepted.
        if urlsafe_b64encode(raw).decode().rstrip("=") != encoded:
            raise InvalidTokenError("malformed")

        expected_sig = hmac.new(secret, raw, hashlib.sha256).hexdigest()
        if not hmac.compare_digest(sig.encode(), expected_sig.encode()):
            raise InvalidTokenError("bad signature")

        try:
            payload = json.loads(raw)
        except ValueError:
            raise InvalidTokenError("malformed")
        if not isinstance(payload, dict) or not payload.get("id"):
            raise InvalidTokenError("malformed")

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp <= self._clock():
            raise InvalidTokenError("expired")

        return str(payload["id"])
