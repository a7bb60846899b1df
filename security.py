from __future__ import annotations

import base64
import hashlib
import logging
import time
from typing import Any

import bcrypt
import jwt

logger = logging.getLogger(__name__)


def _prehash(password: str) -> bytes:
    # bcrypt reads at most 72 bytes; the base64 SHA-256 digest is always 44.
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_prehash(password), hashed.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash (hand-edited database).
        return False


def bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


def _mask_token(token: str, *, head: int = 16, tail: int = 8) -> str:
    if not token:
        return ""
    if len(token) <= head + tail + 3:
        return token
    return f"{token[:head]}...{token[-tail:]}"


class TokenService:
    """
    Issues and verifies HS256 bearer tokens for the protected resource routes.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        expires_in: int | None = None,
        debug_log_tokens: bool = False,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._expires_in = expires_in
        self._debug_log_tokens = debug_log_tokens

    def issue(self, subject: str) -> str:
        now = int(time.time())
        payload: dict[str, Any] = {
            "sub": subject,
            "iat": now,
            "admin": True,
        }
        if self._expires_in is not None:
            payload["exp"] = now + int(self._expires_in)
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        if self._debug_log_tokens:
            # WARNING: logs (masked) bearer tokens. Local debugging only.
            logger.debug("ISSUED JWT (masked): sub=%s %s", subject, _mask_token(token))
        return token

    def verify(self, token: str) -> bool:
        try:
            jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.InvalidTokenError as e:
            logger.warning("JWT verification failed: %s", e)
            return False
        return True
