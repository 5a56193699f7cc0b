"""Password hashing and signed token helpers."""
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from marketplace.config import Settings
from marketplace.errors import Forbidden, Unauthorized
from marketplace.models import User

logger = logging.getLogger(__name__)

RESET_SCOPE = "reset"


@dataclass(frozen=True)
class Identity:
    """Decoded bearer token attached to an authenticated request."""

    user_id: str
    role: str | None = None


class PasswordHasher:
    def __init__(self, rounds: int = 10) -> None:
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        return self._context.verify(password, hashed)


def password_fingerprint(hashed_password: str) -> str:
    """Short digest of a stored hash; changes whenever the password does."""

    return hashlib.sha256(hashed_password.encode("utf-8")).hexdigest()[:16]


class TokenService:
    """Issue and verify HS256 tokens signed with the configured secret."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _encode(self, claims: dict[str, Any], expires_delta: timedelta) -> str:
        to_encode = claims.copy()
        to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
        return jwt.encode(to_encode, self.settings.jwt_secret_key, algorithm=self.settings.jwt_algorithm)

    def _decode(self, token: str) -> dict[str, Any]:
        return jwt.decode(
            token,
            self.settings.jwt_secret_key,
            algorithms=[self.settings.jwt_algorithm],
            options={"require": ["exp", "id"]},
        )

    def issue_access_token(self, user: User, expires_delta: timedelta | None = None) -> str:
        delta = expires_delta or timedelta(minutes=self.settings.access_token_expire_minutes)
        return self._encode({"id": user.id, "role": user.role}, delta)

    def decode_access_token(self, token: str) -> Identity:
        try:
            payload = self._decode(token)
        except jwt.InvalidTokenError as exc:
            logger.warning("Rejected access token: %s", exc)
            raise Forbidden() from exc
        if payload.get("scope") == RESET_SCOPE:
            raise Forbidden()
        return Identity(user_id=str(payload["id"]), role=payload.get("role"))

    def issue_reset_token(self, user: User, expires_delta: timedelta | None = None) -> str:
        delta = expires_delta or timedelta(minutes=self.settings.reset_token_expire_minutes)
        claims = {"id": user.id, "scope": RESET_SCOPE, "pwd": password_fingerprint(user.password)}
        return self._encode(claims, delta)

    def decode_reset_token(self, token: str) -> dict[str, Any]:
        try:
            payload = self._decode(token)
        except jwt.InvalidTokenError as exc:
            logger.warning("Rejected reset token: %s", exc)
            raise Unauthorized("Invalid or expired reset token") from exc
        if payload.get("scope") != RESET_SCOPE:
            raise Unauthorized("Invalid or expired reset token")
        return payload
