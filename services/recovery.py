"""Password reset by emailed, time-boxed token."""
from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import urlencode

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.errors import NotFound, ServerError, Unauthorized
from marketplace.models import User
from marketplace.security import PasswordHasher, TokenService, password_fingerprint

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    async def send(self, to: str, subject: str, body: str) -> None: ...


class PasswordRecoveryService:
    def __init__(self, settings: Settings, mailer: MailTransport | None = None) -> None:
        self.settings = settings
        self.mailer = mailer
        self.hasher = PasswordHasher(settings.password_hash_rounds)
        self.tokens = TokenService(settings)

    def reset_link(self, token: str) -> str:
        base = self.settings.frontend_base_url.rstrip("/")
        return f"{base}/reset-password?{urlencode({'token': token})}"

    async def forgot_password(self, session: AsyncSession, email: str) -> None:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFound("User not found")
        if self.mailer is None:
            raise ServerError("Mail transport is not configured")

        link = self.reset_link(self.tokens.issue_reset_token(user))
        await self.mailer.send(
            to=user.email,
            subject="Password Reset",
            body=f"Reset your password using the following link: {link}",
        )
        logger.info("Password reset link sent for user %s", user.id)

    async def reset_password(self, session: AsyncSession, token: str, new_password: str) -> None:
        claims = self.tokens.decode_reset_token(token)

        user = await session.get(User, str(claims["id"]))
        if user is None:
            raise NotFound("User not found")
        if claims.get("pwd") != password_fingerprint(user.password):
            logger.warning("Reset token for user %s was already used", user.id)
            raise Unauthorized("Invalid or expired reset token")

        user.password = self.hasher.hash(new_password)
        await session.commit()
        logger.info("Password updated for user %s", user.id)
