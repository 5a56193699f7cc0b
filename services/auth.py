"""Credential checks and token issuance."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.errors import InvalidCredentials, NotFound
from marketplace.models import User
from marketplace.security import Identity, PasswordHasher, TokenService

logger = logging.getLogger(__name__)


class AuthService:
    """Validate credentials against stored hashes and issue access tokens."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.hasher = PasswordHasher(settings.password_hash_rounds)
        self.tokens = TokenService(settings)

    async def login(self, session: AsyncSession, *, email: str, password: str) -> tuple[User, str]:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            logger.warning("Login attempt for unknown email")
            raise NotFound("User not found")

        if not self.hasher.verify(password, user.password):
            logger.warning("Invalid password for user %s", user.id)
            raise InvalidCredentials()

        logger.info("User %s logged in", user.id)
        return user, self.tokens.issue_access_token(user)

    def authenticate(self, token: str) -> Identity:
        return self.tokens.decode_access_token(token)
