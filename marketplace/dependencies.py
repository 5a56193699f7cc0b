"""FastAPI dependency helpers."""
from collections.abc import AsyncIterator

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.errors import Unauthorized
from marketplace.security import Identity
from services import AuthService
from services.recovery import MailTransport

bearer_scheme = OAuth2PasswordBearer(tokenUrl="/user/login", auto_error=False)


async def db_session(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.database.session_factory() as session:
        yield session


def settings_provider(request: Request) -> Settings:
    return request.app.state.settings


def mailer_provider(request: Request) -> MailTransport:
    return request.app.state.mailer


def authenticate(
    request: Request,
    token: str | None = Depends(bearer_scheme),
    settings: Settings = Depends(settings_provider),
) -> Identity:
    """Resolve the bearer token and attach the identity to the request."""

    if not token:
        raise Unauthorized()
    identity = AuthService(settings).authenticate(token)
    request.state.identity = identity
    return identity
