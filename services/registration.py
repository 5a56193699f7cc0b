"""Account creation for customers and service providers."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.errors import BadRequest, Conflict, NotFound
from marketplace.models import Category, Document, SubCategory, User, UserRole
from marketplace.schemas import ServiceProviderRegistration, UploadedFile, UserRegistration
from marketplace.security import PasswordHasher, TokenService
from services.profile import check_upload, load_user

logger = logging.getLogger(__name__)


class RegistrationService:
    """Create users and, for service providers, their uploaded documents."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.hasher = PasswordHasher(settings.password_hash_rounds)
        self.tokens = TokenService(settings)

    async def register_user(self, session: AsyncSession, registration: UserRegistration) -> tuple[User, str]:
        await self._ensure_email_available(session, registration.email)

        user = User(
            **registration.model_dump(exclude={"password"}),
            password=self.hasher.hash(registration.password),
            role=UserRole.USER.value,
            documents=[],
        )
        session.add(user)
        await self._commit(session, user.email)

        logger.info("Registered user %s", user.id)
        saved = await load_user(session, user.id)
        return saved, self.tokens.issue_access_token(saved)

    async def register_service_provider(
        self,
        session: AsyncSession,
        registration: ServiceProviderRegistration,
        *,
        image: UploadedFile | None,
        document: UploadedFile | None,
    ) -> tuple[User, str]:
        missing = [name for name, upload in (("image", image), ("document", document)) if upload is None]
        if missing:
            raise BadRequest(f"Missing required file(s): {', '.join(missing)}")
        check_upload(image, "image", self.settings.max_upload_bytes)
        check_upload(document, "document", self.settings.max_upload_bytes)

        await self._ensure_email_available(session, registration.email)
        await self._ensure_references(session, registration)

        user = User(
            **registration.model_dump(exclude={"password"}),
            password=self.hasher.hash(registration.password),
            role=UserRole.SERVICE_PROVIDER.value,
            image=image.data,
            image_content_type=image.content_type,
            documents=[],
        )

        # User, Document and the back-reference are written in one transaction.
        try:
            session.add(user)
            await session.flush()

            stored = self._build_document(user, document)
            session.add(stored)
            await session.flush()

            user.documents.append(stored)
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            logger.warning("Service provider registration rejected: %s", exc.orig)
            raise Conflict("User with this email already exists.") from exc
        except SQLAlchemyError:
            await session.rollback()
            logger.exception("Service provider registration rolled back")
            raise

        logger.info("Registered service provider %s with document %s", user.id, stored.id)
        saved = await load_user(session, user.id)
        return saved, self.tokens.issue_access_token(saved)

    @staticmethod
    def _build_document(user: User, upload: UploadedFile) -> Document:
        return Document(
            name=upload.filename or "document",
            content_type=upload.content_type,
            data=upload.data,
            user_id=user.id,
        )

    async def _ensure_email_available(self, session: AsyncSession, email: str) -> None:
        result = await session.execute(select(User.id).where(User.email == email))
        if result.scalar_one_or_none() is not None:
            logger.warning("Registration attempt with an existing email")
            raise Conflict("Email already exists")

    async def _ensure_references(self, session: AsyncSession, registration: ServiceProviderRegistration) -> None:
        if registration.category_id and await session.get(Category, registration.category_id) is None:
            raise NotFound("Category not found")
        if registration.sub_category_id and await session.get(SubCategory, registration.sub_category_id) is None:
            raise NotFound("Sub-category not found")

    async def _commit(self, session: AsyncSession, email: str) -> None:
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            logger.warning("Registration for %s lost a race on the unique email", email)
            raise Conflict("Email already exists") from exc
