"""Reading and updating user profiles."""
from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.errors import BadRequest, Conflict, NotFound
from marketplace.models import Category, Document, SubCategory, User, UserRole
from marketplace.schemas import UploadedFile, UserOut, UserUpdate
from marketplace.security import Identity

logger = logging.getLogger(__name__)

_BASE_PROFILE_FIELDS = frozenset(
    {
        "email",
        "firstname",
        "lastname",
        "phone_no",
        "address",
        "city",
        "province",
        "country",
        "zipcode",
        "gender",
    }
)

# Fields a user may change about themselves, keyed by role.
PROFILE_UPDATE_POLICY: dict[str, frozenset[str]] = {
    UserRole.USER.value: _BASE_PROFILE_FIELDS,
    UserRole.SERVICE_PROVIDER.value: _BASE_PROFILE_FIELDS
    | {"wage", "wage_type", "category_id", "sub_category_id"},
}

_ALIASES = {field.alias or name: name for name, field in UserUpdate.model_fields.items()}


async def load_user(session: AsyncSession, user_id: str) -> User | None:
    """Fetch a user with documents and reference data expanded."""

    stmt = select(User).where(User.id == user_id).execution_options(populate_existing=True)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


def check_upload(upload: UploadedFile, field: str, limit: int) -> None:
    if not upload.data:
        raise BadRequest(f"Uploaded {field} is empty.")
    if len(upload.data) > limit:
        raise BadRequest(f"Uploaded {field} exceeds the {limit} byte limit.")


class ProfileService:
    """Expose user profiles and apply allow-listed updates."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def get_by_user_id(self, session: AsyncSession, user_id: str) -> User:
        user = await load_user(session, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    async def get_own_profile(self, session: AsyncSession, identity: Identity) -> UserOut:
        user = await self.get_by_user_id(session, identity.user_id)
        profile = UserOut.model_validate(user)
        if not user.is_service_provider:
            profile = profile.model_copy(
                update={"category_id": None, "sub_category_id": None, "category": None, "sub_category": None}
            )
        return profile

    async def update_user(self, session: AsyncSession, user_id: str, changes: dict[str, Any]) -> User:
        user = await self.get_by_user_id(session, user_id)

        requested = {_ALIASES.get(key, key) for key in changes}
        allowed = PROFILE_UPDATE_POLICY.get(user.role, _BASE_PROFILE_FIELDS)
        rejected = sorted(requested - allowed)
        if rejected:
            raise BadRequest(f"Fields not allowed for update: {', '.join(rejected)}")

        try:
            update = UserUpdate.model_validate(changes).model_dump(exclude_unset=True)
        except ValidationError as exc:
            raise BadRequest(f"Invalid update: {exc.errors()[0]['msg']}") from exc

        if "email" in update and update["email"] != user.email:
            existing = await session.execute(select(User.id).where(User.email == update["email"]))
            if existing.scalar_one_or_none() is not None:
                raise Conflict("Email already exists")
        if update.get("category_id") and await session.get(Category, update["category_id"]) is None:
            raise NotFound("Category not found")
        if update.get("sub_category_id") and await session.get(SubCategory, update["sub_category_id"]) is None:
            raise NotFound("Sub-category not found")

        for key, value in update.items():
            setattr(user, key, value)
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            raise Conflict("Email already exists") from exc
        logger.info("Updated fields %s for user %s", sorted(update), user.id)
        return await self.get_by_user_id(session, user.id)

    async def replace_files(
        self,
        session: AsyncSession,
        user_id: str,
        *,
        image: UploadedFile | None = None,
        document: UploadedFile | None = None,
    ) -> User:
        if image is None and document is None:
            raise BadRequest("Provide an image or a document to upload.")
        user = await self.get_by_user_id(session, user_id)

        if image is not None:
            check_upload(image, "image", self.settings.max_upload_bytes)
            user.image = image.data
            user.image_content_type = image.content_type
        if document is not None:
            check_upload(document, "document", self.settings.max_upload_bytes)
            user.documents.append(
                Document(name=document.filename, content_type=document.content_type, data=document.data, user_id=user.id)
            )

        await session.commit()
        logger.info("Stored new files for user %s", user.id)
        return await self.get_by_user_id(session, user.id)

    async def get_document(self, session: AsyncSession, document_id: str) -> Document:
        document = await session.get(Document, document_id)
        if document is None:
            raise NotFound("Document not found")
        return document
