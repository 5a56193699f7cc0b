"""Account, profile and password endpoints."""
from __future__ import annotations

from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, File, Form, Response, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.dependencies import authenticate, db_session, mailer_provider, settings_provider
from marketplace.errors import BadRequest, validation_message
from marketplace.schemas import (
    Envelope,
    ForgotPasswordPayload,
    LoginPayload,
    LoginResponse,
    ProfileResponse,
    RegistrationResponse,
    ResetPasswordPayload,
    ServiceProviderRegistration,
    UploadedFile,
    UserDataResponse,
    UserOut,
    UserRegistration,
)
from marketplace.security import Identity
from services import AuthService, PasswordRecoveryService, ProfileService, RegistrationService
from services.recovery import MailTransport

router = APIRouter(prefix="/user", tags=["Users"])


async def read_upload(upload: UploadFile | None) -> UploadedFile | None:
    if upload is None:
        return None
    data = await upload.read()
    return UploadedFile(filename=upload.filename or "", content_type=upload.content_type, data=data)


def _blank_to_none(value: str | None) -> str | None:
    return value or None


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and the RFC 5987 UTF-8 name."""

    fallback = "".join(ch for ch in filename if " " <= ch <= "~" and ch not in '"\\') or "document"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginPayload,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> LoginResponse:
    user, token = await AuthService(settings).login(session, email=payload.email, password=payload.password)
    return LoginResponse(message="Login successful", user=UserOut.model_validate(user), access_token=token)


@router.post("/register", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: UserRegistration,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> RegistrationResponse:
    user, token = await RegistrationService(settings).register_user(session, payload)
    return RegistrationResponse(
        message="User registered successfully", user=UserOut.model_validate(user), token=token
    )


@router.post("/registerServiceProvider", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_service_provider(
    firstname: str = Form(...),
    lastname: str = Form(...),
    phone_no: str = Form(..., alias="phoneNo"),
    email: str = Form(...),
    password: str = Form(...),
    wage_type: str = Form(..., alias="wageType"),
    wage: float = Form(...),
    address: str | None = Form(None),
    city: str | None = Form(None),
    province: str | None = Form(None),
    country: str | None = Form(None),
    zipcode: str | None = Form(None),
    gender: str | None = Form(None),
    category_id: str | None = Form(None, alias="categoryId"),
    sub_category_id: str | None = Form(None, alias="subCategoryId"),
    image: UploadFile | None = File(None),
    document: UploadFile | None = File(None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> RegistrationResponse:
    try:
        registration = ServiceProviderRegistration(
            firstname=firstname,
            lastname=lastname,
            phone_no=phone_no,
            email=email,
            password=password,
            wage_type=wage_type,
            wage=wage,
            address=address,
            city=city,
            province=province,
            country=country,
            zipcode=zipcode,
            gender=gender,
            category_id=_blank_to_none(category_id),
            sub_category_id=_blank_to_none(sub_category_id),
        )
    except ValidationError as exc:
        raise BadRequest(validation_message(exc)) from exc
    user, token = await RegistrationService(settings).register_service_provider(
        session,
        registration,
        image=await read_upload(image),
        document=await read_upload(document),
    )
    return RegistrationResponse(
        message="Service provider registered successfully.", user=UserOut.model_validate(user), token=token
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    identity: Identity = Depends(authenticate),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> ProfileResponse:
    profile = await ProfileService(settings).get_own_profile(session, identity)
    return ProfileResponse(user=profile)


@router.post("/forgot_password", response_model=Envelope)
async def forgot_password(
    payload: ForgotPasswordPayload,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
    mailer: MailTransport = Depends(mailer_provider),
) -> Envelope:
    await PasswordRecoveryService(settings, mailer).forgot_password(session, payload.email)
    return Envelope(message="Password reset email sent")


@router.post("/reset_password", response_model=Envelope)
async def reset_password(
    payload: ResetPasswordPayload,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> Envelope:
    await PasswordRecoveryService(settings).reset_password(session, payload.token, payload.new_password)
    return Envelope(message="Password updated successfully.")


@router.get("/document/{document_id}")
async def download_document(
    document_id: str,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> Response:
    document = await ProfileService(settings).get_document(session, document_id)
    return Response(
        content=document.data,
        media_type=document.content_type or "application/octet-stream",
        headers={"Content-Disposition": content_disposition(document.name)},
    )


@router.post("/updateUser/{user_id}", response_model=ProfileResponse)
async def update_user(
    user_id: str,
    changes: dict[str, Any] = Body(...),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> ProfileResponse:
    user = await ProfileService(settings).update_user(session, user_id, changes)
    return ProfileResponse(message="User updated successfully", user=UserOut.model_validate(user))


@router.post("/updateUser/{user_id}/files", response_model=ProfileResponse)
async def update_user_files(
    user_id: str,
    image: UploadFile | None = File(None),
    document: UploadFile | None = File(None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> ProfileResponse:
    user = await ProfileService(settings).replace_files(
        session,
        user_id,
        image=await read_upload(image),
        document=await read_upload(document),
    )
    return ProfileResponse(message="User updated successfully", user=UserOut.model_validate(user))


@router.get("/{user_id}", response_model=UserDataResponse)
async def get_user(
    user_id: str,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> UserDataResponse:
    user = await ProfileService(settings).get_by_user_id(session, user_id)
    return UserDataResponse(data=UserOut.model_validate(user))
