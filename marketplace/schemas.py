"""Pydantic schemas shared across services and routers."""
from __future__ import annotations

import base64
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


@dataclass
class UploadedFile:
    filename: str
    content_type: str | None
    data: bytes


# --- Requests -------------------------------------------------------------


class LoginPayload(ApiModel):
    email: str
    password: str


class UserRegistration(ApiModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    firstname: str | None = None
    lastname: str | None = None
    phone_no: str | None = None
    address: str | None = None
    city: str | None = None
    province: str | None = None
    country: str | None = None
    zipcode: str | None = None
    gender: str | None = None


class ServiceProviderRegistration(UserRegistration):
    firstname: str
    lastname: str
    phone_no: str
    wage: float
    wage_type: str
    category_id: str | None = None
    sub_category_id: str | None = None


class UserUpdate(ApiModel):
    model_config = ConfigDict(extra="forbid")

    email: str | None = Field(None, min_length=3)
    firstname: str | None = None
    lastname: str | None = None
    phone_no: str | None = None
    address: str | None = None
    city: str | None = None
    province: str | None = None
    country: str | None = None
    zipcode: str | None = None
    gender: str | None = None
    wage: float | None = None
    wage_type: str | None = None
    category_id: str | None = None
    sub_category_id: str | None = None

    # Omitting email leaves it alone; sending null would clear a required column.
    @field_validator("email")
    @classmethod
    def _email_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("email cannot be null")
        return value


class ForgotPasswordPayload(ApiModel):
    email: str


class ResetPasswordPayload(ApiModel):
    token: str
    new_password: str = Field(..., min_length=1)


class CreateRequestPayload(ApiModel):
    task_id: str
    requester_id: str
    message: str | None = None


class RequestDecision(ApiModel):
    request_id: str


class CategoryCreate(ApiModel):
    name: str = Field(..., min_length=1)
    description: str | None = None


class SubCategoryCreate(ApiModel):
    name: str = Field(..., min_length=1)
    category_id: str


class TaskCreate(ApiModel):
    title: str = Field(..., min_length=1)
    owner_id: str
    description: str | None = None
    category_id: str | None = None
    budget: float | None = None


# --- Responses ------------------------------------------------------------


class CategoryOut(ApiModel):
    id: str
    name: str
    description: str | None = None


class SubCategoryOut(ApiModel):
    id: str
    category_id: str
    name: str


class ReviewOut(ApiModel):
    id: str
    rating: float
    comment: str | None = None


class DocumentOut(ApiModel):
    id: str
    name: str
    content_type: str | None = None
    size: int
    created_at: datetime


class UserOut(ApiModel):
    id: str
    email: str
    firstname: str | None = None
    lastname: str | None = None
    phone_no: str | None = None
    address: str | None = None
    city: str | None = None
    province: str | None = None
    country: str | None = None
    zipcode: str | None = None
    gender: str | None = None
    role: str
    category_id: str | None = None
    sub_category_id: str | None = None
    review_id: str | None = None
    wage: float | None = None
    wage_type: str | None = None
    image: str | None = Field(default=None, description="Base64 encoded profile image")
    image_content_type: str | None = None
    category: CategoryOut | None = None
    sub_category: SubCategoryOut | None = None
    review: ReviewOut | None = None
    documents: list[DocumentOut] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("image", mode="before")
    @classmethod
    def _encode_image(cls, value: object) -> object:
        if isinstance(value, (bytes, bytearray)):
            return base64.b64encode(value).decode("ascii")
        return value


class TaskOut(ApiModel):
    id: str
    owner_id: str
    category_id: str | None = None
    title: str
    description: str | None = None
    budget: float | None = None
    status: str
    created_at: datetime


class RequestOut(ApiModel):
    id: str
    task_id: str
    requester_id: str
    message: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class Envelope(ApiModel):
    success: bool = True
    message: str | None = None


class RegistrationResponse(Envelope):
    user: UserOut
    token: str


class LoginResponse(Envelope):
    user: UserOut
    access_token: str


class ProfileResponse(Envelope):
    user: UserOut


class UserDataResponse(Envelope):
    data: UserOut


class RequestResponse(Envelope):
    request: RequestOut


class RequestListResponse(Envelope):
    requests: list[RequestOut]


class CategoryResponse(Envelope):
    category: CategoryOut


class CategoryListResponse(Envelope):
    categories: list[CategoryOut]


class SubCategoryResponse(Envelope):
    sub_category: SubCategoryOut


class SubCategoryListResponse(Envelope):
    sub_categories: list[SubCategoryOut]


class TaskResponse(Envelope):
    task: TaskOut


class TaskListResponse(Envelope):
    tasks: list[TaskOut]
