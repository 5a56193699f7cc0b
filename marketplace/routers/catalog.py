"""Reference data: categories, sub-categories and tasks."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.dependencies import db_session, settings_provider
from marketplace.schemas import (
    CategoryCreate,
    CategoryListResponse,
    CategoryOut,
    CategoryResponse,
    SubCategoryCreate,
    SubCategoryListResponse,
    SubCategoryOut,
    SubCategoryResponse,
    TaskCreate,
    TaskListResponse,
    TaskOut,
    TaskResponse,
)
from services import CatalogService

router = APIRouter(tags=["Catalog"])


@router.post("/category", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> CategoryResponse:
    category = await CatalogService(settings).create_category(session, payload)
    return CategoryResponse(category=CategoryOut.model_validate(category))


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> CategoryListResponse:
    categories = await CatalogService(settings).list_categories(session)
    return CategoryListResponse(categories=[CategoryOut.model_validate(item) for item in categories])


@router.post("/subcategory", response_model=SubCategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_sub_category(
    payload: SubCategoryCreate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> SubCategoryResponse:
    sub_category = await CatalogService(settings).create_sub_category(session, payload)
    return SubCategoryResponse(sub_category=SubCategoryOut.model_validate(sub_category))


@router.get("/subcategories/{category_id}", response_model=SubCategoryListResponse)
async def list_sub_categories(
    category_id: str,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> SubCategoryListResponse:
    sub_categories = await CatalogService(settings).list_sub_categories(session, category_id)
    return SubCategoryListResponse(sub_categories=[SubCategoryOut.model_validate(item) for item in sub_categories])


@router.post("/task", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> TaskResponse:
    task = await CatalogService(settings).create_task(session, payload)
    return TaskResponse(task=TaskOut.model_validate(task))


@router.get("/tasks", response_model=TaskListResponse)
async def list_tasks(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> TaskListResponse:
    tasks = await CatalogService(settings).list_tasks(session)
    return TaskListResponse(tasks=[TaskOut.model_validate(item) for item in tasks])


@router.get("/task/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> TaskResponse:
    task = await CatalogService(settings).get_task(session, task_id)
    return TaskResponse(task=TaskOut.model_validate(task))
