"""Categories, sub-categories and tasks that requests point at."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.errors import Conflict, NotFound
from marketplace.models import Category, SubCategory, Task, User
from marketplace.schemas import CategoryCreate, SubCategoryCreate, TaskCreate


class CatalogService:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def create_category(self, session: AsyncSession, payload: CategoryCreate) -> Category:
        category = Category(name=payload.name, description=payload.description)
        session.add(category)
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            raise Conflict("Category already exists") from exc
        return category

    async def list_categories(self, session: AsyncSession) -> list[Category]:
        result = await session.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def create_sub_category(self, session: AsyncSession, payload: SubCategoryCreate) -> SubCategory:
        if await session.get(Category, payload.category_id) is None:
            raise NotFound("Category not found")
        sub_category = SubCategory(name=payload.name, category_id=payload.category_id)
        session.add(sub_category)
        await session.commit()
        return sub_category

    async def list_sub_categories(self, session: AsyncSession, category_id: str) -> list[SubCategory]:
        stmt = select(SubCategory).where(SubCategory.category_id == category_id).order_by(SubCategory.name)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def create_task(self, session: AsyncSession, payload: TaskCreate) -> Task:
        if await session.get(User, payload.owner_id) is None:
            raise NotFound("User not found")
        if payload.category_id and await session.get(Category, payload.category_id) is None:
            raise NotFound("Category not found")
        task = Task(**payload.model_dump())
        session.add(task)
        await session.commit()
        await session.refresh(task)
        return task

    async def list_tasks(self, session: AsyncSession) -> list[Task]:
        result = await session.execute(select(Task).order_by(Task.created_at.desc()))
        return list(result.scalars().all())

    async def get_task(self, session: AsyncSession, task_id: str) -> Task:
        task = await session.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found")
        return task
