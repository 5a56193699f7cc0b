"""Job-application requests and their accept/reject lifecycle."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.errors import BadRequest, NotFound, RequestAlreadyDecided
from marketplace.models import JobRequest, RequestStatus, Task, User

logger = logging.getLogger(__name__)

# Legal status transitions; anything else is an already-decided request.
TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.ACCEPTED, RequestStatus.REJECTED}),
    RequestStatus.ACCEPTED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
}


class RequestService:
    """Create, list and decide requests made by service providers."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def create_request(
        self,
        session: AsyncSession,
        *,
        task_id: str,
        requester_id: str,
        message: str | None = None,
    ) -> JobRequest:
        if await session.get(Task, task_id) is None:
            raise NotFound("Task not found")
        requester = await session.get(User, requester_id)
        if requester is None:
            raise NotFound("User not found")
        if not requester.is_service_provider:
            raise BadRequest("Only service providers can apply to tasks")

        request = JobRequest(task_id=task_id, requester_id=requester_id, message=message)
        session.add(request)
        await session.commit()
        await session.refresh(request)
        logger.info("User %s applied to task %s (request %s)", requester_id, task_id, request.id)
        return request

    async def list_requests(self, session: AsyncSession) -> list[JobRequest]:
        result = await session.execute(select(JobRequest).order_by(JobRequest.created_at.desc()))
        return list(result.scalars().all())

    async def get_request(self, session: AsyncSession, request_id: str) -> JobRequest:
        request = await session.get(JobRequest, request_id)
        if request is None:
            raise NotFound("Request not found")
        return request

    async def list_for_task(self, session: AsyncSession, task_id: str) -> list[JobRequest]:
        stmt = select(JobRequest).where(JobRequest.task_id == task_id).order_by(JobRequest.created_at.desc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def accept_request(self, session: AsyncSession, request_id: str) -> JobRequest:
        return await self._decide(session, request_id, RequestStatus.ACCEPTED)

    async def reject_request(self, session: AsyncSession, request_id: str) -> JobRequest:
        return await self._decide(session, request_id, RequestStatus.REJECTED)

    async def delete_request(self, session: AsyncSession, request_id: str) -> None:
        request = await self.get_request(session, request_id)
        await session.delete(request)
        await session.commit()
        logger.info("Deleted request %s", request_id)

    async def _decide(self, session: AsyncSession, request_id: str, target: RequestStatus) -> JobRequest:
        request = await self.get_request(session, request_id)
        current = RequestStatus(request.status)

        if target not in TRANSITIONS[current]:
            if not self.settings.allow_request_redecision:
                raise RequestAlreadyDecided(f"Request is already {current.value}")
            logger.warning("Overwriting %s request %s with %s", current.value, request_id, target.value)

        request.status = target.value
        await session.commit()
        await session.refresh(request)
        logger.info("Request %s is now %s", request_id, target.value)
        return request
