"""Endpoints for service-provider requests on tasks."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.dependencies import db_session, settings_provider
from marketplace.schemas import (
    CreateRequestPayload,
    Envelope,
    RequestDecision,
    RequestListResponse,
    RequestOut,
    RequestResponse,
)
from services import RequestService

router = APIRouter(tags=["Requests"])


@router.post("/request", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: CreateRequestPayload,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> RequestResponse:
    request = await RequestService(settings).create_request(
        session, task_id=payload.task_id, requester_id=payload.requester_id, message=payload.message
    )
    return RequestResponse(message="Request created successfully", request=RequestOut.model_validate(request))


@router.get("/requests", response_model=RequestListResponse)
async def list_requests(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> RequestListResponse:
    requests = await RequestService(settings).list_requests(session)
    return RequestListResponse(requests=[RequestOut.model_validate(item) for item in requests])


@router.get("/requests/task/{task_id}", response_model=RequestListResponse)
async def list_requests_for_task(
    task_id: str,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> RequestListResponse:
    requests = await RequestService(settings).list_for_task(session, task_id)
    return RequestListResponse(requests=[RequestOut.model_validate(item) for item in requests])


@router.get("/request/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: str,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> RequestResponse:
    request = await RequestService(settings).get_request(session, request_id)
    return RequestResponse(request=RequestOut.model_validate(request))


@router.post("/request/accept", response_model=RequestResponse)
async def accept_request(
    payload: RequestDecision,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> RequestResponse:
    request = await RequestService(settings).accept_request(session, payload.request_id)
    return RequestResponse(message="Request accepted", request=RequestOut.model_validate(request))


@router.post("/request/reject", response_model=RequestResponse)
async def reject_request(
    payload: RequestDecision,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> RequestResponse:
    request = await RequestService(settings).reject_request(session, payload.request_id)
    return RequestResponse(message="Request rejected", request=RequestOut.model_validate(request))


@router.delete("/request/{request_id}", response_model=Envelope)
async def delete_request(
    request_id: str,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_provider),
) -> Envelope:
    await RequestService(settings).delete_request(session, request_id)
    return Envelope(message="Request deleted successfully")
