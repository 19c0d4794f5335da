from typing import Annotated

from fastapi import APIRouter, Query, Request

from ticketing.dependencies import AuthContext, EventServiceDep, OptionalUser
from ticketing.events.models import EventWindow
from ticketing.events.schemas import (
    EventCancel,
    EventCancelled,
    EventCreate,
    EventDetail,
    EventPublished,
    EventResponse,
    EventUpdate,
    StaffAssign,
    StaffAssignmentResponse,
)
from ticketing.events.service import CreateEventInput
from ticketing.responses import DataResponse, MessageResponse, PageResponse
from ticketing.validation import parse_body

router = APIRouter()


@router.post("", status_code=201, response_model=MessageResponse[EventResponse])
async def create_event(
    request: Request,
    ctx: AuthContext,
    service: EventServiceDep,
) -> MessageResponse[EventResponse]:
    data = await parse_body(request, EventCreate)
    result = await service.create_event(CreateEventInput.from_request(ctx.user.id, data))
    return MessageResponse(data=result.unwrap(), message="Event created successfully")


@router.get("", response_model=PageResponse[EventResponse])
async def list_events(
    service: EventServiceDep,
    when: EventWindow | None = None,
    search: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PageResponse[EventResponse]:
    events, pagination = await service.list_published(when, search, page, limit)
    return PageResponse(data=events, pagination=pagination)


@router.get("/{event_key}", response_model=DataResponse[EventDetail])
async def get_event(
    event_key: str,
    viewer: OptionalUser,
    service: EventServiceDep,
) -> DataResponse[EventDetail]:
    return DataResponse(data=await service.get_detail(event_key, viewer))


@router.patch("/{event_id}", response_model=MessageResponse[EventResponse])
async def update_event(
    event_id: str,
    request: Request,
    ctx: AuthContext,
    service: EventServiceDep,
) -> MessageResponse[EventResponse]:
    data = await parse_body(request, EventUpdate)
    changes = data.model_dump(exclude_unset=True)
    result = await service.update_event(event_id, ctx.user.id, changes)
    return MessageResponse(data=result.unwrap(), message="Event updated successfully")


@router.post("/{event_id}/publish", response_model=MessageResponse[EventPublished])
async def publish_event(
    event_id: str,
    ctx: AuthContext,
    service: EventServiceDep,
) -> MessageResponse[EventPublished]:
    result = await service.publish_event(event_id, ctx.user.id)
    return MessageResponse(data=result.unwrap(), message="Event published successfully")


@router.post("/{event_id}/cancel", response_model=MessageResponse[EventCancelled])
async def cancel_event(
    event_id: str,
    request: Request,
    ctx: AuthContext,
    service: EventServiceDep,
) -> MessageResponse[EventCancelled]:
    data = await parse_body(request, EventCancel)
    result = await service.cancel_event(event_id, ctx.user.id, data.reason)
    return MessageResponse(data=result.unwrap(), message="Event cancelled successfully")


@router.post(
    "/{event_id}/staff",
    status_code=201,
    response_model=MessageResponse[StaffAssignmentResponse],
)
async def assign_staff(
    event_id: str,
    request: Request,
    ctx: AuthContext,
    service: EventServiceDep,
) -> MessageResponse[StaffAssignmentResponse]:
    data = await parse_body(request, StaffAssign)
    result = await service.assign_staff(event_id, ctx.user.id, data.staff_id, data.role)
    return MessageResponse(data=result.unwrap(), message="Staff member assigned successfully")
